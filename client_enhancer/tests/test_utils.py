import re

import pytest

from client_enhancer.utils import names_alternation, upper_case_first


@pytest.mark.parametrize(
    "text, expected",
    [
        ("delegate_aux", "Delegate_aux"),
        ("asset", "Asset"),
        ("Asset", "Asset"),
        ("", ""),
    ],
)
def test_upper_case_first(text, expected):
    assert upper_case_first(text) == expected


class TestNamesAlternation:
    def test_longest_name_first(self):
        assert names_alternation(["Post", "PostTag", "Tag"]) == "(PostTag|Post|Tag)"

    def test_longer_name_wins_in_match(self):
        pattern = re.compile(names_alternation(["Post", "PostTag"]) + r"CreateInput")
        assert pattern.fullmatch("PostTagCreateInput").group(1) == "PostTag"
        assert pattern.fullmatch("PostCreateInput").group(1) == "Post"

    def test_names_are_escaped(self):
        pattern = re.compile(names_alternation(["A$B"]))
        assert pattern.fullmatch("A$B")
        assert not pattern.fullmatch("AB")
