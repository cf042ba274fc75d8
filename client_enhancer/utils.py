"""
Utility functions for the client enhancer.
"""

import re


def upper_case_first(text: str) -> str:
    """Upper-case the first character of a string, leaving the rest untouched.

    Examples:
        "delegate_aux" -> "Delegate_aux"
        "asset" -> "Asset"
        "" -> ""
    """
    if not text:
        return ""
    return text[0].upper() + text[1:]


def names_alternation(names: list[str]) -> str:
    """Build a regex alternation group matching any of the given names.

    Longer names are tried first so that "PostTag" wins over "Post".

    Args:
        names: The names to match

    Returns:
        Regex group string, e.g. "(PostTag|Post)"
    """
    ordered = sorted(set(names), key=lambda n: (-len(n), n))
    return "(" + "|".join(re.escape(n) for n in ordered) + ")"
