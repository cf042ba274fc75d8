"""Tests for delegate hierarchy resolution."""

import unittest

import pytest

from client_enhancer.pipeline.analyzer import (
    DelegateHierarchyResolver,
    build_index,
    discriminator_chain,
    discriminator_of,
    has_auth_in_default,
    needs_projection,
    resolve_discriminator,
)
from client_enhancer.pipeline.errors import SchemaError
from client_enhancer.pipeline.schema_graph import SchemaLoader


@pytest.fixture
def layered_graph(schema):
    """Base(@@delegate(type)) <- Mid(@@delegate(kind)) <- Leaf."""
    return schema.graph(
        schema.model("Base", ["id", "type"], delegate="type"),
        schema.model("Mid", ["kind"], delegate="kind", supers=["Base"]),
        schema.model("Leaf", ["name"], supers=["Mid"]),
    )


class TestBuildIndex:
    def test_fixture_index(self, asset_graph):
        index = build_index(asset_graph)
        assert [e.delegate.name for e in index] == ["Asset"]
        assert index[0].subtype_names == ["Video", "Document"]

    def test_layered_index_in_declaration_order(self, layered_graph):
        index = build_index(layered_graph)
        assert [(e.delegate.name, e.subtype_names) for e in index] == [("Base", ["Mid"]), ("Mid", ["Leaf"])]

    def test_delegate_without_subtypes_is_not_indexed(self, schema):
        graph = schema.graph(schema.model("Asset", ["id", "kind"], delegate="kind"))
        assert build_index(graph) == []
        assert not needs_projection(graph)

    def test_plain_inheritance_is_not_indexed(self, schema):
        graph = schema.graph(
            schema.model("Base", ["id"]),
            schema.model("Sub", ["name"], supers=["Base"]),
        )
        assert build_index(graph) == []

    def test_subtype_of_several_delegates_appears_under_each(self, schema):
        graph = schema.graph(
            schema.model("A", ["a"], delegate="a"),
            schema.model("B", ["b"], delegate="b"),
            schema.model("C", ["c"], supers=["A", "B"]),
        )
        index = build_index(graph)
        assert [(e.delegate.name, e.subtype_names) for e in index] == [("A", ["C"]), ("B", ["C"])]
        assert DelegateHierarchyResolver(graph).governing_entry("C").delegate.name == "A"


class TestDiscriminators:
    def test_resolve_discriminator(self, asset_graph):
        asset = asset_graph.get_model("Asset")
        assert resolve_discriminator(asset) is asset.get_field("kind")
        assert resolve_discriminator(asset_graph.get_model("Video")) is None

    def test_marker_without_reference_raises(self):
        graph = SchemaLoader().parse(
            {"models": [{"name": "Asset", "attributes": [{"name": "@@delegate", "args": [{"value": "kind"}]}], "fields": [{"name": "kind"}]}]}
        )
        with pytest.raises(SchemaError, match="must reference a discriminator field"):
            resolve_discriminator(graph.get_model("Asset"))

    def test_malformed_marker_degrades_to_none(self, schema, caplog):
        graph = schema.graph(schema.model("Asset", ["id"], delegate="missing"))
        assert discriminator_of(graph.get_model("Asset")) is None
        assert "unknown field missing" in caplog.text

    def test_chain_starts_at_nearest_delegate(self, layered_graph):
        mid = layered_graph.get_model("Mid")
        assert [f.name for f in discriminator_chain(mid)] == ["kind", "type"]

    def test_chain_of_root_delegate(self, layered_graph):
        assert [f.name for f in discriminator_chain(layered_graph.get_model("Base"))] == ["type"]

    def test_chain_skips_non_delegate_models(self, layered_graph):
        assert [f.name for f in discriminator_chain(layered_graph.get_model("Leaf"))] == ["kind", "type"]

    def test_shared_discriminator_is_listed_once(self, schema):
        graph = schema.graph(
            schema.model("Base", ["id", "type"], delegate="type"),
            schema.model("Mid", ["name"], delegate="type", supers=["Base"]),
        )
        assert [f.name for f in discriminator_chain(graph.get_model("Mid"))] == ["type"]

    def test_cycle_terminates(self, schema):
        graph = schema.graph(
            schema.model("A", ["a"], delegate="a", supers=["B"]),
            schema.model("B", ["b"], delegate="b", supers=["A"]),
        )
        assert [f.name for f in discriminator_chain(graph.get_model("A"))] == ["a", "b"]


class TestLogicalClientDecision(unittest.TestCase):
    def setUp(self):
        self.loader = SchemaLoader()

    def _graph(self, default_value):
        return self.loader.parse(
            {
                "models": [
                    {
                        "name": "Post",
                        "fields": [
                            {"name": "id", "type": "Int"},
                            {"name": "ownerId", "type": "Int", "attributes": [{"name": "@default", "args": [{"value": default_value}]}]},
                        ],
                    }
                ]
            }
        )

    def test_auth_in_default(self):
        cases = {
            "direct call": {"kind": "invocation", "function": "auth"},
            "member access": {"kind": "member", "operand": {"kind": "invocation", "function": "auth"}, "member": "id"},
            "nested argument": {"kind": "invocation", "function": "coalesce", "args": [{"kind": "invocation", "function": "auth"}]},
        }
        for name, value in cases.items():
            with self.subTest(case=name):
                graph = self._graph(value)
                self.assertTrue(has_auth_in_default(graph))
                resolver = DelegateHierarchyResolver(graph)
                self.assertFalse(resolver.needs_projection())
                self.assertTrue(resolver.needs_logical_client())

    def test_other_defaults(self):
        for value in [0, {"kind": "invocation", "function": "now"}, {"kind": "reference", "target": "id"}]:
            with self.subTest(value=value):
                graph = self._graph(value)
                self.assertFalse(has_auth_in_default(graph))
                self.assertFalse(DelegateHierarchyResolver(graph).needs_logical_client())


class TestResolver:
    def test_names(self, layered_graph):
        resolver = DelegateHierarchyResolver(layered_graph)
        assert resolver.delegate_names == ["Base", "Mid"]
        assert resolver.concrete_names == ["Mid", "Leaf"]

    def test_governing_entry(self, layered_graph):
        resolver = DelegateHierarchyResolver(layered_graph)
        assert resolver.governing_entry("Leaf").delegate.name == "Mid"
        assert resolver.governing_entry("Mid").delegate.name == "Base"
        assert resolver.governing_entry("Base") is None

    def test_entry_for_delegate(self, asset_graph):
        resolver = DelegateHierarchyResolver(asset_graph)
        assert resolver.entry_for_delegate("Asset").subtype_names == ["Video", "Document"]
        assert resolver.entry_for_delegate("Video") is None
        assert resolver.needs_projection()
        assert resolver.needs_logical_client()
