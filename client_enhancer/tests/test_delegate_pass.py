"""Tests for the delegate hierarchy rewrites of the client declarations."""

import re
import unittest
from pathlib import Path

import pytest

from client_enhancer.pipeline.analyzer import DelegateHierarchyResolver
from client_enhancer.pipeline.config import EnhancerConfig
from client_enhancer.pipeline.declarations import DeclarationParser, DeclarationSerializer, MemberKind
from client_enhancer.pipeline.schema_graph import SchemaLoader
from client_enhancer.pipeline.transform import DelegateTransformer

ASSET_DIR = Path(__file__).parent / "test_data" / "asset_client"


def squash(text):
    """Collapse all whitespace so type expressions compare by tokens."""
    return re.sub(r"\s+", "", text)


def transform(graph, source, config=None):
    parser = DeclarationParser()
    document = parser.parse(source)
    result = DelegateTransformer(DelegateHierarchyResolver(graph), config).transform_document(document)
    return DeclarationSerializer().serialize(result), result


def namespace_text(source):
    start = source.index("export namespace Prisma {")
    end = source.index("\n}\n", start) + 3
    return source[start:end]


class TestAssetClient(unittest.TestCase):
    """Rewrites applied to the Asset/Video/Document fixture client."""

    @classmethod
    def setUpClass(cls):
        cls.graph = SchemaLoader().load(ASSET_DIR / "schema.json")
        with open(ASSET_DIR / "index.d.ts", encoding="utf-8", newline="") as f:
            cls.source = f.read()
        cls.output, document = transform(cls.graph, cls.source)
        cls.body = {d.name: d for d in document.get_module("Prisma").body}
        cls.serializer = DeclarationSerializer()

    def members(self, name):
        return [m.name for m in self.body[name].direct_members()]

    def test_aux_members_removed_everywhere_in_namespace(self):
        self.assertNotIn("delegate_aux", namespace_text(self.output))
        self.assertIn("delegate_aux", namespace_text(self.source))

    def test_aux_members_removed_from_payload_objects(self):
        self.assertEqual(self.members("$VideoPayload"), ["name", "objects", "scalars", "composites"])
        objects = self.body["$VideoPayload"].find_member("objects")
        self.assertNotIn("delegate_aux", self.body["$VideoPayload"].member_text(objects))

    def test_aux_members_removed_from_variables_and_client_interface(self):
        self.assertEqual(self.members("VideoRelationFields"), ["owner"])
        client = self.body["Prisma__AssetClient"]
        self.assertEqual([m.name for m in client.direct_members() if m.kind == MemberKind.METHOD], ["owner"])

    def test_delegate_create_operations_removed(self):
        self.assertEqual(self.members("AssetDelegate"), ["findUnique", "update", "fields"])
        text = self.serializer.serialize_declaration(self.body["AssetDelegate"])
        self.assertNotIn("Create a Asset.", text)
        self.assertNotIn("Create many Assets.", text)
        self.assertIn("Update one Asset.", text)
        self.assertNotIn("\n\n\n", text)

    def test_non_delegate_operations_kept(self):
        self.assertEqual(self.members("UserDelegate"), ["create", "delete"])
        self.assertEqual(self.members("VideoDelegate"), ["create", "upsert"])

    def test_discriminator_removed_from_concrete_inputs(self):
        cases = {
            "VideoCreateInput": ["url", "owner", "asset"],
            "VideoUncheckedCreateInput": ["id", "ownerId", "url", "assetId"],
            "VideoUpdateInput": ["url", "owner"],
            "DocumentCreateInput": ["pages", "owner"],
        }
        for name, expected in cases.items():
            with self.subTest(declaration=name):
                self.assertEqual(self.members(name), expected)

    def test_concrete_input_text(self):
        self.assertEqual(
            self.serializer.serialize_declaration(self.body["VideoCreateInput"]),
            "export type VideoCreateInput = {\n"
            "    url: string\n"
            "    owner: UserCreateNestedOneWithoutAssetsInput\n"
            "    asset: AssetCreateNestedOneWithoutDelegate_aux_videoInput\n"
            "  }",
        )

    def test_discriminator_kept_outside_create_and_update_inputs(self):
        self.assertEqual(self.members("VideoWhereInput"), ["AND", "kind", "url"])
        self.assertEqual(self.members("AssetScalarFieldEnum"), ["id", "kind", "ownerId"])
        self.assertEqual(self.members("AssetCreateInput"), ["kind", "owner"])

    def test_nested_create_removed_from_delegate_inputs(self):
        self.assertEqual(self.members("AssetCreateNestedManyWithoutOwnerInput"), ["createMany", "connect"])
        self.assertEqual(self.members("AssetUpdateManyWithoutOwnerNestedInput"), ["set", "disconnect", "update"])

    def test_delegate_relation_removed_from_nested_concrete_input(self):
        self.assertEqual(self.members("VideoCreateWithoutDelegate_aux_Video_asset_VideoInput"), ["url", "owner"])

    def test_unrelated_declarations_untouched(self):
        self.assertEqual(self.members("UserCreateInput"), ["email", "assets"])
        self.assertEqual(self.members("$UserPayload"), ["name", "objects", "scalars", "composites"])

    def test_payload_union(self):
        payload = self.body["$AssetPayload"]
        self.assertEqual(
            payload.value,
            "($VideoPayload<ExtArgs> & { scalars: { kind: 'Video' } }) | ($DocumentPayload<ExtArgs> & { scalars: { kind: 'Document' } })",
        )
        self.assertTrue(payload.text.startswith("export type $AssetPayload<ExtArgs extends $Extensions.InternalArgs"))

    def test_text_outside_namespace_unchanged(self):
        source_ns = namespace_text(self.source)
        output_ns = namespace_text(self.output)
        before, after = self.source.split(source_ns)
        self.assertEqual(self.output, before + output_ns + after)

    def test_output_parses_cleanly(self):
        self.assertFalse(DeclarationParser().has_errors(self.output))

    def test_rewrites_are_idempotent(self):
        again, _ = transform(self.graph, self.output)
        self.assertEqual(again, self.output)


class TestLayeredHierarchy:
    @pytest.fixture
    def graph(self, schema):
        return schema.graph(
            schema.model("Base", ["id", "type"], delegate="type"),
            schema.model("Mid", ["kind"], delegate="kind", supers=["Base"]),
            schema.model("Leaf", ["name"], supers=["Mid"]),
        )

    def test_leaf_input_loses_whole_discriminator_chain(self, graph):
        source = "export namespace Prisma {\n  export type LeafCreateInput = {\n    type: string\n    kind: string\n    name: string\n  }\n}\n"
        output, _ = transform(graph, source)
        assert output == "export namespace Prisma {\n  export type LeafCreateInput = {\n    name: string\n  }\n}\n"

    def test_mid_input_loses_base_discriminator(self, graph):
        source = "export namespace Prisma {\n  export type MidUncheckedUpdateInput = {\n    type?: string\n    kind?: string\n  }\n}\n"
        output, _ = transform(graph, source)
        assert "type?" not in output
        assert "kind?: string" in output

    def test_each_delegate_payload_is_a_union(self, graph):
        source = (
            "export namespace Prisma {\n"
            "  export type $BasePayload = { name: 'Base' }\n"
            "  export type $MidPayload = { name: 'Mid' }\n"
            "  export type $LeafPayload = { name: 'Leaf' }\n"
            "}\n"
        )
        _, document = transform(graph, source)
        body = {d.name: d for d in document.get_module("Prisma").body}
        assert body["$BasePayload"].value == "($MidPayload & { scalars: { type: 'Mid' } })"
        assert body["$MidPayload"].value == "($LeafPayload & { scalars: { kind: 'Leaf' } })"
        assert body["$LeafPayload"].value == "{ name: 'Leaf' }"


class TestPayloadUnion:
    def test_union_over_subtypes_in_index_order(self, schema):
        graph = schema.graph(
            schema.model("Base", ["id", "kind"], delegate="kind"),
            schema.model("A", ["a"], supers=["Base"]),
            schema.model("B", ["b"], supers=["Base"]),
        )
        output, document = transform(graph, "export namespace Prisma {\n  export type $BasePayload = {\n    id: string\n  }\n}\n")
        value = document.get_module("Prisma").body[0].value
        assert squash(value) == squash("($APayload & {scalars:{kind:'A'}}) | ($BPayload & {scalars:{kind:'B'}})")
        assert "id: string" not in output

    def test_malformed_discriminator_keeps_flat_payload(self, schema, caplog):
        graph = schema.graph(
            schema.model("Base", ["id"], delegate="missing"),
            schema.model("A", ["a"], supers=["Base"]),
        )
        source = "export namespace Prisma {\n  export type $BasePayload = {\n    id: string\n  }\n}\n"
        output, _ = transform(graph, source)
        assert output == source
        assert "unknown field missing" in caplog.text

    def test_payload_outside_namespace_untouched(self, schema):
        graph = schema.graph(
            schema.model("Base", ["id", "kind"], delegate="kind"),
            schema.model("A", ["a"], supers=["Base"]),
        )
        source = "export type $BasePayload = { id: string }\nexport namespace Other {\n  export type $BasePayload = { id: string }\n}\n"
        output, _ = transform(graph, source)
        assert output == source


class TestNestedRelationInput:
    @pytest.fixture
    def graph(self, schema):
        return schema.graph(
            schema.model("Content", ["id", "contentType"], delegate="contentType"),
            schema.model(
                "Post_Item",
                ["title", "contentId", schema.relation("content_ref", "Content", ["contentId"])],
                supers=["Content"],
            ),
        )

    def test_names_with_underscores_split_by_schema(self, graph):
        source = (
            "export namespace Prisma {\n"
            "  export type Post_ItemCreateWithoutDelegate_aux_Post_Item_content_ref_Post_ItemInput = {\n"
            "    title: string\n"
            "    contentId: string\n"
            "    content_ref: ContentCreateNestedOneWithoutDelegate_aux_post_ItemInput\n"
            "  }\n"
            "}\n"
        )
        _, document = transform(graph, source)
        declaration = document.get_module("Prisma").body[0]
        assert [m.name for m in declaration.members] == ["title"]

    def test_malformed_relation_fields_keep_foreign_keys_only(self, schema, caplog):
        relation = schema.relation("asset", "Asset", ["assetId"])
        relation["attributes"][0]["args"][0]["value"] = "assetId"
        graph = schema.graph(
            schema.model("Asset", ["id", "kind"], delegate="kind"),
            schema.model("Video", ["url", "assetId", relation], supers=["Asset"]),
        )
        source = (
            "export namespace Prisma {\n"
            "  export type VideoCreateWithoutDelegate_aux_Video_asset_VideoInput = {\n"
            "    url: string\n"
            "    kind: string\n"
            "    assetId: string\n"
            "    delegate_aux_other?: string\n"
            "    asset: AssetCreateNestedOneWithoutDelegate_aux_videoInput\n"
            "  }\n"
            "}\n"
        )
        output, _ = transform(graph, source)
        assert output == (
            "export namespace Prisma {\n"
            "  export type VideoCreateWithoutDelegate_aux_Video_asset_VideoInput = {\n"
            "    url: string\n"
            "    assetId: string\n"
            "  }\n"
            "}\n"
        )
        assert "malformed fields argument" in caplog.text


class TestConfiguration:
    def test_custom_aux_prefix_and_namespace(self, schema):
        graph = schema.graph(
            schema.model("Asset", ["id", "kind"], delegate="kind"),
            schema.model("Video", ["url"], supers=["Asset"]),
        )
        config = EnhancerConfig(aux_prefix="aux", crud_namespace="Db")
        source = "export namespace Db {\n  export type VideoCreateInput = {\n    kind: string\n    aux_asset: string\n    url: string\n  }\n}\n"
        output, _ = transform(graph, source, config)
        assert output == "export namespace Db {\n  export type VideoCreateInput = {\n    url: string\n  }\n}\n"

