from pathlib import Path

import pytest

from client_enhancer.pipeline.declarations import DeclarationParser, DeclarationSerializer
from client_enhancer.pipeline.schema_graph import SchemaLoader

TEST_DATA = Path(__file__).parent / "test_data"


class SchemaBuilder:
    """Builds schema graph dictionaries for tests."""

    @staticmethod
    def reference(target):
        return {"kind": "reference", "target": target}

    def model(self, name, fields=(), delegate=None, supers=(), attributes=()):
        attrs = list(attributes)
        if delegate is not None:
            attrs.append({"name": "@@delegate", "args": [{"value": self.reference(delegate)}]})
        return {
            "name": name,
            "attributes": attrs,
            "superTypes": list(supers),
            "fields": [f if isinstance(f, dict) else {"name": f, "type": "String"} for f in fields],
        }

    def relation(self, name, type_name, fields, references=("id",)):
        return {
            "name": name,
            "type": type_name,
            "attributes": [
                {
                    "name": "@relation",
                    "args": [
                        {"name": "fields", "value": {"kind": "array", "items": [self.reference(f) for f in fields]}},
                        {"name": "references", "value": {"kind": "array", "items": [self.reference(r) for r in references]}},
                    ],
                }
            ],
        }

    def graph(self, *models):
        return SchemaLoader().parse({"models": list(models)})


@pytest.fixture
def schema():
    return SchemaBuilder()


@pytest.fixture(scope="session")
def parser():
    return DeclarationParser()


@pytest.fixture(scope="session")
def serializer():
    return DeclarationSerializer()


@pytest.fixture
def asset_dir():
    return TEST_DATA / "asset_client"


@pytest.fixture
def asset_graph(asset_dir):
    return SchemaLoader().load(asset_dir / "schema.json")


@pytest.fixture
def asset_source(asset_dir):
    with open(asset_dir / "index.d.ts", encoding="utf-8", newline="") as f:
        return f.read()
