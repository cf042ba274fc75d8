"""
Schema graph loader.

Builds a SchemaGraph from the JSON serialization of an already-resolved
schema, then links supertype and field references. The DSL itself is
parsed elsewhere; this loader only consumes its resolved output.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import SchemaError
from .nodes import (
    RELATION_ATTRIBUTE,
    ArrayExpr,
    Attribute,
    AttributeArg,
    DataModel,
    DataModelField,
    Expression,
    InvocationExpr,
    LiteralExpr,
    MemberAccessExpr,
    ReferenceExpr,
    SchemaGraph,
    SuperTypeRef,
)

logger = logging.getLogger(__name__)


class SchemaLoader:
    """Loads a resolved schema graph from JSON."""

    def load(self, path: Path | str) -> SchemaGraph:
        """
        Load a schema graph from a JSON file.

        Args:
            path: Path of the schema graph JSON document

        Returns:
            The linked SchemaGraph

        Raises:
            SchemaError: If the file is unreadable or not a valid schema graph
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Schema graph {path} is not valid JSON: {e}") from e
        except OSError as e:
            raise SchemaError(f"Cannot read schema graph {path}: {e}") from e

        graph = self.parse(data)
        graph.source_path = str(path)
        return graph

    def parse(self, data: dict[str, Any]) -> SchemaGraph:
        """
        Parse a schema graph dictionary and link its references.

        Args:
            data: The schema graph dictionary (a "models" list)

        Returns:
            The linked SchemaGraph
        """
        if not isinstance(data, dict) or not isinstance(data.get("models"), list):
            raise SchemaError('Schema graph must be an object with a "models" list')

        graph = SchemaGraph()
        for index, model_data in enumerate(data["models"]):
            graph.models.append(self._parse_model(model_data, f"models[{index}]"))

        self._link(graph)
        return graph

    def _parse_model(self, data: dict[str, Any], path: str) -> DataModel:
        """Parse a single model entry."""
        if not isinstance(data, dict) or not data.get("name"):
            raise SchemaError(f"{path}: model must be an object with a name")

        name = data["name"]
        model = DataModel(
            name=name,
            attributes=[self._parse_attribute(a, f"{path}.attributes") for a in data.get("attributes", [])],
            super_types=[SuperTypeRef(name=s) for s in data.get("superTypes", [])],
        )
        for field_data in data.get("fields", []):
            if not isinstance(field_data, dict) or not field_data.get("name"):
                raise SchemaError(f"{path}: field of model {name} must be an object with a name")
            model.fields.append(
                DataModelField(
                    name=field_data["name"],
                    type_name=field_data.get("type", ""),
                    is_array=bool(field_data.get("array", False)),
                    is_optional=bool(field_data.get("optional", False)),
                    attributes=[self._parse_attribute(a, f"{path}.{field_data['name']}") for a in field_data.get("attributes", [])],
                    model_name=name,
                )
            )
        return model

    def _parse_attribute(self, data: dict[str, Any], path: str) -> Attribute:
        """Parse an attribute and its arguments."""
        if not isinstance(data, dict) or not data.get("name"):
            raise SchemaError(f"{path}: attribute must be an object with a name")

        args = []
        for arg in data.get("args", []):
            if not isinstance(arg, dict):
                raise SchemaError(f"{path}: argument of {data['name']} must be an object")
            args.append(AttributeArg(name=arg.get("name"), value=self._parse_expression(arg.get("value"), path)))
        return Attribute(name=data["name"], args=args)

    def _parse_expression(self, data: Any, path: str) -> Expression | None:
        """Parse an expression node recursively."""
        if data is None:
            return None

        # Bare scalars are shorthand for literals
        if not isinstance(data, dict):
            return LiteralExpr(value=data)

        kind = data.get("kind")
        if kind == "reference":
            return ReferenceExpr(target=data.get("target", ""))
        if kind == "array":
            return ArrayExpr(items=[self._parse_expression(i, path) for i in data.get("items", [])])
        if kind == "literal":
            return LiteralExpr(value=data.get("value"))
        if kind == "invocation":
            return InvocationExpr(
                function=data.get("function", ""),
                args=[self._parse_expression(a, path) for a in data.get("args", [])],
            )
        if kind == "member":
            return MemberAccessExpr(
                operand=self._parse_expression(data.get("operand"), path),
                member=data.get("member", ""),
            )

        raise SchemaError(f"{path}: unknown expression kind {kind!r}")

    def _link(self, graph: SchemaGraph) -> None:
        """Link supertype and field references in place."""
        models = {m.name: m for m in graph.models}

        for model in graph.models:
            for super_type in model.super_types:
                super_type.ref = models.get(super_type.name)
                if super_type.ref is None:
                    logger.warning(f"Model {model.name} extends unknown model {super_type.name}")

        for model in graph.models:
            # Attributes may reference inherited fields
            scope = {f.name: f for f in self._fields_with_inherited(model)}
            for attr in model.attributes:
                self._link_attribute(attr, scope, model.name)

            for model_field in model.fields:
                related = models.get(model_field.type_name)
                related_scope = {f.name: f for f in self._fields_with_inherited(related)} if related else {}
                for attr in model_field.attributes:
                    self._link_attribute(attr, scope, f"{model.name}.{model_field.name}", related_scope)

    def _link_attribute(
        self,
        attr: Attribute,
        scope: dict[str, DataModelField],
        owner: str,
        related_scope: dict[str, DataModelField] | None = None,
    ) -> None:
        for arg in attr.args:
            # `@relation(references: [...])` names fields of the related model
            arg_scope = related_scope if attr.name == RELATION_ATTRIBUTE and arg.name == "references" and related_scope is not None else scope
            for ref in self._references(arg.value):
                ref.ref = arg_scope.get(ref.target)
                if ref.ref is None:
                    logger.warning(f"{owner}: {attr.name} references unknown field {ref.target}")

    def _references(self, expr: Expression | None) -> list[ReferenceExpr]:
        """Collect reference expressions directly in an argument (not inside calls)."""
        if isinstance(expr, ReferenceExpr):
            return [expr]
        if isinstance(expr, ArrayExpr):
            return [r for item in expr.items for r in self._references(item)]
        return []

    def _fields_with_inherited(self, model: DataModel) -> list[DataModelField]:
        """Own fields followed by supertype fields, guarding against cyclic supertypes."""
        result: list[DataModelField] = []
        visited: set[int] = set()
        pending = [model]
        while pending:
            current = pending.pop(0)
            if id(current) in visited:
                continue
            visited.add(id(current))
            result.extend(current.fields)
            pending.extend(s.ref for s in current.super_types if s.ref is not None)
        return result
