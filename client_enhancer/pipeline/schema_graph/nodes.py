"""
Schema graph node definitions.

These nodes represent an already-resolved entity-relationship schema:
models with their fields, attributes and supertypes. References are
linked by the loader; a reference that could not be resolved keeps its
textual target and a `ref` of None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DELEGATE_ATTRIBUTE = "@@delegate"
AUTH_ATTRIBUTE = "@@auth"
RELATION_ATTRIBUTE = "@relation"
DEFAULT_ATTRIBUTE = "@default"


@dataclass
class Expression:
    """Base class for attribute argument expressions."""

    pass


@dataclass
class LiteralExpr(Expression):
    """A literal value (string, number, boolean)."""

    value: Any = None


@dataclass
class ReferenceExpr(Expression):
    """A reference to a named schema element, usually a field."""

    target: str = ""
    ref: DataModelField | None = None


@dataclass
class ArrayExpr(Expression):
    """An array of expressions, e.g. `[ownerId, tenantId]`."""

    items: list[Expression] = field(default_factory=list)


@dataclass
class InvocationExpr(Expression):
    """A function call, e.g. `auth()` or `now()`."""

    function: str = ""
    args: list[Expression] = field(default_factory=list)


@dataclass
class MemberAccessExpr(Expression):
    """A member access, e.g. `auth().id`."""

    operand: Expression | None = None
    member: str = ""


@dataclass
class AttributeArg:
    """An attribute argument, optionally named (`fields: [...]`)."""

    name: str | None = None
    value: Expression | None = None


@dataclass
class Attribute:
    """A model-level (`@@x`) or field-level (`@x`) attribute."""

    name: str = ""
    args: list[AttributeArg] = field(default_factory=list)

    def get_arg(self, name: str) -> Expression | None:
        """Get the value of a named argument."""
        for arg in self.args:
            if arg.name == name:
                return arg.value
        return None


@dataclass(eq=False)
class DataModelField:
    """A field of a data model."""

    name: str = ""
    type_name: str = ""
    is_array: bool = False
    is_optional: bool = False
    attributes: list[Attribute] = field(default_factory=list)

    # Name of the model declaring this field (set by the loader)
    model_name: str = ""

    def get_attribute(self, name: str) -> Attribute | None:
        return next((a for a in self.attributes if a.name == name), None)


@dataclass
class SuperTypeRef:
    """A reference to a supertype model."""

    name: str = ""
    ref: DataModel | None = None


@dataclass(eq=False)
class DataModel:
    """A data model (entity) of the schema."""

    name: str = ""
    fields: list[DataModelField] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    super_types: list[SuperTypeRef] = field(default_factory=list)

    def get_attribute(self, name: str) -> Attribute | None:
        return next((a for a in self.attributes if a.name == name), None)

    def has_attribute(self, name: str) -> bool:
        return self.get_attribute(name) is not None

    def get_field(self, name: str) -> DataModelField | None:
        return next((f for f in self.fields if f.name == name), None)

    @property
    def is_delegate(self) -> bool:
        """Whether the model carries the `@@delegate` marker."""
        return self.has_attribute(DELEGATE_ATTRIBUTE)


@dataclass
class SchemaGraph:
    """Root of the resolved schema graph."""

    models: list[DataModel] = field(default_factory=list)

    # Path the graph was loaded from (for messages and relative paths)
    source_path: str = ""

    def get_model(self, name: str) -> DataModel | None:
        return next((m for m in self.models if m.name == name), None)
