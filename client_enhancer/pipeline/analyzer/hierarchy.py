"""
Delegate hierarchy resolution.

Inverts the subtype -> supertype references of the schema graph into
base -> subtypes groupings for every `@@delegate` model, and resolves the
discriminator fields those models declare.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..errors import SchemaError
from ..schema_graph.nodes import (
    DEFAULT_ATTRIBUTE,
    DELEGATE_ATTRIBUTE,
    ArrayExpr,
    DataModel,
    DataModelField,
    Expression,
    InvocationExpr,
    MemberAccessExpr,
    ReferenceExpr,
    SchemaGraph,
)

logger = logging.getLogger(__name__)


@dataclass
class HierarchyEntry:
    """A delegate base model and its direct concrete subtypes."""

    delegate: DataModel
    subtypes: list[DataModel] = field(default_factory=list)

    @property
    def subtype_names(self) -> list[str]:
        return [s.name for s in self.subtypes]


def direct_subtypes(graph: SchemaGraph, base: DataModel) -> list[DataModel]:
    """Models listing `base` as one of their supertypes, in declaration order."""
    return [m for m in graph.models if any(s.ref is base for s in m.super_types)]


def needs_projection(graph: SchemaGraph) -> bool:
    """Whether any delegate model has at least one subtype."""
    return any(m.is_delegate and direct_subtypes(graph, m) for m in graph.models)


def build_index(graph: SchemaGraph) -> list[HierarchyEntry]:
    """
    Build the hierarchy index of a schema graph.

    Args:
        graph: The resolved schema graph

    Returns:
        One entry per delegate model with direct subtypes, in declaration order
    """
    index = []
    for model in graph.models:
        if not model.is_delegate:
            continue
        subtypes = direct_subtypes(graph, model)
        if subtypes:
            index.append(HierarchyEntry(delegate=model, subtypes=subtypes))
    return index


def resolve_discriminator(model: DataModel) -> DataModelField | None:
    """
    Resolve the discriminator field named by a model's `@@delegate` attribute.

    Returns:
        The discriminator field, or None if the model has no delegate marker

    Raises:
        SchemaError: If the marker's argument does not reference a field
    """
    attr = model.get_attribute(DELEGATE_ATTRIBUTE)
    if attr is None:
        return None

    arg = attr.args[0].value if attr.args else None
    if not isinstance(arg, ReferenceExpr):
        raise SchemaError(f"{DELEGATE_ATTRIBUTE} on model {model.name} must reference a discriminator field")
    if arg.ref is None:
        raise SchemaError(f"{DELEGATE_ATTRIBUTE} on model {model.name} references unknown field {arg.target}")
    return arg.ref


def discriminator_of(model: DataModel) -> DataModelField | None:
    """Resolve a model's discriminator, degrading to None on a malformed marker."""
    try:
        return resolve_discriminator(model)
    except SchemaError as e:
        logger.warning(f"{e}; leaving its hierarchy unprojected")
        return None


def discriminator_chain(model: DataModel) -> list[DataModelField]:
    """
    Collect the discriminators of a model and of its delegate ancestors.

    Walks the supertype chain upward starting at `model`, taking one
    discriminator per `@@delegate` model, nearest first. Cyclic supertype
    references are tolerated.

    Args:
        model: The model to start from (usually the governing delegate)

    Returns:
        Discriminator fields without duplicates
    """
    result: list[DataModelField] = []
    visited: set[int] = set()
    pending = [model]
    while pending:
        current = pending.pop(0)
        if id(current) in visited:
            logger.debug(f"Supertype cycle detected at model {current.name}")
            continue
        visited.add(id(current))

        if current.is_delegate:
            discriminator = discriminator_of(current)
            if discriminator is not None and discriminator not in result:
                result.append(discriminator)

        pending.extend(s.ref for s in current.super_types if s.ref is not None)
    return result


def has_auth_in_default(graph: SchemaGraph) -> bool:
    """Whether any field has a `@default` whose value calls `auth()`."""
    return any(
        _invokes_auth(arg.value)
        for model in graph.models
        for model_field in model.fields
        for attr in model_field.attributes
        if attr.name == DEFAULT_ATTRIBUTE
        for arg in attr.args
    )


def _invokes_auth(expr: Expression | None) -> bool:
    if isinstance(expr, InvocationExpr):
        return expr.function == "auth" or any(_invokes_auth(a) for a in expr.args)
    if isinstance(expr, MemberAccessExpr):
        return _invokes_auth(expr.operand)
    if isinstance(expr, ArrayExpr):
        return any(_invokes_auth(i) for i in expr.items)
    return False


class DelegateHierarchyResolver:
    """Resolves delegate hierarchies of a schema graph once per run.

    The index is built on construction and never changes afterwards.
    """

    def __init__(self, graph: SchemaGraph):
        self.graph = graph
        self.index = build_index(graph)
        self._by_subtype: dict[str, HierarchyEntry] = {}
        for entry in self.index:
            for subtype in entry.subtypes:
                # A subtype listing several delegates is governed by the first one
                self._by_subtype.setdefault(subtype.name, entry)

    @property
    def delegate_names(self) -> list[str]:
        return [e.delegate.name for e in self.index]

    @property
    def concrete_names(self) -> list[str]:
        return list(self._by_subtype)

    def entry_for_delegate(self, name: str) -> HierarchyEntry | None:
        return next((e for e in self.index if e.delegate.name == name), None)

    def governing_entry(self, concrete_name: str) -> HierarchyEntry | None:
        """The hierarchy entry whose delegate directly owns a concrete model."""
        return self._by_subtype.get(concrete_name)

    def needs_projection(self) -> bool:
        return bool(self.index)

    def needs_logical_client(self) -> bool:
        """Whether the underlying client must be regenerated from a logical schema."""
        return self.needs_projection() or has_auth_in_default(self.graph)
