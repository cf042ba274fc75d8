"""
Delegate transformation pass.

Rewrites the CRUD namespace declarations of a generated client so that
delegate hierarchies are exposed correctly:

- aux (synthetic back-reference) members are stripped everywhere
- delegate models lose their create operations and nested create inputs
- concrete create/update inputs lose the system-assigned discriminators
- nested concrete inputs lose the delegate relation and its foreign keys
- delegate payload types become a discriminated union of their subtypes

Declarations are associated with models by their generated names.
"""

from __future__ import annotations

import logging
import re

from ...utils import names_alternation, upper_case_first
from ..analyzer.hierarchy import DelegateHierarchyResolver, discriminator_chain, discriminator_of
from ..config import EnhancerConfig
from ..declarations.nodes import (
    ClassDeclaration,
    Declaration,
    DeclarationDocument,
    InterfaceDeclaration,
    MemberKind,
    MemberSignature,
    TypeAliasDeclaration,
    VariableDeclaration,
)
from ..errors import SchemaError
from ..schema_graph.nodes import RELATION_ATTRIBUTE, ArrayExpr, ReferenceExpr
from .copy_pass import StructuralCopyPass

logger = logging.getLogger(__name__)


class DelegateTransformer:
    """Applies the delegate hierarchy rewrites to CRUD namespace declarations."""

    def __init__(self, resolver: DelegateHierarchyResolver, config: EnhancerConfig | None = None):
        """
        Initialize the transformer.

        Args:
            resolver: Hierarchy resolver of the schema the client was generated from
            config: Enhancer configuration (naming conventions, blocked operations)
        """
        self.resolver = resolver
        self.config = config or EnhancerConfig()
        self.aux_prefix = self.config.aux_prefix

        concrete_names = resolver.concrete_names
        delegate_names = resolver.delegate_names
        self._concrete_input = re.compile(names_alternation(concrete_names) + r"(Unchecked)?(Create|Update).*Input") if concrete_names else None
        self._delegate_input = re.compile(names_alternation(delegate_names) + r"(Unchecked)?(Create|Update).*Input") if delegate_names else None
        self._nested_input = re.compile(r"(.+)(Create|Update)Without" + re.escape(upper_case_first(self.aux_prefix)) + r"_(.+)Input")

        self._delegate_interfaces = {f"{name}Delegate" for name in delegate_names}
        self._payloads = {f"${entry.delegate.name}Payload": entry for entry in resolver.index}

    def transform_document(self, document: DeclarationDocument) -> DeclarationDocument:
        """
        Transform a whole client declaration document.

        Declarations outside the CRUD namespace are copied verbatim.

        Args:
            document: The parsed client declarations

        Returns:
            A new, transformed document
        """
        copy_pass = StructuralCopyPass(self.config.crud_namespace)
        return copy_pass.run(document, self.transform_declaration)

    def transform_declaration(self, declaration: Declaration) -> Declaration:
        """Apply every matching rewrite to one declaration of the CRUD namespace."""
        if isinstance(declaration, InterfaceDeclaration):
            return self.transform_interface(declaration)
        if isinstance(declaration, TypeAliasDeclaration):
            return self.transform_type_alias(declaration)
        if isinstance(declaration, (VariableDeclaration, ClassDeclaration)):
            return self._remove(declaration, self._aux_members(declaration), "aux members")
        return declaration

    def transform_interface(self, declaration: InterfaceDeclaration) -> InterfaceDeclaration:
        """Strip aux members and, on a delegate operations interface, the create methods."""
        removals = self._aux_members(declaration)
        if declaration.name in self._delegate_interfaces:
            removals += declaration.find_members(
                lambda m: m.depth == 0 and m.kind == MemberKind.METHOD and m.name in self.config.blocked_delegate_methods
            )
        return self._remove(declaration, removals, "aux members and delegate create operations")

    def transform_type_alias(self, declaration: TypeAliasDeclaration) -> TypeAliasDeclaration:
        """
        Apply the type alias rewrites.

        All subtractive rewrites are computed on the input declaration and
        applied in one edit; the payload union is synthesized afterwards.
        """
        removals = self._aux_members(declaration)
        removals += self._discriminator_members(declaration)
        removals += self._delegate_input_members(declaration)
        removals += self._nested_relation_members(declaration)

        result = self._remove(declaration, removals, "aux, discriminator and relation properties")
        return self._synthesize_payload(result)

    def _aux_members(self, declaration: Declaration) -> list[MemberSignature]:
        return declaration.find_members(lambda m: m.name.startswith(self.aux_prefix))

    def _discriminator_members(self, declaration: TypeAliasDeclaration) -> list[MemberSignature]:
        """Discriminator properties of a concrete model's create/update input."""
        match = self._concrete_input.fullmatch(declaration.name) if self._concrete_input else None
        if match is None:
            return []

        entry = self.resolver.governing_entry(match.group(1))
        if entry is None:
            return []

        removals = []
        for discriminator in discriminator_chain(entry.delegate):
            member = declaration.find_member(discriminator.name, MemberKind.PROPERTY)
            if member is not None:
                removals.append(member)
        return removals

    def _delegate_input_members(self, declaration: TypeAliasDeclaration) -> list[MemberSignature]:
        """Nested create properties of a delegate model's create/update input."""
        if self._delegate_input is None or self._delegate_input.fullmatch(declaration.name) is None:
            return []
        blocked = self.config.blocked_delegate_input_fields
        return declaration.find_members(lambda m: m.kind == MemberKind.PROPERTY and m.name in blocked)

    def _nested_relation_members(self, declaration: TypeAliasDeclaration) -> list[MemberSignature]:
        """Delegate relation property and its foreign keys in a nested concrete input."""
        match = self._nested_input.fullmatch(declaration.name)
        if match is None:
            return []

        model_name, relation_name = self._split_relation_tuple(match.group(3))
        removals = []
        member = declaration.find_member(relation_name, MemberKind.PROPERTY)
        if member is not None:
            removals.append(member)

        try:
            foreign_keys = self._foreign_keys(model_name, relation_name)
        except SchemaError as e:
            logger.warning(f"Keeping foreign keys of {declaration.name}: {e}")
            foreign_keys = []

        for fk_name in foreign_keys:
            fk_member = declaration.find_member(fk_name, MemberKind.PROPERTY)
            if fk_member is not None:
                removals.append(fk_member)
        return removals

    def _split_relation_tuple(self, name_tuple: str) -> tuple[str, str]:
        """
        Split `<Model>_<relationField>_<Concrete>` into model and relation field names.

        Model and field names are looked up in the schema so that names
        containing underscores split correctly.
        """
        for model in sorted(self.resolver.graph.models, key=lambda m: -len(m.name)):
            if not name_tuple.startswith(model.name + "_"):
                continue
            rest = name_tuple[len(model.name) + 1 :]
            for model_field in sorted(model.fields, key=lambda f: -len(f.name)):
                if rest.startswith(model_field.name + "_"):
                    return model.name, model_field.name

        parts = name_tuple.split("_")
        return parts[0], parts[1] if len(parts) > 1 else ""

    def _foreign_keys(self, model_name: str, relation_name: str) -> list[str]:
        """
        Names of the foreign-key fields of a relation.

        Raises:
            SchemaError: If the relation's `fields` argument is not a list of field references
        """
        model = self.resolver.graph.get_model(model_name)
        relation_field = model.get_field(relation_name) if model else None
        relation = relation_field.get_attribute(RELATION_ATTRIBUTE) if relation_field else None
        if relation is None:
            return []

        fields_arg = relation.get_arg("fields")
        if fields_arg is None:
            return []
        if not isinstance(fields_arg, ArrayExpr) or not all(isinstance(i, ReferenceExpr) for i in fields_arg.items):
            raise SchemaError(f"{RELATION_ATTRIBUTE} on {model_name}.{relation_name} has a malformed fields argument")
        return [item.target for item in fields_arg.items]

    def _synthesize_payload(self, declaration: TypeAliasDeclaration) -> TypeAliasDeclaration:
        """Replace a delegate payload with a union of its subtype payloads."""
        entry = self._payloads.get(declaration.name)
        if entry is None:
            return declaration

        discriminator = discriminator_of(entry.delegate)
        if discriminator is None:
            logger.debug(f"No discriminator for delegate model {entry.delegate.name}; keeping {declaration.name} as is")
            return declaration

        type_args = f"<{', '.join(declaration.type_parameters)}>" if declaration.type_parameters else ""
        union = " | ".join(
            f"(${subtype.name}Payload{type_args} & {{ scalars: {{ {discriminator.name}: '{subtype.name}' }} }})" for subtype in entry.subtypes
        )
        logger.debug(f"Synthesized payload union for {declaration.name} over {len(entry.subtypes)} subtypes")
        return declaration.with_value(union)

    def _remove(self, declaration, members: list[MemberSignature], what: str):
        if not members:
            return declaration
        logger.debug(f"Removing {len(members)} {what} from {declaration.name}: {', '.join(m.name for m in members)}")
        return declaration.without_members(members)
