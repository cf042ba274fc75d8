"""
Structural copy pass.

Builds the output document from the input document. Every declaration is
reproduced verbatim, in its original order, except the declarations of
the CRUD namespace that a visitor chooses to rewrite.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from ..declarations.nodes import Declaration, DeclarationDocument, DeclarationKind, ModuleDeclaration

# Categories inside the CRUD namespace handed to the visitor
VISITED_KINDS = (
    DeclarationKind.INTERFACE,
    DeclarationKind.TYPE_ALIAS,
    DeclarationKind.VARIABLE,
    DeclarationKind.CLASS,
)

DeclarationVisitor = Callable[[Declaration], Declaration]


def copy_declaration(declaration: Declaration) -> Declaration:
    """Copy a declaration; namespaces are copied with their whole body."""
    if isinstance(declaration, ModuleDeclaration):
        return replace(declaration, members=list(declaration.members), body=[copy_declaration(d) for d in declaration.body])
    return replace(declaration, members=list(declaration.members))


class StructuralCopyPass:
    """Copies a declaration document, handing CRUD namespace declarations to a visitor."""

    def __init__(self, namespace: str = "Prisma"):
        """
        Initialize the pass.

        Args:
            namespace: Name of the top-level namespace holding the CRUD declarations
        """
        self.namespace = namespace

    def run(self, document: DeclarationDocument, visitor: DeclarationVisitor | None = None) -> DeclarationDocument:
        """
        Build the output document.

        Args:
            document: The parsed input document (left untouched)
            visitor: Rewrites one interface, type alias, variable or class of the
                CRUD namespace; None copies everything verbatim

        Returns:
            A new document with the same declaration order as the input
        """
        declarations = []
        for declaration in document.declarations:
            if visitor is not None and self.is_crud_namespace(declaration):
                declarations.append(self._visit_namespace(declaration, visitor))
            else:
                declarations.append(copy_declaration(declaration))

        return DeclarationDocument(
            path=document.path,
            declarations=declarations,
            trailing_trivia=document.trailing_trivia,
            has_errors=document.has_errors,
        )

    def is_crud_namespace(self, declaration: Declaration) -> bool:
        return isinstance(declaration, ModuleDeclaration) and declaration.name == self.namespace

    def _visit_namespace(self, module: ModuleDeclaration, visitor: DeclarationVisitor) -> ModuleDeclaration:
        body = [visitor(d) if d.kind in VISITED_KINDS else copy_declaration(d) for d in module.body]
        return replace(module, members=list(module.members), body=body)
