"""
TypeScript declaration serializer.

Prints a DeclarationDocument back to source text. Every declaration is
printed as its leading trivia followed by its text; namespaces print their
body recursively between their header and footer.
"""

from __future__ import annotations

from .nodes import Declaration, DeclarationDocument, ModuleDeclaration


class DeclarationSerializer:
    """Serializes declaration nodes to TypeScript source."""

    def serialize(self, document: DeclarationDocument) -> str:
        """Serialize a complete declaration document."""
        parts: list[str] = []
        for declaration in document.declarations:
            self._serialize_declaration(declaration, parts)
        parts.append(document.trailing_trivia)
        return "".join(parts)

    def serialize_declaration(self, declaration: Declaration) -> str:
        """Serialize one declaration without its leading trivia."""
        parts: list[str] = []
        self._serialize_declaration(declaration, parts)
        return "".join(parts)[len(declaration.leading_trivia) :]

    def _serialize_declaration(self, declaration: Declaration, parts: list[str]) -> None:
        parts.append(declaration.leading_trivia)
        parts.append(declaration.text)
        if isinstance(declaration, ModuleDeclaration):
            for child in declaration.body:
                self._serialize_declaration(child, parts)
            parts.append(declaration.body_trailing_trivia)
            parts.append(declaration.footer)
