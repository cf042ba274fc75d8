"""
TypeScript declaration parser.

Uses tree-sitter and tree-sitter-typescript to parse a `.d.ts` file into
a DeclarationDocument. Only statement boundaries, declaration names and
member signature spans are extracted; everything else is kept as text.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from pathlib import Path
from typing import Any

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Parser

from ..errors import DeclarationParseError
from .nodes import (
    ClassDeclaration,
    Declaration,
    DeclarationDocument,
    EnumDeclaration,
    ExportDeclaration,
    FunctionDeclaration,
    ImportDeclaration,
    InterfaceDeclaration,
    MemberKind,
    MemberSignature,
    ModuleDeclaration,
    TypeAliasDeclaration,
    VariableDeclaration,
)

logger = logging.getLogger(__name__)

# Node types that wrap the declaration they export or declare
WRAPPER_TYPES = {"export_statement", "ambient_declaration", "expression_statement"}

DECLARATION_TYPES = {
    "interface_declaration",
    "type_alias_declaration",
    "lexical_declaration",
    "variable_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "function_signature",
    "function_declaration",
    "generator_function_declaration",
    "enum_declaration",
    "internal_module",
    "module",
    "import_alias",
    "import_statement",
}

MEMBER_KINDS = {
    "property_signature": MemberKind.PROPERTY,
    "public_field_definition": MemberKind.PROPERTY,
    "method_signature": MemberKind.METHOD,
    "abstract_method_signature": MemberKind.METHOD,
}


class _Source:
    """Source text with byte -> character offset conversion."""

    def __init__(self, text: str):
        self.text = text
        self.data = text.encode("utf-8")
        self._byte_ends: list[int] = []
        self._extra: list[int] = []
        if not text.isascii():
            byte_pos = 0
            extra = 0
            for ch in text:
                size = len(ch.encode("utf-8"))
                byte_pos += size
                if size > 1:
                    extra += size - 1
                    self._byte_ends.append(byte_pos)
                    self._extra.append(extra)

    def char(self, byte_offset: int) -> int:
        index = bisect_right(self._byte_ends, byte_offset)
        return byte_offset - (self._extra[index - 1] if index else 0)

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.text[self.char(start_byte) : self.char(end_byte)]


class DeclarationParser:
    """Parses TypeScript declaration files into a DeclarationDocument."""

    def __init__(self):
        self._parser = Parser(Language(ts_typescript.language_typescript()))

    def parse_file(self, path: Path | str) -> DeclarationDocument:
        """
        Read and parse a declaration file.

        Args:
            path: Path of the `.d.ts` file

        Returns:
            The parsed document

        Raises:
            DeclarationParseError: If the file cannot be read
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DeclarationParseError(f"Cannot read declaration file {path}: {e}") from e
        return self.parse(text, str(path))

    def parse(self, text: str, path: str = "") -> DeclarationDocument:
        """
        Parse declaration source text.

        Args:
            text: TypeScript declaration source
            path: Origin of the text (for messages)

        Returns:
            The parsed document; printing it unchanged gives back `text`
        """
        source = _Source(text)
        tree = self._parser.parse(source.data)
        root = tree.root_node

        if root.has_error:
            errors = self._find_errors(root)
            line = errors[0].start_point[0] + 1 if errors else "?"
            logger.warning(f"Declaration file {path or '<text>'} has syntax errors (first at line {line}); affected statements are kept as text")

        declarations, last_end = self._parse_statements(root, source, 0)
        return DeclarationDocument(
            path=path,
            declarations=declarations,
            trailing_trivia=source.slice(last_end, len(source.data)),
            has_errors=root.has_error,
        )

    def has_errors(self, text: str) -> bool:
        """Check whether TypeScript source contains syntax errors."""
        return self._parser.parse(text.encode("utf-8")).root_node.has_error

    def _parse_statements(self, container: Any, source: _Source, begin: int) -> tuple[list[Declaration], int]:
        """Parse the statements directly inside a program or statement block."""
        declarations = []
        last_end = begin
        for child in container.named_children:
            if child.type == "comment":
                continue
            declaration = self._parse_statement(child, source)
            declaration.leading_trivia = source.slice(last_end, child.start_byte)
            declarations.append(declaration)
            last_end = child.end_byte
        return declarations, last_end

    def _parse_statement(self, node: Any, source: _Source) -> Declaration:
        """Build the declaration node for one statement."""
        inner = self._unwrap(node)
        kind = inner.type if inner is not None else node.type
        text = source.slice(node.start_byte, node.end_byte)

        if kind == "interface_declaration":
            return InterfaceDeclaration(
                name=self._field_text(inner, "name", source),
                text=text,
                members=self._collect_members(inner, node.start_byte, source),
            )

        if kind == "type_alias_declaration":
            return self._parse_type_alias(node, inner, text, source)

        if kind in ("lexical_declaration", "variable_declaration"):
            declarator = next((c for c in inner.named_children if c.type == "variable_declarator"), None)
            return VariableDeclaration(
                name=self._field_text(declarator, "name", source) if declarator is not None else "",
                text=text,
                members=self._collect_members(inner, node.start_byte, source),
            )

        if kind in ("class_declaration", "abstract_class_declaration"):
            return ClassDeclaration(
                name=self._field_text(inner, "name", source),
                text=text,
                members=self._collect_members(inner, node.start_byte, source),
            )

        if kind in ("function_signature", "function_declaration", "generator_function_declaration"):
            return FunctionDeclaration(name=self._field_text(inner, "name", source), text=text)

        if kind == "enum_declaration":
            return EnumDeclaration(name=self._field_text(inner, "name", source), text=text)

        if kind in ("internal_module", "module"):
            return self._parse_module(node, inner, source)

        if kind in ("import_statement", "import_alias"):
            return ImportDeclaration(name=self._import_name(inner, source), text=text)

        if node.type == "export_statement":
            return ExportDeclaration(text=text)

        return Declaration(text=text)

    def _parse_type_alias(self, node: Any, inner: Any, text: str, source: _Source) -> TypeAliasDeclaration:
        base = source.char(node.start_byte)
        value = inner.child_by_field_name("value")
        if value is not None:
            value_start = source.char(value.start_byte) - base
            value_end = source.char(value.end_byte) - base
        else:
            value_start = value_end = len(text)

        type_parameters = []
        params = inner.child_by_field_name("type_parameters")
        if params is not None:
            for param in params.named_children:
                if param.type == "type_parameter":
                    name = self._field_text(param, "name", source) or source.slice(param.named_children[0].start_byte, param.named_children[0].end_byte)
                    type_parameters.append(name)

        return TypeAliasDeclaration(
            name=self._field_text(inner, "name", source),
            text=text,
            members=self._collect_members(inner, node.start_byte, source),
            type_parameters=type_parameters,
            value_start=value_start,
            value_end=value_end,
        )

    def _parse_module(self, node: Any, inner: Any, source: _Source) -> ModuleDeclaration:
        name = self._field_text(inner, "name", source).strip("'\"")
        body = inner.child_by_field_name("body")
        if body is None:
            return ModuleDeclaration(name=name, text=source.slice(node.start_byte, node.end_byte))

        # The body block spans from its opening to its closing brace
        open_end = body.start_byte + 1
        close_start = body.end_byte - 1
        declarations, last_end = self._parse_statements(body, source, open_end)
        return ModuleDeclaration(
            name=name,
            text=source.slice(node.start_byte, open_end),
            body=declarations,
            body_trailing_trivia=source.slice(last_end, close_start),
            footer=source.slice(close_start, node.end_byte),
        )

    def _unwrap(self, node: Any) -> Any | None:
        """Find the declaration inside export/declare wrappers."""
        current = node
        while current is not None and current.type in WRAPPER_TYPES:
            wrapped = current.child_by_field_name("declaration")
            if wrapped is None:
                wrapped = next(
                    (c for c in current.named_children if c.type in DECLARATION_TYPES or c.type in WRAPPER_TYPES),
                    None,
                )
            current = wrapped
        if current is not None and current.type not in DECLARATION_TYPES:
            return None
        return current

    def _collect_members(self, node: Any, base_byte: int, source: _Source) -> list[MemberSignature]:
        """Collect every member signature below a node, in document order."""
        base = source.char(base_byte)
        members = []
        stack = [(child, 0) for child in reversed(node.children)]
        while stack:
            current, depth = stack.pop()
            member_kind = MEMBER_KINDS.get(current.type)
            if member_kind is not None:
                members.append(
                    MemberSignature(
                        name=self._member_name(current, source),
                        kind=member_kind,
                        start=source.char(self._attached_start(current)) - base,
                        end=source.char(current.end_byte) - base,
                        depth=depth,
                    )
                )
                depth += 1
            stack.extend((child, depth) for child in reversed(current.children))
        return members

    def _attached_start(self, node: Any) -> int:
        """Start of a member including the doc comments on the lines above it."""
        start = node.start_byte
        prev = node.prev_sibling
        while prev is not None and prev.type == "comment":
            before = prev.prev_sibling
            if before is not None and before.end_point[0] == prev.start_point[0]:
                # Trailing comment of the previous token
                break
            start = prev.start_byte
            prev = before
        return start

    def _member_name(self, node: Any, source: _Source) -> str:
        name = node.child_by_field_name("name")
        if name is None:
            return ""
        return source.slice(name.start_byte, name.end_byte).strip("'\"")

    def _field_text(self, node: Any, field_name: str, source: _Source) -> str:
        child = node.child_by_field_name(field_name) if node is not None else None
        if child is None:
            return ""
        return source.slice(child.start_byte, child.end_byte)

    def _import_name(self, node: Any, source: _Source) -> str:
        """Alias name for `import X = Y`, module specifier for `import ... from`."""
        if node.type == "import_alias":
            ident = next((c for c in node.named_children if c.type == "identifier"), None)
            return source.slice(ident.start_byte, ident.end_byte) if ident is not None else ""
        module = node.child_by_field_name("source")
        return source.slice(module.start_byte, module.end_byte).strip("'\"") if module is not None else ""

    def _find_errors(self, node: Any) -> list[Any]:
        """Find all ERROR nodes in the tree."""
        errors = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == "ERROR":
                errors.append(current)
            stack.extend(reversed(current.children))
        return errors
