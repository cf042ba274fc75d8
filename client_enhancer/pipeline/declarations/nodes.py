"""
TypeScript declaration document nodes.

These nodes represent a parsed `.d.ts` file as an ordered list of
declarations. Each declaration keeps its own source text together with
the spans of the member signatures found inside it, so that members can
be removed and type expressions patched without a compiler API, and so
that an untouched document prints back byte-for-byte.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum


class DeclarationKind(str, Enum):
    """Category of a top-level or namespace-level declaration."""

    IMPORT = "import"
    EXPORT = "export"
    INTERFACE = "interface"
    TYPE_ALIAS = "type_alias"
    VARIABLE = "variable"
    CLASS = "class"
    FUNCTION = "function"
    ENUM = "enum"
    MODULE = "module"
    OTHER = "other"


class MemberKind(str, Enum):
    """Kind of a member signature."""

    PROPERTY = "property"
    METHOD = "method"


@dataclass
class MemberSignature:
    """A property or method signature inside a declaration.

    Offsets are character offsets into the owning declaration's `text`.
    `start` includes any doc comment directly attached to the member.
    """

    name: str = ""
    kind: MemberKind = MemberKind.PROPERTY
    start: int = 0
    end: int = 0

    # Number of enclosing member signatures (0 = direct member)
    depth: int = 0


@dataclass
class Declaration:
    """Base class for all declaration nodes."""

    name: str = ""
    kind: DeclarationKind = DeclarationKind.OTHER

    # Source text of the statement, including `export`/`declare` keywords
    text: str = ""

    # Comments and whitespace between the previous statement and this one
    leading_trivia: str = ""

    # Every member signature in the statement, in document order
    members: list[MemberSignature] = field(default_factory=list)

    def member_text(self, member: MemberSignature) -> str:
        return self.text[member.start : member.end]

    def find_members(self, predicate: Callable[[MemberSignature], bool]) -> list[MemberSignature]:
        """Find all member signatures matching a predicate, in document order."""
        return [m for m in self.members if predicate(m)]

    def find_member(self, name: str, kind: MemberKind | None = None) -> MemberSignature | None:
        """Find the first member signature with the given name."""
        return next(
            (m for m in self.members if m.name == name and (kind is None or m.kind == kind)),
            None,
        )

    def direct_members(self) -> list[MemberSignature]:
        return [m for m in self.members if m.depth == 0]

    def without_members(self, members: Iterable[MemberSignature]) -> Declaration:
        """
        Return a copy of this declaration with the given members removed.

        A removed member takes its trailing separator with it, and the whole
        line when the member occupied it alone. Members nested inside a
        removed member disappear too.

        Args:
            members: Members of this declaration to remove

        Returns:
            A new declaration (this one is left untouched)
        """
        spans = _outermost([(m.start, m.end) for m in members])
        removed = _merge([_widen(self.text, start, end) for start, end in spans])
        if not removed:
            return replace(self, members=list(self.members))

        pieces = []
        cursor = 0
        for start, end in removed:
            pieces.append(self.text[cursor:start])
            cursor = end
        pieces.append(self.text[cursor:])

        kept = [
            replace(m, start=_shift(m.start, removed), end=_shift(m.end, removed))
            for m in self.members
            if not any(start < m.end and m.start < end for start, end in removed)
        ]
        return self._rebuilt("".join(pieces), kept, removed)

    def _rebuilt(self, text: str, members: list[MemberSignature], removed: list[tuple[int, int]]) -> Declaration:
        """Copy with new text and members; subclasses remap their own offsets."""
        return replace(self, text=text, members=members)


@dataclass
class ImportDeclaration(Declaration):
    """An import statement or `import X = Y` alias."""

    kind: DeclarationKind = DeclarationKind.IMPORT


@dataclass
class ExportDeclaration(Declaration):
    """A re-export or export assignment (`export * from`, `export { a }`)."""

    kind: DeclarationKind = DeclarationKind.EXPORT


@dataclass
class InterfaceDeclaration(Declaration):
    """An interface; its direct members are the interface body."""

    kind: DeclarationKind = DeclarationKind.INTERFACE


@dataclass
class TypeAliasDeclaration(Declaration):
    """A type alias with a patchable type expression."""

    kind: DeclarationKind = DeclarationKind.TYPE_ALIAS

    # Names of the alias' own type parameters, e.g. ["ExtArgs"]
    type_parameters: list[str] = field(default_factory=list)

    # Span of the aliased type expression within `text`
    value_start: int = 0
    value_end: int = 0

    @property
    def value(self) -> str:
        return self.text[self.value_start : self.value_end]

    def with_value(self, value: str) -> TypeAliasDeclaration:
        """Return a copy whose type expression is replaced by `value`.

        Members found inside the old expression are dropped.
        """
        text = self.text[: self.value_start] + value + self.text[self.value_end :]
        members = [m for m in self.members if m.end <= self.value_start]
        return replace(self, text=text, members=members, value_end=self.value_start + len(value))

    def _rebuilt(self, text: str, members: list[MemberSignature], removed: list[tuple[int, int]]) -> Declaration:
        return replace(
            self,
            text=text,
            members=members,
            value_start=_shift(self.value_start, removed),
            value_end=_shift(self.value_end, removed),
        )


@dataclass
class VariableDeclaration(Declaration):
    """A `const`/`let`/`var` statement; members come from its type annotation."""

    kind: DeclarationKind = DeclarationKind.VARIABLE


@dataclass
class ClassDeclaration(Declaration):
    """A class declaration."""

    kind: DeclarationKind = DeclarationKind.CLASS


@dataclass
class FunctionDeclaration(Declaration):
    """A function signature or declaration."""

    kind: DeclarationKind = DeclarationKind.FUNCTION


@dataclass
class EnumDeclaration(Declaration):
    """An enum declaration."""

    kind: DeclarationKind = DeclarationKind.ENUM


@dataclass
class ModuleDeclaration(Declaration):
    """A namespace or module with a body of nested declarations.

    `text` holds the header up to and including the opening brace; the
    body is printed from `body`, followed by `body_trailing_trivia` and
    `footer` (the closing brace and anything after it in the statement).
    """

    kind: DeclarationKind = DeclarationKind.MODULE
    body: list[Declaration] = field(default_factory=list)
    body_trailing_trivia: str = ""
    footer: str = ""


@dataclass
class DeclarationDocument:
    """Root of a parsed declaration file."""

    path: str = ""
    declarations: list[Declaration] = field(default_factory=list)

    # Trivia after the last statement
    trailing_trivia: str = ""

    # Whether the parser recovered from syntax errors
    has_errors: bool = False

    def get_module(self, name: str) -> ModuleDeclaration | None:
        return next(
            (d for d in self.declarations if isinstance(d, ModuleDeclaration) and d.name == name),
            None,
        )


def _outermost(spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Sort spans and drop those nested inside (or equal to) an earlier one."""
    result: list[tuple[int, int]] = []
    for start, end in sorted(set(spans), key=lambda s: (s[0], -s[1])):
        if result and start < result[-1][1]:
            continue
        result.append((start, end))
    return result


def _widen(text: str, start: int, end: int) -> tuple[int, int]:
    """Extend a member span over its separator, or to whole lines if it stands alone."""
    cursor = end
    while cursor < len(text) and text[cursor] in " \t":
        cursor += 1
    if cursor < len(text) and text[cursor] in ";,":
        end = cursor + 1

    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    if line_end == -1:
        line_end = len(text)
    if text[line_start:start].strip() or text[end:line_end].strip():
        return start, end

    end = min(line_end + 1, len(text))
    # Between two blank lines, take one of them too
    next_end = text.find("\n", end)
    prev_start = text.rfind("\n", 0, max(line_start - 1, 0)) + 1
    if line_start > 0 and next_end != -1 and not text[end:next_end].strip() and not text[prev_start : line_start - 1].strip():
        end = next_end + 1
    return line_start, end


def _merge(spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Sort spans and merge the overlapping ones."""
    result: list[tuple[int, int]] = []
    for start, end in sorted(spans):
        if result and start <= result[-1][1]:
            result[-1] = (result[-1][0], max(result[-1][1], end))
        else:
            result.append((start, end))
    return result


def _shift(offset: int, removed: list[tuple[int, int]]) -> int:
    """Map an offset of the original text to the text with `removed` spans cut out."""
    return offset - sum(min(end, offset) - start for start, end in removed if start < offset)
