"""
Declarations module.

Contains the TypeScript declaration document model, its tree-sitter
based parser and its serializer.
"""

from __future__ import annotations

from .nodes import (
    ClassDeclaration,
    Declaration,
    DeclarationDocument,
    DeclarationKind,
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
from .parser import DeclarationParser
from .serializer import DeclarationSerializer

__all__ = [
    "ClassDeclaration",
    "Declaration",
    "DeclarationDocument",
    "DeclarationKind",
    "DeclarationParser",
    "DeclarationSerializer",
    "EnumDeclaration",
    "ExportDeclaration",
    "FunctionDeclaration",
    "ImportDeclaration",
    "InterfaceDeclaration",
    "MemberKind",
    "MemberSignature",
    "ModuleDeclaration",
    "TypeAliasDeclaration",
    "VariableDeclaration",
]
