"""
Schema graph module.

Contains the resolved schema node definitions and their JSON loader.
"""

from __future__ import annotations

from .loader import SchemaLoader
from .nodes import (
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

__all__ = [
    "ArrayExpr",
    "Attribute",
    "AttributeArg",
    "DataModel",
    "DataModelField",
    "Expression",
    "InvocationExpr",
    "LiteralExpr",
    "MemberAccessExpr",
    "ReferenceExpr",
    "SchemaGraph",
    "SchemaLoader",
    "SuperTypeRef",
]
