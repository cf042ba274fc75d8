"""
Analyzer module.

Contains delegate hierarchy resolution over the schema graph.
"""

from __future__ import annotations

from .hierarchy import (
    DelegateHierarchyResolver,
    HierarchyEntry,
    build_index,
    discriminator_chain,
    discriminator_of,
    has_auth_in_default,
    needs_projection,
    resolve_discriminator,
)

__all__ = [
    "DelegateHierarchyResolver",
    "HierarchyEntry",
    "build_index",
    "discriminator_chain",
    "discriminator_of",
    "has_auth_in_default",
    "needs_projection",
    "resolve_discriminator",
]
