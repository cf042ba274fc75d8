"""
Transform module.

Contains the structural copy pass and the delegate transformation pass.
"""

from __future__ import annotations

from .copy_pass import StructuralCopyPass, copy_declaration
from .delegate_pass import DelegateTransformer

__all__ = [
    "DelegateTransformer",
    "StructuralCopyPass",
    "copy_declaration",
]
