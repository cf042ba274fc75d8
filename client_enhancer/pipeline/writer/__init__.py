"""
Writer module.

Contains the atomic file writer and the all-or-nothing output writer.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, Validator
from .output_writer import OutputWriter

__all__ = [
    "AtomicWriter",
    "OutputWriter",
    "Validator",
]
