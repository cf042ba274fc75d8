"""
External module.

Contains the invocation of the underlying client's own generator.
"""

from __future__ import annotations

from .client_generator import ClientGenerator

__all__ = [
    "ClientGenerator",
]
