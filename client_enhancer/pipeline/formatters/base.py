"""
Base class for declaration formatters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Abstract base class for TypeScript source formatters."""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig, filepath: str = "index.d.ts") -> str:
        """
        Format TypeScript source that will be written to `filepath`.

        Args:
            code: The TypeScript source to format
            config: Formatter configuration
            filepath: Name of the target file; `.d.ts` names are formatted
                as ambient declarations

        Returns:
            Formatted code, or `code` unchanged when formatting is not possible
        """

    @abstractmethod
    def is_available(self) -> bool:
        """True if the formatter executable can be run."""
