"""
Prettier formatter for TypeScript declarations.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class PrettierFormatter(Formatter):
    """Formatter piping TypeScript through the prettier executable."""

    def __init__(self, command: list[str] | None = None):
        """
        Args:
            command: Executable and fixed arguments (default: `prettier`)
        """
        self.command = list(command) if command else ["prettier"]
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check if prettier is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [*self.command, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def format(self, code: str, config: FormatterConfig, filepath: str = "index.d.ts") -> str:
        """
        Format TypeScript code using prettier.

        Args:
            code: TypeScript source to format
            config: Formatter configuration
            filepath: Target file name, used by prettier to pick the declaration dialect

        Returns:
            Formatted code, or the input unchanged if prettier is unavailable or fails
        """
        if not self.is_available():
            logger.warning(f"Formatter {self.command[0]} is not available; leaving output unformatted")
            return code

        cmd = [*self.command, "--parser", "typescript", "--stdin-filepath", filepath]
        if config.line_length:
            cmd.extend(["--print-width", str(config.line_length)])

        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=120,
            )
        except subprocess.SubprocessError as e:
            logger.warning(f"Formatter failed: {e}")
            return code

        if result.returncode == 0:
            return result.stdout
        logger.warning(f"Formatter exited with status {result.returncode}: {result.stderr.strip()}")
        return code
