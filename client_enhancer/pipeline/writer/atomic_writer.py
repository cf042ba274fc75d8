"""
Atomic file writer for generated artifacts.

Ensures that file writes are atomic so that an interrupted run never
leaves a half-written artifact behind.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import ArtifactWriteError

# Raises ArtifactWriteError (or returns normally) for the content of a path
Validator = Callable[[Path, str], None]


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate: Validator | None = None):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function called before the replace
        """
        self._validate = validate

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            ArtifactWriteError: If validation or any file operation fails
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            # Same directory ensures atomic rename on the same filesystem
            temp_fd, temp_path_str = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                text=True,
            )
        except OSError as e:
            raise ArtifactWriteError(path, str(e)) from e

        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)

            if validate and self._validate is not None:
                self._validate(path, content)

            temp_path.replace(path)
        except OSError as e:
            self._discard(temp_path)
            raise ArtifactWriteError(path, str(e)) from e
        except Exception:
            self._discard(temp_path)
            raise

    def _discard(self, temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass  # Best effort cleanup
