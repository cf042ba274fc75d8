"""
Output writer.

Persists the artifacts staged by one enhancer run. Either every artifact
is written or, on the first failure, the ones already written in this run
are rolled back to their previous state.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import OutputConfig
from ..errors import ArtifactWriteError
from .atomic_writer import AtomicWriter, Validator

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes a set of artifacts all-or-nothing."""

    def __init__(self, config: OutputConfig | None = None, validate: Validator | None = None):
        """
        Initialize the writer.

        Args:
            config: Output configuration (atomic writes, validation)
            validate: Validation function applied to each artifact before it is written
        """
        self.config = config or OutputConfig()
        self._validate = validate
        self._atomic = AtomicWriter(validate)

    def write_all(self, artifacts: dict[Path, str]) -> list[Path]:
        """
        Write every artifact, in order.

        Args:
            artifacts: Target path -> content

        Returns:
            The written paths

        Raises:
            ArtifactWriteError: If an artifact fails validation or cannot be written;
                artifacts written before it are restored
        """
        written: list[tuple[Path, str | None]] = []
        try:
            for path, content in artifacts.items():
                previous = self._read_previous(path)
                self._write(path, content)
                written.append((path, previous))
                logger.debug(f"Wrote {path}")
        except ArtifactWriteError:
            self._rollback(written)
            raise
        return [path for path, _ in written]

    def _write(self, path: Path, content: str) -> None:
        validate = self.config.validate_before_write
        if self.config.atomic_write:
            self._atomic.write(path, content, validate=validate)
            return

        if validate and self._validate is not None:
            self._validate(path, content)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            raise ArtifactWriteError(path, str(e)) from e

    def _read_previous(self, path: Path) -> str | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactWriteError(path, f"cannot back up existing file: {e}") from e

    def _rollback(self, written: list[tuple[Path, str | None]]) -> None:
        """Restore previous contents (or remove new files), newest first."""
        for path, previous in reversed(written):
            try:
                if previous is None:
                    path.unlink(missing_ok=True)
                else:
                    path.write_text(previous, encoding="utf-8", newline="")
                logger.info(f"Rolled back {path}")
            except OSError as e:
                logger.error(f"Could not roll back {path}: {e}")
