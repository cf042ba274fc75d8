"""
Error types raised by the enhancer pipeline.

Local problems (a malformed attribute on one model) are recoverable and
only degrade the affected rewrite. Process-level problems (the external
client generator failing, an artifact that cannot be written) abort the run.
"""

from __future__ import annotations

from pathlib import Path


class EnhancerError(Exception):
    """Base class for all enhancer errors."""

    pass


class SchemaError(EnhancerError):
    """Raised when the schema graph is malformed.

    This can happen when:
    - The schema document does not have the expected structure
    - A `@@delegate` attribute does not reference a field of its model
    - A `@relation` attribute has an unusable `fields` argument

    Raised while loading, it is fatal. Raised while resolving a single
    hierarchy, it is logged as a warning and only that hierarchy degrades.
    """

    pass


class DeclarationParseError(EnhancerError):
    """Raised when a declaration file cannot be read or parsed."""

    pass


class GenerationError(EnhancerError):
    """Raised when the external client generator fails after its retry."""

    def __init__(self, command: list[str], schema_path: Path | str):
        self.command = list(command)
        self.schema_path = str(schema_path)
        super().__init__(f'Failed to run "{" ".join(self.command)}" on logical schema: {self.schema_path}')


class ArtifactWriteError(EnhancerError):
    """Raised when a generated artifact fails validation or cannot be written."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")
