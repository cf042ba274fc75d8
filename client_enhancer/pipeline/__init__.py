"""
Pipeline - delegate-aware client enhancement.

This module provides the multi-phase architecture that turns a generated
data-access client into an enhanced one:

1. Phase 1 (Schema graph): Load the resolved schema graph
2. Phase 2 (Analyzer): Build the delegate hierarchy index
3. Phase 3 (External): Generate the logical client with its own generator
4. Phase 4 (Declarations): Parse the client's type declarations
5. Phase 5 (Transform): Copy and rewrite the declarations for delegate models
6. Phase 6 (Formatter): Optional post-processing (prettier)
7. Phase 7 (Writer): Write all artifacts atomically, all-or-nothing
"""

from __future__ import annotations

from .config import EnhancerConfig, FormatterConfig, OutputConfig
from .errors import (
    ArtifactWriteError,
    DeclarationParseError,
    EnhancerError,
    GenerationError,
    SchemaError,
)
from .generator import EnhancerGenerator, GenerationResult
from .schema_graph import SchemaLoader

__all__ = [
    "ArtifactWriteError",
    "DeclarationParseError",
    "EnhancerConfig",
    "EnhancerError",
    "EnhancerGenerator",
    "FormatterConfig",
    "GenerationError",
    "GenerationResult",
    "OutputConfig",
    "SchemaError",
    "SchemaLoader",
]
