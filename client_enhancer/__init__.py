"""Client Enhancer

A Python package for enhancing a generated data-access client with
polymorphic delegate models. It regenerates the client from a logical
schema, rewrites the client's type declarations so that delegate
hierarchies are exposed correctly, and emits the `enhance()` entry point.
"""

__version__ = "1.0.0"

from .pipeline import (  # noqa: E402
    ArtifactWriteError,
    DeclarationParseError,
    EnhancerConfig,
    EnhancerError,
    EnhancerGenerator,
    FormatterConfig,
    GenerationError,
    GenerationResult,
    OutputConfig,
    SchemaError,
    SchemaLoader,
)

__all__ = [
    "EnhancerGenerator",
    "EnhancerConfig",
    "FormatterConfig",
    "OutputConfig",
    "GenerationResult",
    "SchemaLoader",
    "EnhancerError",
    "SchemaError",
    "GenerationError",
    "DeclarationParseError",
    "ArtifactWriteError",
]
