"""
Configuration for the enhancer pipeline.

Holds the naming conventions of the generated client, the external
generator invocation and the formatter/output options.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Prefix of the synthetic relation fields the underlying generator injects
DEFAULT_AUX_PREFIX = "delegate_aux"


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        validate_before_write: Whether to re-parse generated declarations before writing
        atomic_write: Whether to use atomic file writes
    """

    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Formatter executable and its fixed arguments
    command: list[str] = field(default_factory=lambda: ["prettier"])

    # Line length for the formatter
    line_length: int = 120


@dataclass
class EnhancerConfig:
    """Configuration options for client enhancement."""

    # Name prefix of synthetic back-reference fields
    aux_prefix: str = DEFAULT_AUX_PREFIX

    # Namespace holding the CRUD declarations in the generated client
    crud_namespace: str = "Prisma"

    # Module specifier of the stock generated client
    client_import: str = "@prisma/client"

    # Directory (relative to the output directory) of the logical client
    logical_client_dir: str = ".logical-prisma-client"

    # Path of the logical schema fed to the external generator
    logical_schema: str = ""

    # External generator command; the schema path and extra args are appended
    generate_command: list[str] = field(default_factory=lambda: ["prisma", "generate"])
    generate_args: list[str] = field(default_factory=lambda: ["--no-engine"])

    # Seconds before the external generator is considered hung (0 = no limit)
    generate_timeout: int = 0

    # Methods removed from the operations interface of a delegate model
    blocked_delegate_methods: list[str] = field(default_factory=lambda: ["create", "createMany", "upsert"])

    # Properties removed from the create/update inputs of a delegate model
    blocked_delegate_input_fields: list[str] = field(default_factory=lambda: ["create", "connectOrCreate", "upsert"])

    # Whether `enhance.ts` forwards generated zod schemas
    with_zod_schemas: bool = False

    # Add generation comment at top of generated sources
    add_generation_comment: bool = True

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> EnhancerConfig:
        """Create a config from a dictionary."""
        config = EnhancerConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                config.output = OutputConfig(
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "aux_prefix": self.aux_prefix,
            "crud_namespace": self.crud_namespace,
            "client_import": self.client_import,
            "logical_client_dir": self.logical_client_dir,
            "logical_schema": self.logical_schema,
            "generate_command": self.generate_command,
            "generate_args": self.generate_args,
            "generate_timeout": self.generate_timeout,
            "blocked_delegate_methods": self.blocked_delegate_methods,
            "blocked_delegate_input_fields": self.blocked_delegate_input_fields,
            "with_zod_schemas": self.with_zod_schemas,
            "add_generation_comment": self.add_generation_comment,
            "formatter": {
                "enabled": self.formatter.enabled,
                "command": self.formatter.command,
                "line_length": self.formatter.line_length,
            },
            "output": {
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
