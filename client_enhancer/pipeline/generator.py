"""
Enhancer generator.

Orchestrates one enhancer run:

1. Decide whether a logical client is needed (delegate hierarchies or
   `auth()` in field defaults)
2. Run the external client generator on the logical schema
3. Transform the generated `index.d.ts` into `index-fixed.d.ts`
4. Render `models.d.ts` and `enhance.ts`
5. Write every artifact all-or-nothing
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import jinja2

from .. import __version__
from .analyzer import DelegateHierarchyResolver
from .config import EnhancerConfig
from .declarations import DeclarationParser, DeclarationSerializer
from .errors import ArtifactWriteError, DeclarationParseError
from .external import ClientGenerator
from .formatters import Formatter, PrettierFormatter
from .schema_graph.nodes import AUTH_ATTRIBUTE, ArrayExpr, DataModel, ReferenceExpr, SchemaGraph
from .transform import DelegateTransformer
from .writer import OutputWriter

logger = logging.getLogger(__name__)

CLIENT_DECLARATIONS = "index.d.ts"
FIXED_DECLARATIONS = "index-fixed.d.ts"
MODELS_FILE = "models.d.ts"
ENHANCE_FILE = "enhance.ts"
DEFAULT_LOGICAL_SCHEMA = "logical.prisma"


@dataclass
class GenerationResult:
    """Outcome of an enhancer run."""

    # Artifacts written, in write order
    written: list[Path] = field(default_factory=list)

    # Directory of the generated logical client, if one was produced
    logical_client_dir: Path | None = None

    # Location of the client model types relative to the schema, if a logical client was produced
    client_path: str | None = None


class EnhancerGenerator:
    """Generates the enhanced client artifacts for a schema graph."""

    def __init__(
        self,
        graph: SchemaGraph,
        config: EnhancerConfig | None = None,
        out_dir: Path | str = ".",
        client_generator: ClientGenerator | None = None,
        formatter: Formatter | None = None,
        command_line: str = "client_enhancer",
    ):
        """
        Initialize the generator.

        Args:
            graph: The resolved schema graph
            config: Enhancer configuration
            out_dir: Directory receiving the generated artifacts
            client_generator: Runs the external client generator
            formatter: Formats the transformed declarations when enabled
            command_line: Invoking command line, shown in the generation comment
        """
        self.graph = graph
        self.config = config or EnhancerConfig()
        self.out_dir = Path(out_dir)
        self.client_generator = client_generator or ClientGenerator(self.config)
        self.formatter = formatter or PrettierFormatter(self.config.formatter.command)
        self.command_line = command_line

        self.resolver = DelegateHierarchyResolver(graph)
        self.parser = DeclarationParser()
        self.serializer = DeclarationSerializer()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent / "templates" / "typescript"
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.enhance_template = self.jinja_env.get_template(f"{ENHANCE_FILE}.jinja2")
        self.models_template = self.jinja_env.get_template(f"{MODELS_FILE}.jinja2")

    def generate(self) -> GenerationResult:
        """
        Run the full generation.

        Returns:
            What was written

        Raises:
            GenerationError: If the external client generator fails twice
            DeclarationParseError: If the generated client declarations cannot be read
            ArtifactWriteError: If an artifact cannot be written (nothing is kept)
        """
        artifacts: dict[Path, str] = {}
        validated: set[Path] = set()
        logical_dir = None

        if self.resolver.needs_logical_client():
            logical_dir = self.out_dir / self.config.logical_client_dir
            schema_path = self.logical_schema_path()
            logger.info(f"Generating logical client from {schema_path}")
            self.client_generator.generate(schema_path)

            fixed_path = logical_dir / FIXED_DECLARATIONS
            content, validate = self.fix_declarations(logical_dir / CLIENT_DECLARATIONS)
            artifacts[fixed_path] = content
            if validate:
                validated.add(fixed_path)

        artifacts[self.out_dir / MODELS_FILE] = self.render_models(logical_dir is not None)
        artifacts[self.out_dir / ENHANCE_FILE] = self.render_enhance(logical_dir is not None)

        written = self._write(artifacts, validated)
        return GenerationResult(
            written=written,
            logical_client_dir=logical_dir,
            client_path=self._client_path() if logical_dir is not None else None,
        )

    def transform_file(self, source: Path | str, target: Path | str | None = None) -> GenerationResult:
        """
        Transform an existing client declaration file without running the external generator.

        Args:
            source: The generated `index.d.ts`
            target: Output path (default: `index-fixed.d.ts` next to the source)

        Returns:
            What was written
        """
        source = Path(source)
        target = Path(target) if target is not None else source.with_name(FIXED_DECLARATIONS)
        content, validate = self.fix_declarations(source)
        written = self._write({target: content}, {target} if validate else set())
        return GenerationResult(written=written)

    def fix_declarations(self, source: Path) -> tuple[str, bool]:
        """
        Build the fixed client declarations.

        Without delegate hierarchies the source is copied verbatim.

        Args:
            source: The generated client declaration file

        Returns:
            The fixed text, and whether it should be validated before writing
            (only when the source itself parsed cleanly)

        Raises:
            DeclarationParseError: If the source cannot be read
        """
        if not self.resolver.needs_projection():
            logger.info(f"No delegate hierarchies; copying {source.name} verbatim")
            try:
                with open(source, encoding="utf-8", newline="") as f:
                    return f.read(), False
            except (OSError, UnicodeDecodeError) as e:
                raise DeclarationParseError(f"Cannot read declaration file {source}: {e}") from e

        document = self.parser.parse_file(source)
        logger.info(f"Transforming {source.name} for delegate models {', '.join(self.resolver.delegate_names)}")
        transformed = DelegateTransformer(self.resolver, self.config).transform_document(document)
        output = self.serializer.serialize(transformed)

        if self.config.formatter.enabled:
            output = self.formatter.format(output, self.config.formatter, FIXED_DECLARATIONS)
        return output, not document.has_errors

    def render_models(self, logical: bool) -> str:
        """Render the re-export module of the client model types."""
        if logical:
            import_path = f"./{self.config.logical_client_dir}/{FIXED_DECLARATIONS.removesuffix('.d.ts')}"
        else:
            import_path = self.config.client_import
        return self.models_template.render(import_path=import_path)

    def render_enhance(self, logical: bool) -> str:
        """Render the `enhance()` entry point module."""
        auth_model = self.find_auth_model()
        logical_import = f"./{self.config.logical_client_dir}/{FIXED_DECLARATIONS.removesuffix('.d.ts')}" if logical else ""
        return self.enhance_template.render(
            generation_comment=self._generation_comment(),
            with_zod_schemas=self.config.with_zod_schemas,
            client_import=self.config.client_import,
            logical_import=logical_import,
            auth_model=auth_model.name if auth_model else "",
            auth_id_union=" | ".join(f"'{name}'" for name in self._id_fields(auth_model)) if auth_model else "",
            auth_type_param=f"auth.{auth_model.name}" if auth_model else "AuthUser",
        )

    def find_auth_model(self) -> DataModel | None:
        """The model marked `@@auth`, else the model named `User`."""
        marked = next((m for m in self.graph.models if m.has_attribute(AUTH_ATTRIBUTE)), None)
        return marked or self.graph.get_model("User")

    def logical_schema_path(self) -> Path:
        if self.config.logical_schema:
            return Path(self.config.logical_schema)
        return self.out_dir / DEFAULT_LOGICAL_SCHEMA

    def _id_fields(self, model: DataModel) -> list[str]:
        """Names of a model's identifying fields (`@id`, else the `@@id` list)."""
        names = [f.name for f in model.fields if f.get_attribute("@id") is not None]
        if names:
            return names

        compound = model.get_attribute("@@id")
        fields_arg = compound.args[0].value if compound and compound.args else None
        if isinstance(fields_arg, ArrayExpr):
            return [item.target for item in fields_arg.items if isinstance(item, ReferenceExpr)]
        return []

    def _generation_comment(self) -> str:
        if not self.config.add_generation_comment:
            return ""
        return f"Generated by client_enhancer v{__version__} : {self.command_line}"

    def _client_path(self) -> str:
        """Location of `models` relative to the schema's directory."""
        models = (self.out_dir / "models").resolve()
        if not self.graph.source_path:
            return str(models)
        return os.path.relpath(models, Path(self.graph.source_path).resolve().parent)

    def _write(self, artifacts: dict[Path, str], validated: set[Path]) -> list[Path]:
        def validate(path: Path, content: str) -> None:
            if path in validated and self.parser.has_errors(content):
                raise ArtifactWriteError(path, "generated declarations do not parse")

        writer = OutputWriter(self.config.output, validate)
        written = writer.write_all(artifacts)
        for path in written:
            logger.info(f"Generated {path}")
        return written
