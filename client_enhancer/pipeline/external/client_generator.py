"""
External client generator invocation.

The underlying client's own generator runs as an opaque out-of-process
step. Its output is suppressed on the first attempt; a failed attempt is
retried once with output sent to the console so the operator sees the
diagnostics.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..config import EnhancerConfig
from ..errors import GenerationError

logger = logging.getLogger(__name__)


class ClientGenerator:
    """Runs the external client generator on a logical schema."""

    def __init__(self, config: EnhancerConfig | None = None):
        self.config = config or EnhancerConfig()

    def build_command(self, schema_path: Path | str) -> list[str]:
        """Full command line for a schema, e.g. `prisma generate --schema s.prisma --no-engine`."""
        return [*self.config.generate_command, "--schema", str(schema_path), *self.config.generate_args]

    def generate(self, schema_path: Path | str) -> None:
        """
        Run the generator, retrying once with visible output on failure.

        Args:
            schema_path: Logical schema to generate the client from

        Raises:
            GenerationError: If both attempts fail
        """
        command = self.build_command(schema_path)
        logger.info(f"Running {' '.join(command)}")

        error = self._run(command, quiet=True)
        if error is None:
            return

        logger.warning(f"Client generation failed ({error}); running again with output")
        error = self._run(command, quiet=False)
        if error is not None:
            raise GenerationError(command, schema_path)

    def _run(self, command: list[str], quiet: bool) -> str | None:
        """Run the command once; return a failure description or None on success."""
        output = subprocess.DEVNULL if quiet else None
        try:
            subprocess.run(
                command,
                stdout=output,
                stderr=output,
                check=True,
                timeout=self.config.generate_timeout or None,
            )
        except subprocess.CalledProcessError as e:
            return f"exit status {e.returncode}"
        except subprocess.TimeoutExpired:
            return f"timed out after {self.config.generate_timeout}s"
        except OSError as e:
            return str(e)
        return None
