import json
import logging

import click

from .cli_utils import reconstruct_command_line
from .pipeline import EnhancerConfig, EnhancerError, EnhancerGenerator, SchemaLoader


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--logical-schema", default=None, type=click.Path(resolve_path=True), help="Logical schema fed to the client generator")
@click.option("--client-import", default=None, type=str, help="Module specifier of the generated client")
@click.option(
    "--transform-only",
    is_flag=True,
    default=False,
    help="Only transform an existing client declaration file (see --declarations)",
)
@click.option(
    "--declarations",
    default=None,
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Generated index.d.ts to transform in --transform-only mode",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every rewrite")
@click.argument("schema", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def client_enhancer(config, logical_schema, client_import, transform_only, declarations, verbose, schema, output):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    if config is not None:
        with open(config) as f:
            config = EnhancerConfig.from_dict(json.load(f))
    else:
        config = EnhancerConfig()

    # CLI options override the config file
    if logical_schema:
        config.logical_schema = logical_schema
    if client_import:
        config.client_import = client_import

    if transform_only and declarations is None:
        raise click.UsageError("--transform-only requires --declarations")

    try:
        graph = SchemaLoader().load(schema)
        generator = EnhancerGenerator(graph, config, output, command_line=reconstruct_command_line(client_enhancer))
        if transform_only:
            result = generator.transform_file(declarations, output)
        else:
            result = generator.generate()
    except EnhancerError as e:
        raise click.ClickException(str(e)) from e

    if result.client_path:
        click.echo(f"Client model types: {result.client_path}")
