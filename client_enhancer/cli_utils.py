"""
CLI utilities for command line reconstruction.
"""

from pathlib import Path

import click

PROGRAM_NAME = "client_enhancer"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the invoking command line from the current Click context.

    Used for the generation comment of generated sources. Paths are shown
    by file name only, options left at their default are omitted and flags
    are shown without a value.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        return PROGRAM_NAME

    arguments = []
    options = []
    for param in click_command.params:
        value = cli_args.get(param.name)
        if not value:
            continue

        if isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            formatted_value = path_obj.name if path_obj.exists() else str(value)
        else:
            formatted_value = str(value)

        if isinstance(param, click.Argument):
            arguments.append(formatted_value)
        elif isinstance(param, click.Option):
            if value == param.default:
                continue
            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, formatted_value])

    return " ".join([PROGRAM_NAME, *arguments, *options])
