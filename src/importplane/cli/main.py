"""importplane CLI - importplane command."""

from pathlib import Path

import click

from importplane import __version__
from importplane.cli.complete import complete_command
from importplane.cli.resolve import resolve_command
from importplane.cli.roots import module_name_command, roots_command
from importplane.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="importplane")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of .importplane/config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Path | None) -> None:
    """importplane - PEP 561 module resolution and auto-import synthesis."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(resolve_command, name="resolve")
cli.add_command(roots_command, name="roots")
cli.add_command(module_name_command, name="module-name")
cli.add_command(complete_command, name="complete")


if __name__ == "__main__":
    cli()
