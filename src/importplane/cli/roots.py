"""importplane roots / module-name commands - inspect the search roots."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from importplane.cli.utils import echo_json, open_workspace, reported_errors


@click.command()
@click.argument("path", default=None, required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def roots_command(path: Path | None, as_json: bool) -> None:
    """List import search roots in the order they are tried.

    PATH is a file or directory inside the project (default: current directory).
    """
    ws = open_workspace(None, near=path)
    source = path.resolve() if path is not None and path.is_file() else None
    roots = ws.import_roots(source)

    if as_json:
        echo_json(
            [{"kind": r.kind.name.lower(), "path": str(r.path), "stdlib": r.is_stdlib} for r in roots]
        )
        return

    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("kind", style="cyan")
    table.add_column("path")
    for i, root in enumerate(roots, start=1):
        kind = root.kind.name.lower() + (" (stdlib)" if root.is_stdlib else "")
        table.add_row(str(i), kind, str(root.path))
    Console().print(table)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--relative-to", type=click.Path(exists=True, path_type=Path), help="Also show the relative name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def module_name_command(file: Path, relative_to: Path | None, as_json: bool) -> None:
    """Show the dotted name FILE is imported under."""
    target = file.resolve()
    ws = open_workspace(None, near=target)
    with reported_errors():
        info = ws.module_name(target)
        relative = (
            ws.resolver.get_relative_module_name(relative_to.resolve(), target)
            if relative_to is not None
            else None
        )

    if as_json:
        echo_json(
            {
                "module_name": info.module_name,
                "import_type": info.import_type.name.lower(),
                "category": info.category.value,
                "py_typed": info.is_third_party_py_typed_present,
                "local_typings": info.is_local_typings_file,
                "root": str(info.search_root.path) if info.search_root else None,
                "relative_name": relative,
            }
        )
        return

    if info.module_name is None:
        raise click.ClickException(f"{target} is not under any import root")
    click.echo(info.module_name)
    if relative is not None:
        click.echo(relative)
