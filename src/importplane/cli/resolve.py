"""importplane resolve command - resolve a module name to files."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from importplane.cli.utils import echo_json, open_workspace, reported_errors
from importplane.resolution.models import ImportResult


def _result_to_dict(result: ImportResult) -> dict[str, object]:
    return {
        "import_name": result.import_name,
        "found": result.is_import_found,
        "import_type": result.import_type.name.lower(),
        "category": result.category.value,
        "resolved_paths": [str(p) if p is not None else None for p in result.resolved_paths],
        "is_stub_file": result.is_stub_file,
        "is_namespace_package": result.is_namespace_package,
        "is_stub_package": result.is_stub_package,
        "is_py_typed_present": result.is_py_typed_present,
        "partial_stub_paths": [str(p) for p in result.partial_stub_paths],
        "implicit_imports": [imp.name for imp in result.implicit_imports],
        "failure_info": list(result.import_failure_info),
    }


@click.command()
@click.argument("module")
@click.option(
    "--from",
    "source_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File the import is written in (required for relative names)",
)
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), help="Project root")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def resolve_command(module: str, source_file: Path | None, root: Path | None, as_json: bool) -> None:
    """Resolve MODULE the way a type checker would.

    MODULE is a dotted name such as os.path or ..pkg.mod.
    """
    ws = open_workspace(root, near=source_file)
    source = source_file.resolve() if source_file is not None else None
    with reported_errors():
        result = ws.resolve(source, module)

    if as_json:
        echo_json(_result_to_dict(result))
        return

    console = Console()
    if not result.is_import_found:
        console.print(f"[red]✗[/red] {result.import_name} not found")
        for note in result.import_failure_info:
            console.print(f"  [dim]{note}[/dim]")
        raise SystemExit(1)

    console.print(f"[green]✓[/green] {result.import_name} [dim]({result.category.value})[/dim]")
    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("part", style="cyan")
    table.add_column("path")
    parts = result.import_name.lstrip(".").split(".") if result.import_name.strip(".") else ["."]
    for i, path in enumerate(result.resolved_paths):
        label = parts[i] if i < len(parts) else "stub"
        table.add_row(label, str(path) if path is not None else "[dim]namespace[/dim]")
    console.print(table)
    if result.implicit_imports:
        console.print(f"[dim]submodules: {', '.join(imp.name for imp in result.implicit_imports)}[/dim]")
