"""importplane complete command - auto-import candidates for a word."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from importplane.cli.utils import echo_json, open_workspace, reported_errors
from importplane.parsing.models import Position, apply_text_edits


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("word")
@click.option("--line", type=int, default=None, help="0-based line of the cursor (default: end of file)")
@click.option("--column", type=int, default=0, show_default=True, help="0-based column of the cursor")
@click.option("--abbr", "abbreviation", default=None, help="Preferred alias, e.g. np for numpy")
@click.option("--limit", type=int, default=20, show_default=True, help="Candidates to show")
@click.option("--apply", "apply_first", is_flag=True, help="Print FILE with the first candidate's edits applied")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def complete_command(
    file: Path,
    word: str,
    line: int | None,
    column: int,
    abbreviation: str | None,
    limit: int,
    apply_first: bool,
    as_json: bool,
) -> None:
    """List auto-import candidates for WORD typed in FILE."""
    source = file.resolve()
    ws = open_workspace(None, near=source)
    position = Position(line, column) if line is not None else None
    with reported_errors():
        results = ws.complete(source, word, position=position, abbreviation=abbreviation)
    results = results[:limit]

    if apply_first:
        if not results or not results[0].edits:
            raise click.ClickException(f"No edits to apply for {word!r}")
        parsed = ws.parse(source)
        if parsed is not None:
            click.echo(apply_text_edits(parsed.text, results[0].edits), nl=False)
        return

    if as_json:
        echo_json([r.to_dict() for r in results])
        return

    console = Console()
    if not results:
        console.print(f"[yellow]No candidates[/yellow] for {word!r}")
        return

    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("name", style="cyan")
    table.add_column("from")
    table.add_column("kind", style="dim")
    table.add_column("insert")
    table.add_column("edit")
    for r in results:
        edit = ""
        if r.edits:
            edit = "; ".join(e.replacement_text.strip() for e in r.edits if e.replacement_text.strip())
        table.add_row(r.name, r.source or "", r.kind.value if r.kind else "", r.insertion_text, edit)
    console.print(table)
