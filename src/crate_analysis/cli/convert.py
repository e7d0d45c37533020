from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from crate_analysis.cli.inspect import FormatOption, _load
from crate_analysis.core.codec import output_filename
from crate_analysis.core.documents import write_document
from crate_analysis.core.formats import normalize_format

console = Console()


def convert(
    path: Annotated[str, typer.Argument(help="Path to an analysis document.")],
    to: Annotated[str, typer.Option("--to", help="Target format (csv, json, jsonapi).")],
    output: Annotated[str | None, typer.Option("--output", "-o", help="Output path.")] = None,
    format_name: FormatOption = None,
) -> None:
    """Re-encode a document in another format."""
    try:
        target = normalize_format(to)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    analysis, _ = _load(path, format_name)
    source = Path(path)
    destination = output or str(source.with_name(output_filename(source.stem, target)))
    if Path(destination).resolve() == source.resolve():
        console.print(f"[red]Refusing to overwrite the input file {path}.[/red]")
        raise typer.Exit(1)

    written = write_document(analysis, destination, target)
    console.print(f"[green]Wrote[/green] {target.value} document to {written}")
