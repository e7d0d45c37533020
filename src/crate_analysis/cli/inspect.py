from collections.abc import Sequence
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from crate_analysis.core.codec import DecodeError
from crate_analysis.core.documents import read_document
from crate_analysis.core.resolve import DefIndex, find_asymmetric_links, find_dangling_ids, find_duplicate_ids
from crate_analysis.models import U32_MAX, Analysis, Format, Id

console = Console()

FormatOption = Annotated[
    str | None, typer.Option("--format", "-f", help="Input format (json, jsonapi). Detected when omitted.")
]


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(v) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _load(path: str, format_name: str | None) -> tuple[Analysis, Format]:
    try:
        return read_document(path, format_name)
    except DecodeError as exc:
        console.print(f"[red]Invalid document[/red] at [bold]{exc.path}[/bold]: {exc.message}")
        raise typer.Exit(1) from exc
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def inspect(
    path: Annotated[str, typer.Argument(help="Path to an analysis document.")],
    format_name: FormatOption = None,
) -> None:
    """Summarize an analysis document."""
    analysis, fmt = _load(path, format_name)

    prelude = analysis.prelude
    if prelude is None:
        console.print("Prelude: [yellow]none[/yellow]")
    else:
        console.print(f"Crate [bold]{prelude.crate_name}[/bold] ({prelude.crate_root})")
        if prelude.external_crates:
            _render_table(
                ["num", "name", "file_name"],
                [(ext.num, ext.name, ext.file_name) for ext in prelude.external_crates],
            )

    _render_table(
        ["collection", "count"],
        [
            ("imports", len(analysis.imports)),
            ("defs", len(analysis.defs)),
            ("refs", len(analysis.refs)),
            ("macro_refs", len(analysis.macro_refs)),
            ("relations", len(analysis.relations)),
        ],
    )
    console.print(f"Format: {fmt.value}, schema version {analysis.version}")


def validate(
    path: Annotated[str, typer.Argument(help="Path to an analysis document.")],
    format_name: FormatOption = None,
    strict: Annotated[bool, typer.Option(help="Exit with status 1 when consistency findings exist.")] = False,
) -> None:
    """Decode a document and report unresolved or inconsistent ids."""
    analysis, _ = _load(path, format_name)

    dangling = find_dangling_ids(analysis)
    asymmetric = find_asymmetric_links(analysis)
    duplicates = find_duplicate_ids(analysis)

    if dangling:
        console.print("[yellow]Unresolved ids[/yellow]")
        _render_table(["path", "id"], [(d.path, d.id) for d in dangling])
    if asymmetric:
        console.print("[yellow]One-directional parent/child links[/yellow]")
        _render_table(["parent", "child", "declared_by"], [(a.parent, a.child, a.declared_by) for a in asymmetric])
    if duplicates:
        console.print("[yellow]Duplicate def ids[/yellow]")
        _render_table(["id"], [(d,) for d in duplicates])

    findings = len(dangling) + len(asymmetric) + len(duplicates)
    if findings == 0:
        console.print("[green]Document is valid and self-consistent.[/green]")
        return
    console.print(f"Document is valid with {findings} consistency finding(s).")
    if strict:
        raise typer.Exit(1)


def lookup(
    path: Annotated[str, typer.Argument(help="Path to an analysis document.")],
    krate: Annotated[int, typer.Argument(help="Crate number of the id.", min=0, max=U32_MAX)],
    index: Annotated[int, typer.Argument(help="Crate-local index of the id.", min=0, max=U32_MAX)],
    format_name: FormatOption = None,
) -> None:
    """Resolve an id to its def."""
    analysis, _ = _load(path, format_name)
    def_index = DefIndex.build(analysis)
    target = Id(krate=krate, index=index)

    found = def_index.resolve(target)
    if found is None:
        console.print(f"[yellow]Id {target} is not declared in this document.[/yellow]")
        raise typer.Exit(1)

    parent = def_index.parent_of(found)
    _render_table(
        ["field", "value"],
        [
            ("kind", found.kind.value),
            ("name", found.name),
            ("qualname", found.qualname),
            ("value", found.value),
            ("span", f"{found.span.file_name}:{found.span.line_start}:{found.span.column_start}"),
            ("parent", parent.qualname if parent is not None else str(found.parent or "")),
            ("children", ", ".join(c.qualname for c in def_index.children_of(found))),
            ("signature", found.sig.text if found.sig is not None else ""),
        ],
    )
