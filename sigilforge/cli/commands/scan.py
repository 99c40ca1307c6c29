"""``sigilforge scan`` — list and resolve every sigil literal in a text."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sigilforge.cli.commands.eval_cmd import build_dispatcher
from sigilforge.core.errors import SigilError

console = Console()


def scan_cmd(
    source: Optional[str] = typer.Argument(None, help="Text to scan (omit when using --file)."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read the text from a file."
    ),
    module: Optional[list[str]] = typer.Option(
        None, "--module", "-m", help="Handler module to activate. Repeatable."
    ),
    bind: Optional[list[str]] = typer.Option(
        None, "--bind", "-b", help="NAME=VALUE binding for interpolation. Repeatable."
    ),
) -> None:
    """Find every sigil in the text and show its resolved value."""
    if file is not None:
        text = file.read_text(encoding="utf-8")
    elif source is not None:
        text = source
    else:
        console.print("[red]Provide SOURCE or --file.[/red]")
        raise typer.Exit(code=2)

    dispatcher = build_dispatcher(module or [], bind or [])
    try:
        results = dispatcher.expand_all(text)
    except SigilError as exc:
        console.print(f"[red]Sigil error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1)

    if not results:
        console.print("[dim]No sigils found.[/dim]")
        return

    table = Table(title=f"Sigils ({len(results)})")
    table.add_column("At", style="dim", no_wrap=True)
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Delimiter")
    table.add_column("Modifiers", justify="center")
    table.add_column("Value", style="green")

    for resolved in results:
        literal = resolved.literal
        table.add_row(
            str(literal.position),
            f"~{literal.tag}",
            literal.delimiter.value,
            "".join(sorted(literal.modifiers)) or "-",
            escape(repr(resolved.value)),
        )

    console.print(table)
