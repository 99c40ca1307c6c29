"""Main Typer application — imports and registers all CLI commands.

Entry point: ``sigilforge`` (configured via pyproject.toml scripts).

Commands: eval, scan, sigils.
"""

from __future__ import annotations

from typing import Optional

import typer

from sigilforge.cli.commands.eval_cmd import build_dispatcher, eval_cmd
from sigilforge.cli.commands.scan import scan_cmd
from sigilforge.config import settings
from sigilforge.logging_setup import configure_logging

app = typer.Typer(
    name="sigilforge",
    help="Sigilforge: resolve ~sigil literals through an extensible handler registry.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to SIGILFORGE_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or settings.log_level)


# Register subcommands
app.command(name="eval", help="Resolve a single sigil literal and print its value.")(eval_cmd)
app.command(name="scan", help="Find and resolve every sigil literal in a text.")(scan_cmd)


@app.command(name="sigils", help="List registered sigil handlers.")
def sigils_cmd(
    module: Optional[list[str]] = typer.Option(
        None, "--module", "-m", help="Handler module to activate first. Repeatable."
    ),
) -> None:
    """List the sigils visible to the CLI and where they come from."""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    registry = build_dispatcher(module or [], []).registry
    entries = registry.entries()

    if not entries:
        console.print("[dim]No sigils registered.[/dim]")
        return

    table = Table(title="Registered Sigils")
    table.add_column("Tag", style="cyan")
    table.add_column("Description")
    table.add_column("Modifiers", justify="center")
    table.add_column("Escapes", justify="center")
    table.add_column("Source", style="dim")

    for entry in entries:
        if entry.modifiers is None:
            modifiers = "[yellow]any[/yellow]"
        else:
            modifiers = "".join(sorted(entry.modifiers)) or "-"
        if entry.tag.isupper():
            escapes = "[dim]raw[/dim]"
        elif entry.preserve_backslashes:
            escapes = "interp"
        else:
            escapes = "[green]yes[/green]"
        table.add_row(f"~{entry.tag}", entry.description, modifiers, escapes, entry.source)

    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
