"""``sigilforge eval`` — resolve a single sigil literal.

Activates any extra handler modules, resolves the literal, and prints the
resulting value's ``repr``.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from sigilforge.config import settings
from sigilforge.core.dispatcher import SigilDispatcher
from sigilforge.core.errors import SigilError
from sigilforge.handlers import default_registry

console = Console()


def parse_bindings(pairs: list[str]) -> dict[str, str]:
    """Turn ``NAME=VALUE`` pairs into an interpolation mapping."""
    bindings: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--bind")
        bindings[name.strip()] = value
    return bindings


def build_dispatcher(modules: list[str], bind: list[str]) -> SigilDispatcher:
    """Dispatcher over the built-ins plus configured and requested handler modules.

    Exits with code 1 when a handler module cannot be activated.
    """
    registry = default_registry().child("cli")
    for entry_point in [*settings.handler_modules, *modules]:
        try:
            registry.activate(entry_point)
        except (ImportError, AttributeError, TypeError) as exc:
            console.print(
                f"[red]Cannot activate handler module[/red] {escape(entry_point)}: {escape(str(exc))}",
                highlight=False,
            )
            raise typer.Exit(code=1)
    # No --bind means no resolver, so #{...} markers are kept as written.
    return SigilDispatcher(registry, bindings=parse_bindings(bind) or None)


def eval_cmd(
    source: str = typer.Argument(..., help="Sigil literal, e.g. '~w(foo bar)a'."),
    module: Optional[list[str]] = typer.Option(
        None,
        "--module",
        "-m",
        help="Handler module to activate (dotted path, optionally ':attr'). Repeatable.",
    ),
    bind: Optional[list[str]] = typer.Option(
        None,
        "--bind",
        "-b",
        help="NAME=VALUE binding for #{NAME} interpolation. Repeatable.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the scanned literal."),
) -> None:
    """Resolve SOURCE and print the resulting value."""
    dispatcher = build_dispatcher(module or [], bind or [])
    try:
        resolved = dispatcher.resolve_one(source)
    except SigilError as exc:
        console.print(f"[red]Sigil error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1)

    if verbose:
        literal = resolved.literal
        console.print(
            Panel(
                "\n".join([
                    f"[bold]Tag:[/bold]        ~{literal.tag}",
                    f"[bold]Delimiter:[/bold]  {literal.delimiter.value}",
                    f"[bold]Modifiers:[/bold]  {''.join(sorted(literal.modifiers)) or '-'}",
                    f"[bold]Raw body:[/bold]   {escape(repr(literal.raw_text))}",
                    f"[bold]Text:[/bold]       {escape(repr(resolved.text))}",
                ]),
                title="[bold]Sigil[/bold]",
                border_style="cyan",
            )
        )

    console.print(repr(resolved.value), markup=False, highlight=False, soft_wrap=True)
