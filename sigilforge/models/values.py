"""Handler-side models: registry entries, resolution results, symbol values."""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from sigilforge.models.literals import SigilLiteral

# A handler takes the (processed) body and the modifier set and returns any value.
Handler = Callable[[str, frozenset[str]], Any]


class Symbol(BaseModel):
    """An interned-by-name symbol value, produced by ``~w(...)a``.

    Two symbols with the same name compare and hash equal.

    >>> Symbol(name="foo")
    :foo
    """

    model_config = ConfigDict(frozen=True)

    name: str

    def __repr__(self) -> str:
        return f":{self.name}"

    def __str__(self) -> str:
        return self.name


class HandlerEntry(BaseModel):
    """Immutable binding of a tag letter to its handler.

    ``modifiers`` lists the letters the handler accepts; ``None`` leaves
    modifier validation entirely to the handler.  ``dedent_blocks`` asks the
    dispatcher to strip the shared indentation of triple-quoted bodies
    before invocation.  ``preserve_backslashes`` keeps backslash sequences
    of lowercase-tag bodies intact for handlers with their own escape syntax.
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    handler: Handler
    description: str = ""
    modifiers: frozenset[str] | None = None
    dedent_blocks: bool = True
    preserve_backslashes: bool = False  # lowercase tag: interpolate only
    source: str = ""  # module or scope the binding came from


class ResolvedSigil(BaseModel):
    """Outcome of dispatching one literal."""

    model_config = ConfigDict(frozen=True)

    literal: SigilLiteral
    text: str  # body as handed to the handler
    value: Any = Field(default=None)
