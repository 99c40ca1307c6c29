"""Built-in sigil handlers.

==========  ===========================================  =============
Tag         Value                                        Modifiers
==========  ===========================================  =============
``r R``     compiled ``re.Pattern``                      ``i m s x u a``
``s S``     ``str``                                      none
``c C``     ``list[int]`` of code points                 none
``w W``     ``list`` of words                            ``s a c``
``D``       ``datetime.date``                            none
``T``       ``datetime.time``                            none
``N``       naive ``datetime.datetime``                  none
``U``       UTC ``datetime.datetime``                    none
==========  ===========================================  =============

Lowercase variants receive an escape-processed body; uppercase variants
receive the body as written.  The calendar sigils exist only in uppercase.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any

from sigilforge.core.errors import InvalidModifier
from sigilforge.core.registry import HandlerRegistry
from sigilforge.models.values import Symbol

REGEX_FLAGS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": re.UNICODE,
    "a": re.ASCII,
}

WORD_SHAPES = frozenset("sac")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def regex(text: str, modifiers: frozenset[str]) -> re.Pattern[str]:
    """Compile the body as a regular expression."""
    flags = 0
    for modifier in sorted(modifiers):
        if modifier not in REGEX_FLAGS:
            raise InvalidModifier(f"unknown regex modifier {modifier!r}")
        flags |= REGEX_FLAGS[modifier]
    return re.compile(text, flags)


def string(text: str, modifiers: frozenset[str]) -> str:
    return text


def charlist(text: str, modifiers: frozenset[str]) -> list[int]:
    return [ord(ch) for ch in text]


def words(text: str, modifiers: frozenset[str]) -> list[Any]:
    """Split the body on whitespace.

    ``s`` (default) yields strings, ``a`` symbols, ``c`` code-point lists.
    """
    if len(modifiers) > 1:
        raise InvalidModifier(
            f"word lists take at most one of a, c, s; got {''.join(sorted(modifiers))}"
        )
    shape = next(iter(modifiers), "s")
    parts = text.split()
    if shape == "a":
        return [Symbol(name=part) for part in parts]
    if shape == "c":
        return [charlist(part, frozenset()) for part in parts]
    return parts


def calendar_date(text: str, modifiers: frozenset[str]) -> date:
    return date.fromisoformat(text.strip())


def calendar_time(text: str, modifiers: frozenset[str]) -> time:
    return time.fromisoformat(text.strip())


def naive_datetime(text: str, modifiers: frozenset[str]) -> datetime:
    value = datetime.fromisoformat(text.strip())
    if value.tzinfo is not None:
        raise ValueError(f"~N expects a datetime without an offset, got {text.strip()!r}")
    return value


def utc_datetime(text: str, modifiers: frozenset[str]) -> datetime:
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    value = datetime.fromisoformat(raw)
    if value.utcoffset() is None:
        raise ValueError(f"~U expects a UTC datetime ending in Z, got {text.strip()!r}")
    if value.utcoffset().total_seconds() != 0:
        raise ValueError(f"~U expects a zero UTC offset, got {text.strip()!r}")
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_sigils(registry: HandlerRegistry) -> None:
    """Bind every built-in sigil in *registry*."""
    source = __name__
    registry.register(
        "r", regex, description="regular expression",
        modifiers=REGEX_FLAGS, preserve_backslashes=True, source=source,
    )
    registry.register(
        "R", regex, description="regular expression (no interpolation)",
        modifiers=REGEX_FLAGS, source=source,
    )
    registry.register("s", string, description="string", modifiers=(), source=source)
    registry.register("S", string, description="string (raw)", modifiers=(), source=source)
    registry.register("c", charlist, description="character list", modifiers=(), source=source)
    registry.register("C", charlist, description="character list (raw)", modifiers=(), source=source)
    registry.register("w", words, description="word list", modifiers=WORD_SHAPES, source=source)
    registry.register("W", words, description="word list (raw)", modifiers=WORD_SHAPES, source=source)
    registry.register("D", calendar_date, description="calendar date", modifiers=(), source=source)
    registry.register("T", calendar_time, description="time of day", modifiers=(), source=source)
    registry.register("N", naive_datetime, description="naive datetime", modifiers=(), source=source)
    registry.register("U", utc_datetime, description="UTC datetime", modifiers=(), source=source)


def default_registry() -> HandlerRegistry:
    """Return a fresh root registry preloaded with the built-in sigils."""
    registry = HandlerRegistry(name="builtins")
    register_sigils(registry)
    return registry
