"""Sigil literal models — the transient record produced by the scanner.

A ``SigilLiteral`` lives only between scanning and dispatch: the scanner
builds it, the dispatcher consumes it, and nothing persists it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DelimiterKind(str, Enum):
    """The fixed set of delimiter pairs a sigil body may be wrapped in."""

    SLASH = "slash"
    PIPE = "pipe"
    DOUBLEQUOTE = "doublequote"
    SINGLEQUOTE = "singlequote"
    PAREN = "paren"
    BRACKET = "bracket"
    BRACE = "brace"
    ANGLE = "angle"
    TRIPLE_DOUBLE = "triple_double"
    TRIPLE_SINGLE = "triple_single"

    @property
    def opening(self) -> str:
        return _PAIRS[self][0]

    @property
    def closing(self) -> str:
        return _PAIRS[self][1]

    @property
    def is_bracket(self) -> bool:
        """Bracket pairs nest: inner open/close pairs are balanced."""
        return self in _BRACKETS

    @property
    def is_block(self) -> bool:
        """Triple-quoted block form spanning whole lines."""
        return self in (DelimiterKind.TRIPLE_DOUBLE, DelimiterKind.TRIPLE_SINGLE)

    @classmethod
    def from_opening(cls, text: str) -> DelimiterKind | None:
        """Return the kind whose opening delimiter starts *text*, if any.

        Triple quotes are tried before single quotes so that ``\"\"\"``
        selects the block form.
        """
        for kind in (cls.TRIPLE_DOUBLE, cls.TRIPLE_SINGLE):
            if text.startswith(kind.opening):
                return kind
        if text:
            return _BY_OPENING.get(text[0])
        return None


_PAIRS: dict[DelimiterKind, tuple[str, str]] = {
    DelimiterKind.SLASH: ("/", "/"),
    DelimiterKind.PIPE: ("|", "|"),
    DelimiterKind.DOUBLEQUOTE: ('"', '"'),
    DelimiterKind.SINGLEQUOTE: ("'", "'"),
    DelimiterKind.PAREN: ("(", ")"),
    DelimiterKind.BRACKET: ("[", "]"),
    DelimiterKind.BRACE: ("{", "}"),
    DelimiterKind.ANGLE: ("<", ">"),
    DelimiterKind.TRIPLE_DOUBLE: ('"""', '"""'),
    DelimiterKind.TRIPLE_SINGLE: ("'''", "'''"),
}

_BRACKETS = frozenset(
    {DelimiterKind.PAREN, DelimiterKind.BRACKET, DelimiterKind.BRACE, DelimiterKind.ANGLE}
)

_BY_OPENING: dict[str, DelimiterKind] = {
    opening: kind for kind, (opening, _) in _PAIRS.items() if len(opening) == 1
}


class SourcePosition(BaseModel):
    """Location of a literal's ``~`` marker: 1-based line/column, 0-based offset."""

    model_config = ConfigDict(frozen=True)

    line: int = 1
    column: int = 1
    offset: int = 0

    @classmethod
    def at(cls, source: str, offset: int) -> SourcePosition:
        """Compute the line/column of *offset* within *source*."""
        line = source.count("\n", 0, offset) + 1
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(line=line, column=offset - line_start + 1, offset=offset)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


def _is_ascii_letter(ch: str) -> bool:
    return len(ch) == 1 and ch.isascii() and ch.isalpha()


class SigilLiteral(BaseModel):
    """A scanned sigil literal, ready for dispatch.

    ``raw_text`` is the exact source between the delimiters: no escapes
    resolved, no indentation stripped.

    Examples
    --------
    >>> lit = SigilLiteral(tag="w", delimiter=DelimiterKind.PAREN,
    ...                    raw_text="foo bar", modifiers=frozenset("a"))
    >>> lit.is_upper
    False
    >>> lit.marker
    '~w(foo bar)a'
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    delimiter: DelimiterKind
    raw_text: str
    modifiers: frozenset[str] = frozenset()
    position: SourcePosition = Field(default_factory=SourcePosition)
    end_offset: int = 0  # offset one past the last modifier letter

    @field_validator("tag")
    @classmethod
    def _tag_is_letter(cls, value: str) -> str:
        if not _is_ascii_letter(value):
            raise ValueError(f"sigil tag must be a single ASCII letter, got {value!r}")
        return value

    @field_validator("modifiers")
    @classmethod
    def _modifiers_are_letters(cls, value: frozenset[str]) -> frozenset[str]:
        bad = sorted(m for m in value if not _is_ascii_letter(m))
        if bad:
            raise ValueError(f"sigil modifiers must be ASCII letters, got {bad!r}")
        return value

    @property
    def is_upper(self) -> bool:
        return self.tag.isupper()

    @property
    def marker(self) -> str:
        """Canonical source rendering of the literal."""
        d = self.delimiter
        if d.is_block:
            body = self.raw_text if self.raw_text.endswith("\n") or not self.raw_text else self.raw_text + "\n"
            inner = f"{d.opening}\n{body}{d.closing}"
        else:
            inner = f"{d.opening}{self.raw_text}{d.closing}"
        return f"~{self.tag}{inner}{''.join(sorted(self.modifiers))}"
