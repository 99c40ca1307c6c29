"""Sigil scanner — turns source text at a ``~`` marker into a SigilLiteral.

Grammar (bit-exact)::

    ~ <tag letter> <open> <body> <close> <modifier letter>*

* Symmetric delimiters (``/ | " '``) end at the next unescaped occurrence of
  the same character, on the same line.
* Bracket delimiters (``( [ { <``) end at the matching close; nested pairs of
  the same kind are balanced and the body may span lines.
* Block delimiters (``\"\"\"`` / ``'''``) must end their opening line; the
  body is every following line up to the first line whose content starts
  with the same triple quote.

The scanner never interprets escapes; a backslash only stops the next
character from closing (or nesting) the literal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from sigilforge.core.errors import MalformedDelimiter, UnbalancedBracket, UnterminatedLiteral
from sigilforge.models.literals import DelimiterKind, SigilLiteral, SourcePosition

logger = logging.getLogger(__name__)

SIGIL_MARKER = "~"


def _is_tag_char(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def starts_sigil(source: str, offset: int) -> bool:
    """Whether a complete ``~<letter><delimiter>`` prefix begins at *offset*."""
    return (
        source.startswith(SIGIL_MARKER, offset)
        and offset + 1 < len(source)
        and _is_tag_char(source[offset + 1])
        and DelimiterKind.from_opening(source[offset + 2 : offset + 5]) is not None
    )


def scan_sigil(source: str, offset: int = 0) -> SigilLiteral:
    """Scan the sigil literal starting at *offset*.

    Raises
    ------
    MalformedDelimiter
        No ``~``, no tag letter, or a delimiter outside the fixed set.
    UnterminatedLiteral
        The closing delimiter never appears.
    UnbalancedBracket
        Input ends inside a nested bracket pair.
    """
    position = SourcePosition.at(source, offset)

    if not source.startswith(SIGIL_MARKER, offset):
        raise MalformedDelimiter(f"expected {SIGIL_MARKER!r} to start a sigil", position)

    tag_at = offset + 1
    if tag_at >= len(source) or not _is_tag_char(source[tag_at]):
        found = source[tag_at] if tag_at < len(source) else "end of input"
        raise MalformedDelimiter(f"expected a tag letter after '~', found {found!r}", position)
    tag = source[tag_at]

    open_at = tag_at + 1
    kind = DelimiterKind.from_opening(source[open_at : open_at + 3])
    if kind is None:
        if open_at >= len(source):
            raise MalformedDelimiter(f"sigil ~{tag} has no delimiter", position)
        raise MalformedDelimiter(
            f"invalid delimiter {source[open_at]!r} for sigil ~{tag}", position
        )

    body_start = open_at + len(kind.opening)
    if kind.is_block:
        raw_text, close_end = _scan_block(source, body_start, kind, tag, position)
    elif kind.is_bracket:
        raw_text, close_end = _scan_bracketed(source, body_start, kind, tag, position)
    else:
        raw_text, close_end = _scan_symmetric(source, body_start, kind, tag, position)

    end = close_end
    while end < len(source) and _is_tag_char(source[end]):
        end += 1
    modifiers = frozenset(source[close_end:end])

    literal = SigilLiteral(
        tag=tag,
        delimiter=kind,
        raw_text=raw_text,
        modifiers=modifiers,
        position=position,
        end_offset=end,
    )
    logger.debug("Scanned ~%s%s at %s (%d chars)", tag, kind.opening, position, len(raw_text))
    return literal


def iter_sigils(source: str) -> Iterator[SigilLiteral]:
    """Yield every sigil literal in *source*, left to right.

    A ``~`` that does not begin a complete marker is treated as plain text.
    Scanning resumes after the end of each literal, so ``~`` characters
    inside a body are never mistaken for new literals.
    """
    i = 0
    while True:
        i = source.find(SIGIL_MARKER, i)
        if i < 0:
            return
        if starts_sigil(source, i):
            literal = scan_sigil(source, i)
            yield literal
            i = literal.end_offset
        else:
            i += 1


# ---------------------------------------------------------------------------
# Body scanners: each returns (raw_text, offset just past the close)
# ---------------------------------------------------------------------------


def _scan_symmetric(
    source: str, start: int, kind: DelimiterKind, tag: str, position: SourcePosition
) -> tuple[str, int]:
    close = kind.closing
    i = start
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            if i + 1 < len(source) and source[i + 1] == "\n":
                break
            i += 2
            continue
        if ch == "\n":
            break
        if ch == close:
            return source[start:i], i + 1
        i += 1
    raise UnterminatedLiteral(
        f"missing closing {close!r} for sigil ~{tag}{kind.opening} before end of line",
        position,
    )


def _scan_bracketed(
    source: str, start: int, kind: DelimiterKind, tag: str, position: SourcePosition
) -> tuple[str, int]:
    opening, closing = kind.opening, kind.closing
    depth = 0
    i = start
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == opening:
            depth += 1
        elif ch == closing:
            if depth == 0:
                return source[start:i], i + 1
            depth -= 1
        i += 1
    if depth > 0:
        raise UnbalancedBracket(
            f"{depth} unclosed {opening!r} in body of sigil ~{tag}{opening}", position
        )
    raise UnterminatedLiteral(
        f"missing closing {closing!r} for sigil ~{tag}{opening}", position
    )


def _scan_block(
    source: str, start: int, kind: DelimiterKind, tag: str, position: SourcePosition
) -> tuple[str, int]:
    newline = source.find("\n", start)
    if newline < 0:
        raise UnterminatedLiteral(
            f"block sigil ~{tag}{kind.opening} is missing its body and closing {kind.closing}",
            position,
        )
    if source[start:newline].strip(" \t\r"):
        raise MalformedDelimiter(
            f"block sigil ~{tag}{kind.opening} must be followed by a newline", position
        )

    body_start = newline + 1
    line_start = body_start
    while line_start <= len(source):
        line_end = source.find("\n", line_start)
        if line_end < 0:
            line_end = len(source)
        line = source[line_start:line_end]
        stripped = line.lstrip(" \t")
        if stripped.startswith(kind.closing):
            close_at = line_start + (len(line) - len(stripped))
            return source[body_start:line_start], close_at + len(kind.closing)
        line_start = line_end + 1
    raise UnterminatedLiteral(
        f"missing closing {kind.closing} for block sigil ~{tag}{kind.opening}", position
    )
