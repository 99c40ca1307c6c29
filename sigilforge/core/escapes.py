"""Escape and interpolation processing for sigil bodies.

This is a pure transform applied to the raw body before handler
invocation, so handlers never need to know whether escapes were enabled::

    process_escapes(raw, escapes_enabled=True)   # lowercase convention
    process_escapes(raw, escapes_enabled=False)  # uppercase convention

Errors raised here carry no position; the dispatcher locates them at the
literal's marker.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Callable

from sigilforge.core.errors import InterpolationError, InvalidEscape

# Resolves the expression inside ``#{...}`` to a value.
Resolver = Callable[[str], Any]

NAMED_ESCAPES: dict[str, str] = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "a": "\a",
    "b": "\b",
    "d": "\x7f",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "s": " ",
    "t": "\t",
    "v": "\v",
}

MAX_CODE_POINT = 0x10FFFF
_OCTAL = "01234567"
_HEX = "0123456789abcdefABCDEF"


def process_escapes(
    raw: str,
    *,
    escapes_enabled: bool,
    closing: str | None = None,
    resolver: Resolver | None = None,
    preserve_backslashes: bool = False,
) -> str:
    """Return *raw* with escapes and interpolation resolved.

    Parameters
    ----------
    raw:
        The literal body exactly as scanned.
    escapes_enabled:
        ``False`` passes the body through untouched, except that an escaped
        closing delimiter (``\\)`` in ``~S(...)``) loses its backslash.
    closing:
        The single-character closing delimiter, for the pass-through case.
    resolver:
        Evaluates ``#{expr}`` markers.  Without one, markers are kept verbatim.
    preserve_backslashes:
        Keep every backslash sequence verbatim and only interpolate.  Used
        by handlers whose target syntax has its own escapes (regexes).

    Raises
    ------
    InvalidEscape
        Trailing backslash, hex escape without digits, or a code point
        outside the Unicode range.
    InterpolationError
        ``#{`` without a closing ``}``, or a resolver failure.
    """
    if not escapes_enabled:
        if closing and len(closing) == 1:
            return raw.replace("\\" + closing, closing)
        return raw

    out: list[str] = []
    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]
        if ch == "\\" and preserve_backslashes:
            out.append(raw[i : i + 2])
            i += 2
        elif ch == "\\":
            decoded, i = _decode_escape(raw, i + 1)
            out.append(decoded)
        elif ch == "#" and raw.startswith("#{", i):
            rendered, i = _interpolate(raw, i, resolver)
            out.append(rendered)
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def bindings_resolver(bindings: Mapping[str, Any]) -> Resolver:
    """Build a resolver that interpolates names from *bindings*.

    >>> resolve = bindings_resolver({"name": "world"})
    >>> process_escapes("hello #{name}", escapes_enabled=True, resolver=resolve)
    'hello world'
    """

    def resolve(expression: str) -> Any:
        if expression not in bindings:
            raise InterpolationError(f"unbound name {expression!r} in #{{...}}")
        return bindings[expression]

    return resolve


def dedent_block(text: str) -> str:
    r"""Strip the leading indentation shared by every non-blank line of a block body.

    Only that shared prefix is removed, so whitespace beyond it survives on
    every line, blank lines included.

    >>> dedent_block("  a\n   \n  b\n")
    'a\n \nb\n'
    """
    lines = text.splitlines(keepends=True)
    margin = os.path.commonprefix([_indent(line) for line in lines if line.strip()])
    if not margin:
        return text
    return "".join(
        line[len(margin) :] if line.startswith(margin) else line.lstrip(" \t")
        for line in lines
    )


def _indent(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


# ---------------------------------------------------------------------------
# Internals: each returns (decoded text, index after the consumed input)
# ---------------------------------------------------------------------------


def _decode_escape(raw: str, i: int) -> tuple[str, int]:
    if i >= len(raw):
        raise InvalidEscape("trailing backslash at end of sigil body")
    ch = raw[i]

    if ch in NAMED_ESCAPES:
        return NAMED_ESCAPES[ch], i + 1
    if ch == "\n":
        return "", i + 1
    if ch in _OCTAL:
        j = i
        while j < len(raw) and j - i < 3 and raw[j] in _OCTAL:
            j += 1
        value = int(raw[i:j], 8)
        if value > 0o377:
            raise InvalidEscape(f"octal escape \\{raw[i:j]} is out of range (max \\377)")
        return chr(value), j
    if ch == "x":
        return _decode_hex(raw, i + 1, prefix="x", fixed=2)
    if ch == "u":
        return _decode_hex(raw, i + 1, prefix="u", fixed=4)
    # Any other escaped character stands for itself (covers delimiters and '#').
    return ch, i + 1


def _decode_hex(raw: str, i: int, *, prefix: str, fixed: int) -> tuple[str, int]:
    if raw.startswith("{", i):
        close = raw.find("}", i + 1)
        digits = raw[i + 1 : close] if close >= 0 else ""
        if close < 0 or not 1 <= len(digits) <= 6 or any(d not in _HEX for d in digits):
            raise InvalidEscape(
                f"\\{prefix}{{...}} expects 1 to 6 hex digits followed by '}}'"
            )
        return _code_point(int(digits, 16), prefix), close + 1

    digits = raw[i : i + fixed]
    if len(digits) != fixed or any(d not in _HEX for d in digits):
        raise InvalidEscape(
            f"\\{prefix} expects exactly {fixed} hex digits, got {digits!r}"
        )
    return _code_point(int(digits, 16), prefix), i + fixed


def _code_point(value: int, prefix: str) -> str:
    if value > MAX_CODE_POINT or 0xD800 <= value <= 0xDFFF:
        raise InvalidEscape(f"\\{prefix} escape U+{value:04X} is not a valid code point")
    return chr(value)


def _interpolate(raw: str, i: int, resolver: Resolver | None) -> tuple[str, int]:
    close = _find_interpolation_end(raw, i + 2)
    if close < 0:
        raise InterpolationError("unterminated interpolation: missing '}' after '#{'")
    if resolver is None:
        return raw[i : close + 1], close + 1

    expression = raw[i + 2 : close].strip()
    try:
        value = resolver(expression)
    except InterpolationError:
        raise
    except Exception as exc:
        raise InterpolationError(f"cannot interpolate #{{{expression}}}: {exc}") from exc
    return str(value), close + 1


def _find_interpolation_end(raw: str, i: int) -> int:
    depth = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return -1
