"""Sigilforge: extensible sigil literals for Python.

A sigil is ``~`` + a tag letter + a delimited body + optional modifier
letters, e.g. ``~w(foo bar bat)a`` or ``~r/ab+c/i``.  The dispatcher scans
the literal, resolves escapes for lowercase tags, and hands the body and
modifiers to the handler registered for the tag:

  - Fixed delimiter set: / | " ' ( [ { < and triple-quoted blocks
  - Balanced nesting for bracket delimiters
  - Scoped, last-registration-wins handler registry with atomic publish
  - Built-in r, s, c, w sigils plus calendar D, T, N, U
"""

__version__ = "0.1.0"
__description__ = "Extensible sigil literals: scanner, escape processing, and handler dispatch"

from sigilforge.core.dispatcher import SigilDispatcher
from sigilforge.core.registry import HandlerRegistry
from sigilforge.core.scanner import scan_sigil
from sigilforge.models import SigilLiteral, Symbol

__all__ = [
    "SigilDispatcher",
    "HandlerRegistry",
    "SigilLiteral",
    "Symbol",
    "scan_sigil",
    "__version__",
]
