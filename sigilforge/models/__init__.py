"""Sigilforge data models — Pydantic v2, all frozen (immutable)."""

from sigilforge.models.literals import DelimiterKind, SigilLiteral, SourcePosition
from sigilforge.models.values import Handler, HandlerEntry, ResolvedSigil, Symbol

__all__ = [
    # literals
    "DelimiterKind",
    "SigilLiteral",
    "SourcePosition",
    # values
    "Handler",
    "HandlerEntry",
    "ResolvedSigil",
    "Symbol",
]
