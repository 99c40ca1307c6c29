"""Sigilforge core — scanner, escape processing, registry, and dispatcher."""

from sigilforge.core.dispatcher import SigilDispatcher
from sigilforge.core.errors import (
    InterpolationError,
    InvalidEscape,
    InvalidModifier,
    MalformedDelimiter,
    SigilError,
    SigilHandlerError,
    UnbalancedBracket,
    UnknownSigil,
    UnterminatedLiteral,
)
from sigilforge.core.escapes import bindings_resolver, dedent_block, process_escapes
from sigilforge.core.registry import HandlerRegistry
from sigilforge.core.scanner import iter_sigils, scan_sigil

__all__ = [
    "SigilDispatcher",
    "HandlerRegistry",
    "scan_sigil",
    "iter_sigils",
    "process_escapes",
    "bindings_resolver",
    "dedent_block",
    # errors
    "SigilError",
    "MalformedDelimiter",
    "UnterminatedLiteral",
    "UnbalancedBracket",
    "UnknownSigil",
    "InvalidEscape",
    "InterpolationError",
    "InvalidModifier",
    "SigilHandlerError",
]
