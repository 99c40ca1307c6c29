"""SigilDispatcher — resolves sigil literals to values.

Resolution of one literal::

    scan  ->  dedent block body  ->  escapes/interpolation  ->  look up tag
          ->  check modifiers  ->  handler(text, modifiers)  ->  value

Dispatch is synchronous and a pure function of the literal text and the
registry state: each literal is fully resolved before the caller moves on,
and nothing is cached between calls.  Every failure is a ``SigilError``
located at the literal's ``~`` marker.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sigilforge.config import SigilSettings, settings as default_settings
from sigilforge.core.errors import (
    InvalidEscape,
    InvalidModifier,
    MalformedDelimiter,
    SigilError,
    SigilHandlerError,
    UnknownSigil,
)
from sigilforge.core.escapes import Resolver, bindings_resolver, dedent_block, process_escapes
from sigilforge.core.registry import HandlerRegistry
from sigilforge.core.scanner import iter_sigils, scan_sigil
from sigilforge.models.literals import SigilLiteral, SourcePosition
from sigilforge.models.values import HandlerEntry, ResolvedSigil

logger = logging.getLogger(__name__)


class SigilDispatcher:
    """Routes scanned literals to the handler registered for their tag.

    Parameters
    ----------
    registry:
        Handler registry (scope) to dispatch against.  Defaults to a fresh
        registry preloaded with the built-in sigils.
    resolver:
        Evaluates ``#{expr}`` interpolation markers in lowercase sigils.
    bindings:
        Shortcut for a resolver that looks names up in a mapping.
    settings:
        Overrides the module-level ``SigilSettings``.

    Examples
    --------
    >>> dispatcher = SigilDispatcher()
    >>> dispatcher.evaluate("~w(foo bar bat)")
    ['foo', 'bar', 'bat']
    >>> dispatcher.registry.register("i", lambda text, mods: int(text))
    >>> dispatcher.evaluate("~i(13)")
    13
    """

    def __init__(
        self,
        registry: HandlerRegistry | None = None,
        *,
        resolver: Resolver | None = None,
        bindings: Mapping[str, Any] | None = None,
        settings: SigilSettings | None = None,
    ) -> None:
        if resolver is not None and bindings is not None:
            raise ValueError("Pass either resolver or bindings, not both.")
        if registry is None:
            from sigilforge.handlers import default_registry

            registry = default_registry()
        self._registry = registry
        self._resolver = bindings_resolver(bindings) if bindings is not None else resolver
        self._settings = settings or default_settings

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def resolve(self, source: str, offset: int = 0) -> ResolvedSigil:
        """Scan the literal at *offset* in *source* and dispatch it."""
        return self.resolve_literal(scan_sigil(source, offset))

    def evaluate(self, source: str) -> Any:
        """Resolve a source string consisting of exactly one literal to its value."""
        return self.resolve_one(source).value

    def resolve_one(self, source: str) -> ResolvedSigil:
        """Like ``evaluate`` but return the full ``ResolvedSigil``.

        Surrounding whitespace is ignored; anything else after the literal
        raises ``MalformedDelimiter``.
        """
        start = len(source) - len(source.lstrip())
        resolved = self.resolve(source, start)
        rest = source[resolved.literal.end_offset :]
        if rest.strip():
            raise MalformedDelimiter(
                f"unexpected text after sigil: {rest.strip()[:20]!r}",
                SourcePosition.at(source, resolved.literal.end_offset),
            )
        return resolved

    def expand_all(self, source: str) -> list[ResolvedSigil]:
        """Resolve every literal in *source*, left to right."""
        return [self.resolve_literal(literal) for literal in iter_sigils(source)]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def resolve_literal(self, literal: SigilLiteral) -> ResolvedSigil:
        """Process the body of a scanned literal and invoke its handler.

        Raises
        ------
        UnknownSigil
            No handler is bound to the tag in the effective scope.
        InvalidEscape
            Malformed escape or interpolation in a lowercase sigil.
        InvalidModifier
            A modifier the entry (or the handler) rejects.
        SigilHandlerError
            The handler raised any other exception.
        """
        position = literal.position
        entry = self._registry.get(literal.tag)
        text = self._prepare_text(literal, entry)
        if entry is None:
            raise UnknownSigil(f"no handler registered for ~{literal.tag}", position)

        self._check_modifiers(literal, entry)

        try:
            value = entry.handler(text, literal.modifiers)
        except SigilError as exc:
            if exc.position is None:
                raise exc.at(position) from exc
            raise
        except Exception as exc:
            raise SigilHandlerError(
                f"~{literal.tag} handler failed: {type(exc).__name__}: {exc}", position
            ) from exc

        logger.debug("Resolved ~%s at %s via %s", literal.tag, position, entry.source)
        return ResolvedSigil(literal=literal, text=text, value=value)

    def _prepare_text(self, literal: SigilLiteral, entry: HandlerEntry | None) -> str:
        # Body options come from the entry; an unbound tag gets the defaults.
        text = literal.raw_text
        if literal.delimiter.is_block and (entry is None or entry.dedent_blocks):
            text = dedent_block(text)

        escapes_enabled = not literal.is_upper and self._settings.escapes_for_lowercase
        try:
            return process_escapes(
                text,
                escapes_enabled=escapes_enabled,
                closing=None if literal.delimiter.is_block else literal.delimiter.closing,
                resolver=self._resolver,
                preserve_backslashes=entry is not None and entry.preserve_backslashes,
            )
        except InvalidEscape as exc:
            raise exc.at(literal.position) from exc

    def _check_modifiers(self, literal: SigilLiteral, entry: HandlerEntry) -> None:
        if entry.modifiers is None or not self._settings.strict_modifiers:
            return
        unknown = sorted(literal.modifiers - entry.modifiers)
        if unknown:
            accepted = "".join(sorted(entry.modifiers)) or "none"
            raise InvalidModifier(
                f"~{literal.tag} does not accept modifier(s) {''.join(unknown)!r} "
                f"(accepted: {accepted})",
                literal.position,
            )
