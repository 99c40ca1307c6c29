"""Sigil resolution errors.

Every failure is reported at the source location of the literal's ``~``
marker and aborts resolution of that literal.  None is retried: malformed
literal syntax is deterministic.
"""

from __future__ import annotations

from sigilforge.models.literals import SourcePosition


class SigilError(ValueError):
    """Base class for all sigil resolution failures."""

    def __init__(self, message: str, position: SourcePosition | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(f"{position}: {message}" if position is not None else message)

    def at(self, position: SourcePosition) -> SigilError:
        """Return a copy of this error located at *position*.

        Used where a failure is detected without positional context (e.g.
        inside escape processing) and located by the caller.
        """
        located = type(self)(self.message, position)
        located.__cause__ = self.__cause__
        return located


class MalformedDelimiter(SigilError):
    """Missing tag letter or a delimiter outside the fixed set."""


class UnterminatedLiteral(SigilError):
    """No closing delimiter before end of line (inline forms) or input."""


class UnbalancedBracket(SigilError):
    """Bracket-style body whose open/close pairs do not balance."""


class UnknownSigil(SigilError):
    """Tag letter has no handler in the effective registry scope."""


class InvalidEscape(SigilError):
    """Malformed escape sequence in an escape-processed body."""


class InterpolationError(InvalidEscape):
    """Unterminated ``#{`` marker or an expression the resolver rejects."""


class InvalidModifier(SigilError):
    """Modifier letter the handler does not recognise."""


class SigilHandlerError(SigilError):
    """A handler raised while producing the literal's value."""
