"""Built-in sigil handlers (regex, string, charlist, words, calendar)."""

from sigilforge.handlers.builtin import default_registry, register_sigils

__all__ = ["default_registry", "register_sigils"]
