"""Handler registry — maps tag letters to sigil handlers.

Scoping
-------
A registry is one lexical scope.  ``child()`` opens a nested scope whose
registrations shadow the parent's without mutating it; lookup walks from
the innermost scope outwards.  Within one scope the last registration wins.

Atomicity
---------
Registration builds the complete ``HandlerEntry`` first and then publishes a
new mapping (copy-on-write) under a lock.  Lookups read the current mapping
without locking and therefore only ever observe fully registered entries,
even when a handler module is activated while another thread dispatches.
"""

from __future__ import annotations

import importlib
import logging
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Callable

from sigilforge.models.values import Handler, HandlerEntry

logger = logging.getLogger(__name__)


def _check_tag(tag: str) -> str:
    if not (isinstance(tag, str) and len(tag) == 1 and tag.isascii() and tag.isalpha()):
        raise ValueError(f"Sigil tag must be a single ASCII letter, got {tag!r}.")
    return tag


class HandlerRegistry:
    """Open, extensible mapping from tag letter to handler.

    Parameters
    ----------
    parent:
        Enclosing scope consulted when a tag is not bound here.
    name:
        Scope name, used in logs and as the default ``source`` of entries.

    Examples
    --------
    >>> registry = HandlerRegistry()
    >>> registry.register("i", lambda text, mods: int(text))
    >>> registry.lookup("i").handler("13", frozenset())
    13
    >>> inner = registry.child("local")
    >>> inner.register("i", lambda text, mods: -int(text))
    >>> inner.lookup("i").handler("13", frozenset()), registry.lookup("i").handler("13", frozenset())
    (-13, 13)
    """

    def __init__(self, parent: HandlerRegistry | None = None, name: str = "root") -> None:
        self._parent = parent
        self._name = name
        self._lock = threading.Lock()
        self._entries: Mapping[str, HandlerEntry] = MappingProxyType({})

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> HandlerRegistry | None:
        return self._parent

    # -- Registration -------------------------------------------------------

    def register(
        self,
        tag: str,
        handler: Handler,
        *,
        description: str = "",
        modifiers: Iterable[str] | None = None,
        dedent_blocks: bool = True,
        preserve_backslashes: bool = False,
        source: str = "",
    ) -> None:
        """Bind *tag* to *handler* in this scope.

        Re-registering a tag replaces the previous binding (last wins) and
        logs a warning.

        Raises
        ------
        ValueError
            If *tag* is not a single ASCII letter.
        TypeError
            If *handler* is not callable.
        """
        if not callable(handler):
            raise TypeError(f"Handler for ~{tag} is not callable.")
        entry = HandlerEntry(
            tag=_check_tag(tag),
            handler=handler,
            description=description,
            modifiers=frozenset(modifiers) if modifiers is not None else None,
            dedent_blocks=dedent_blocks,
            preserve_backslashes=preserve_backslashes,
            source=source or self._name,
        )
        self.register_entry(entry)

    def register_entry(self, entry: HandlerEntry) -> None:
        """Publish a prebuilt entry (see ``register``)."""
        _check_tag(entry.tag)
        if not callable(entry.handler):
            raise TypeError(f"Handler for ~{entry.tag} is not callable.")
        self._publish([entry])

    def _publish(self, entries: list[HandlerEntry]) -> None:
        # One swap for the whole batch: lookups see all of it or none of it.
        with self._lock:
            current = self._entries
            updated = dict(current)
            for entry in entries:
                updated[entry.tag] = entry
            self._entries = MappingProxyType(updated)
        for entry in entries:
            previous = current.get(entry.tag)
            if previous is not None:
                logger.warning(
                    "Sigil ~%s in scope '%s' rebound: %s replaces %s",
                    entry.tag, self._name, entry.source, previous.source,
                )
            else:
                logger.debug("Registered sigil ~%s in scope '%s' (%s)", entry.tag, self._name, entry.source)

    def sigil(self, tag: str, **options: Any) -> Callable[[Handler], Handler]:
        """Decorator form of ``register``.

        >>> registry = HandlerRegistry()
        >>> @registry.sigil("i", description="integer literal")
        ... def integer(text, modifiers):
        ...     return int(text)
        >>> "i" in registry
        True
        """

        def decorator(func: Handler) -> Handler:
            options.setdefault("source", getattr(func, "__module__", "") or "")
            self.register(tag, func, **options)
            return func

        return decorator

    def unregister(self, tag: str) -> bool:
        """Remove *tag* from this scope.  Parent scopes are not touched.

        Returns ``True`` if a binding was removed.
        """
        with self._lock:
            if tag not in self._entries:
                removed = False
            else:
                updated = dict(self._entries)
                del updated[tag]
                self._entries = MappingProxyType(updated)
                removed = True
        if removed:
            logger.info("Unregistered sigil ~%s from scope '%s'", tag, self._name)
        else:
            logger.warning("Cannot unregister ~%s: not bound in scope '%s'", tag, self._name)
        return removed

    # -- Lookup -------------------------------------------------------------

    def get(self, tag: str) -> HandlerEntry | None:
        """Return the effective entry for *tag*, innermost scope first."""
        scope: HandlerRegistry | None = self
        while scope is not None:
            entry = scope._entries.get(tag)
            if entry is not None:
                return entry
            scope = scope._parent
        return None

    def lookup(self, tag: str) -> HandlerEntry:
        """Like ``get`` but raises ``KeyError`` for unbound tags."""
        entry = self.get(tag)
        if entry is None:
            raise KeyError(tag)
        return entry

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and self.get(tag) is not None

    def tags(self) -> list[str]:
        """Every tag visible from this scope, sorted."""
        return sorted(self._visible())

    def entries(self) -> list[HandlerEntry]:
        """Effective entries visible from this scope, sorted by tag."""
        visible = self._visible()
        return [visible[tag] for tag in sorted(visible)]

    def _visible(self) -> dict[str, HandlerEntry]:
        chain: list[HandlerRegistry] = []
        scope: HandlerRegistry | None = self
        while scope is not None:
            chain.append(scope)
            scope = scope._parent
        merged: dict[str, HandlerEntry] = {}
        for scope in reversed(chain):
            merged.update(scope._entries)
        return merged

    # -- Scopes and activation ---------------------------------------------

    def child(self, name: str = "local") -> HandlerRegistry:
        """Open a nested scope that shadows this one."""
        return HandlerRegistry(parent=self, name=name)

    def activate(self, entry_point: str) -> list[str]:
        """Import a handler module and bind its sigils in this scope.

        *entry_point* is ``"package.module"`` or ``"package.module:attr"``.
        The target must be a ``register_sigils(registry)`` callable, or a
        module exposing either of ``register_sigils`` or a ``SIGILS``
        mapping of tag to handler.

        Returns the tags newly bound or rebound in this scope.  The module's
        registrations are published in one step, and not at all if its hook
        raises.

        Raises
        ------
        ImportError
            If the module cannot be imported.
        AttributeError
            If the named attribute does not exist.
        TypeError
            If the target exposes neither hook.
        """
        module_name, _, attr = entry_point.partition(":")
        module = importlib.import_module(module_name)
        target: Any = getattr(module, attr) if attr else module

        # Hooks register into a staging scope; nothing is published unless they all succeed.
        staging = HandlerRegistry(parent=self, name=self._name)
        if attr and callable(target):
            target(staging)
        elif callable(getattr(target, "register_sigils", None)):
            target.register_sigils(staging)
        elif isinstance(getattr(target, "SIGILS", None), Mapping):
            for tag, handler in target.SIGILS.items():
                staging.register(tag, handler, source=entry_point)
        else:
            raise TypeError(
                f"{entry_point!r} provides neither register_sigils(registry) nor SIGILS."
            )

        entries = list(staging._entries.values())
        self._publish(entries)
        bound = sorted(entry.tag for entry in entries)
        logger.info("Activated %s in scope '%s': %s", entry_point, self._name, ", ".join(bound) or "(none)")
        return bound

    def __repr__(self) -> str:
        return f"HandlerRegistry(name={self._name!r}, tags={self.tags()!r})"
