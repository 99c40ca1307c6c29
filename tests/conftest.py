"""Shared test fixtures for Sigilforge."""

from __future__ import annotations

import importlib
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from sigilforge.config import SigilSettings
from sigilforge.core.dispatcher import SigilDispatcher
from sigilforge.core.registry import HandlerRegistry
from sigilforge.handlers import default_registry


@pytest.fixture
def registry() -> HandlerRegistry:
    """Provide a fresh registry preloaded with the built-in sigils."""
    return default_registry()


@pytest.fixture
def test_settings() -> SigilSettings:
    """Provide settings isolated from the environment and any .env file."""
    return SigilSettings(_env_file=None, escapes_for_lowercase=True, strict_modifiers=True)


@pytest.fixture
def dispatcher(registry: HandlerRegistry, test_settings: SigilSettings) -> SigilDispatcher:
    """Provide a dispatcher over the built-in registry."""
    return SigilDispatcher(registry, settings=test_settings)


@pytest.fixture
def evaluate(dispatcher: SigilDispatcher) -> Callable[[str], object]:
    """Shortcut for ``dispatcher.evaluate``."""
    return dispatcher.evaluate


# ---------------------------------------------------------------------------
# Handler module factory: writes an importable module under tmp_path
# ---------------------------------------------------------------------------


@pytest.fixture
def make_handler_module(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Callable[[str, str], str]]:
    """Factory fixture: write ``<name>.py`` with *body* and return its module name."""
    monkeypatch.syspath_prepend(str(tmp_path))
    created: list[str] = []

    def _factory(name: str, body: str) -> str:
        (tmp_path / f"{name}.py").write_text(body, encoding="utf-8")
        importlib.invalidate_caches()
        created.append(name)
        return name

    yield _factory

    for name in created:
        sys.modules.pop(name, None)
