"""Runtime configuration — env-driven.

Centralized settings using pydantic-settings.  Reads from a .env file and
SIGILFORGE_* environment variables.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class SigilSettings(BaseSettings):
    """Sigilforge settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SIGILFORGE_LOG_LEVEL=DEBUG
        export SIGILFORGE_STRICT_MODIFIERS=false
        export SIGILFORGE_HANDLER_MODULES='["myproject.sigils"]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SIGILFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Dispatch behaviour
    escapes_for_lowercase: bool = True  # lowercase tags get escape processing
    strict_modifiers: bool = True  # reject modifiers an entry does not declare

    # Handler modules activated by the CLI, as dotted entry points
    handler_modules: list[str] = []

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from sigilforge.config import settings`
settings = SigilSettings()
