"""Settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process. The sweeper components never read the environment themselves: the
loaded :class:`~outbox_sweeper.core.settings.unified.Settings` object is passed
to them explicitly.

Usage:
    from outbox_sweeper.core.settings import get_settings

    settings = get_settings()  # First call: loads and validates
    settings = get_settings()  # Subsequent calls: returns cached instance

Testing:
    Build settings directly, or clear the cache to force a reload:
    get_settings.cache_clear()

    ``ENV_FILE=.env.test`` points every settings class at a test dotenv file.
"""

from __future__ import annotations

from functools import lru_cache
import os
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from outbox_sweeper.core.exceptions import ConfigurationError

from .app import AppSettings
from .aws import AwsSettings
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .sweeper import SweeperSettings
from .unified import Settings

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings


def _env_name(settings_cls: type[BaseSettings], field: str) -> str:
    """Environment variable name for a settings field, for error messages."""
    info = settings_cls.model_fields.get(field)
    if info is None:
        # Aliased fields are reported under their alias
        return field.upper()
    if info.alias:
        return info.alias.upper()
    prefix = settings_cls.model_config.get("env_prefix", "")
    return f"{prefix}{field}".upper()


def _env_file() -> str:
    return os.getenv("ENV_FILE", ".env")


def _build(settings_cls: type[BaseSettings], **overrides: Any) -> Any:
    """Instantiate one settings class, converting validation errors."""
    try:
        return settings_cls(_env_file=_env_file(), **overrides)  # type: ignore[call-arg]
    except ValidationError as e:
        missing: list[str] = []
        invalid: list[str] = []
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else settings_cls.__name__
            env_name = _env_name(settings_cls, field)
            if err["type"] == "missing":
                missing.append(env_name)
            else:
                invalid.append(f"{env_name}: {err['msg']}")

        if missing:
            msg = f"Missing required configuration: {', '.join(missing)}"
        else:
            msg = f"Invalid configuration: {'; '.join(invalid)}"
        raise ConfigurationError(
            msg,
            extra={"settings": settings_cls.__name__, "missing": missing, "invalid": invalid},
        ) from e


def load_settings(**overrides: Any) -> Settings:
    """Load and validate every settings domain.

    Args:
        **overrides: Per-domain overrides, keyed by domain name
            (``app``, ``db``, ``aws``, ``sweeper``, ``logging``) with a dict of
            field values each. Mostly useful in tests.

    Raises:
        ConfigurationError: If a required setting is absent or invalid.
    """
    return Settings(
        app=_build(AppSettings, **overrides.get("app", {})),
        db=_build(PostgresSettings, **overrides.get("db", {})),
        aws=_build(AwsSettings, **overrides.get("aws", {})),
        sweeper=_build(SweeperSettings, **overrides.get("sweeper", {})),
        logging=_build(LoggingSettings, **overrides.get("logging", {})),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings for the whole process.

    Returns:
        Validated and frozen Settings instance.
    """
    return load_settings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Logging is configured before the rest of the settings are validated so
    that configuration errors are themselves logged.
    """
    return _build(LoggingSettings)
