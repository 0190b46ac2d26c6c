"""Process-wide defaults for modules.

Settings are read from the environment (``PROMPTSIG_MAX_STEPS=10``, ``PROMPTSIG_TRACING=true``)
and can be overridden at runtime with ``configure``.
The context also holds the default language model used by modules constructed without ``lm=``.

Examples
--------
>>> from promptsig import config
>>> config.configure(lm=my_lm, max_steps=8)  # doctest: +SKIP
>>> config.get_settings().max_steps  # doctest: +SKIP
8
>>> config.reset()
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import ConfigurationError
from .lm.base import LanguageModel

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Module defaults."""

    model_config = SettingsConfigDict(env_prefix="PROMPTSIG_", extra="ignore", frozen=True)

    max_steps: int = Field(default=6, ge=1, description="Default step budget for agentic modules")
    tracing: bool = Field(default=False, description="Attach prompt/completion records to predictions")
    log_level: LogLevel | None = Field(default=None, description="Level for the 'promptsig' logger")


class Context:
    """Holder for the default language model and the active settings."""

    def __init__(self):
        self.lm: LanguageModel | None = None
        self.settings = Settings()

    def configure(self, lm: LanguageModel | None = None, **overrides: Any) -> None:
        if lm is not None:
            if not isinstance(lm, LanguageModel):
                raise ConfigurationError(f"Expected a LanguageModel, received {type(lm).__name__}")
            self.lm = lm
        if overrides:
            self.settings = Settings(**{**self.settings.model_dump(), **overrides})
            logger.debug(f"Updated settings: {self.settings}")
        if self.settings.log_level:
            logging.getLogger("promptsig").setLevel(self.settings.log_level)

    def reset(self) -> None:
        self.lm = None
        self.settings = Settings()


_context = Context()


def configure(lm: LanguageModel | None = None, **overrides: Any) -> None:
    """Set the default language model and/or override settings.

    Parameters
    ----------
    lm : LanguageModel | None, optional
        Default language model for modules constructed without one, by default None (unchanged)
    **overrides
        Settings fields to override, i.e. ``max_steps=10``.
    """
    _context.configure(lm=lm, **overrides)


def get_default_lm() -> LanguageModel:
    """Return the configured default language model.

    Raises
    ------
    ConfigurationError
        If no language model has been configured.
    """
    if _context.lm is None:
        raise ConfigurationError("No language model configured. Pass lm= or call configure(lm=...)")
    return _context.lm


def get_settings() -> Settings:
    return _context.settings


def reset() -> None:
    """Restore default settings and clear the default language model."""
    _context.reset()
