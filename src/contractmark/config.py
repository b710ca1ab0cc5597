"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/contractmark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_CONTENT = (
    "<p>Bu bir örnek sözleşme metnidir.</p>"
    "<p>İmzalamak için aşağıdaki alana tıklayınız.</p>"
)


class OffsetStrategy(StrEnum):
    """How a committed highlight's offsets are resolved.

    ``selection`` uses the selection's own position in the plain-text
    projection. ``first_occurrence`` searches the projection for the first
    match of the selected text, which misplaces highlights on repeated text.
    """

    SELECTION = "selection"
    FIRST_OCCURRENCE = "first_occurrence"


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AppConfig(BaseModel):
    """Application runtime configuration."""

    title: str = "Sözleşme Düzenleyici"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    reload: bool = True


class EditorConfig(BaseModel):
    """Initial document shown in the editor, as HTML."""

    initial_content: str = DEFAULT_CONTENT


class AnnotationConfig(BaseModel):
    """Highlight creation and tooltip placement."""

    offset_strategy: OffsetStrategy = OffsetStrategy.SELECTION
    tooltip_offset: float = 10.0


class OverlayConfig(BaseModel):
    """Signature overlay geometry, in container-relative pixels."""

    default_x: float = 200.0
    default_y: float = 200.0
    default_width: float = 200.0
    default_height: float = 100.0
    min_width: float = 100.0
    min_height: float = 50.0

    @model_validator(mode="after")
    def defaults_respect_minimum(self) -> OverlayConfig:
        if self.default_width < self.min_width or self.default_height < self.min_height:
            msg = "OVERLAY default size must not be smaller than the minimum size"
            raise ValueError(msg)
        return self


class SignatureConfig(BaseModel):
    """Signature capture surface defaults."""

    pen_color: str = Field(default="#000000", pattern=r"^#[0-9a-fA-F]{6}$")
    pen_width: int = Field(default=2, ge=1, le=10)
    canvas_width: int = 600
    canvas_height: int = 200


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``APP__PORT``, ``ANNOTATION__OFFSET_STRATEGY``, ``OVERLAY__MIN_WIDTH``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    editor: EditorConfig = EditorConfig()
    annotation: AnnotationConfig = AnnotationConfig()
    overlay: OverlayConfig = OverlayConfig()
    signature: SignatureConfig = SignatureConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
