"""Tests for pydantic-settings configuration."""

from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from contractmark.config import (
    DEFAULT_CONTENT,
    OffsetStrategy,
    OverlayConfig,
    Settings,
    SignatureConfig,
    get_settings,
)

_PREFIXES = ("APP__", "EDITOR__", "ANNOTATION__", "OVERLAY__", "SIGNATURE__")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop any configuration from the surrounding environment."""
    for key in list(os.environ):
        if key.startswith(_PREFIXES):
            monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app.port == 8080
        assert s.editor.initial_content == DEFAULT_CONTENT
        assert s.annotation.offset_strategy is OffsetStrategy.SELECTION
        assert s.annotation.tooltip_offset == 10.0
        assert (s.overlay.default_x, s.overlay.default_y) == (200, 200)
        assert (s.overlay.default_width, s.overlay.default_height) == (200, 100)
        assert (s.overlay.min_width, s.overlay.min_height) == (100, 50)
        assert s.signature.pen_color == "#000000"
        assert s.signature.pen_width == 2
        assert (s.signature.canvas_width, s.signature.canvas_height) == (600, 200)

    def test_storage_secret_is_hidden(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert "dev-secret" not in repr(s.app)

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestEnvironmentOverrides:
    def test_nested_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP__PORT", "9000")
        monkeypatch.setenv("ANNOTATION__OFFSET_STRATEGY", "first_occurrence")
        monkeypatch.setenv("OVERLAY__MIN_WIDTH", "80")
        monkeypatch.setenv("EDITOR__INITIAL_CONTENT", "Yeni sözleşme")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app.port == 9000
        assert s.annotation.offset_strategy is OffsetStrategy.FIRST_OCCURRENCE
        assert s.overlay.min_width == 80
        assert s.editor.initial_content == "Yeni sözleşme"

    def test_pen_width_out_of_range(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIGNATURE__PEN_WIDTH", "11")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]


class TestValidation:
    def test_default_size_below_minimum_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="minimum"):
            OverlayConfig(default_width=50)

    def test_pen_color_must_be_hex(self) -> None:
        with pytest.raises(ValidationError):
            SignatureConfig(pen_color="black")
