"""Pytest configuration and shared fixtures for chat-render tests."""

import pytest
from textual.theme import BUILTIN_THEMES

import chat_render.io.logging_setup
import chat_render.palette
import chat_render.tui.theme
from chat_render.tui.theme import build_theme_colors


# ---------------------------------------------------------------------------
# Isolation fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point settings and logs at a per-test directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("CHAT_RENDER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("CHAT_RENDER_LOG_FILE", raising=False)
    monkeypatch.delenv("CHAT_RENDER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("CHAT_RENDER_SEED_HUE", raising=False)
    return tmp_path / "config"


@pytest.fixture(autouse=True)
def reset_module_state(monkeypatch):
    """Module-level theme/palette/logging state never leaks between tests."""
    monkeypatch.setattr(chat_render.tui.theme, "_theme_colors", None)
    monkeypatch.setattr(chat_render.palette, "PALETTE", chat_render.palette.Palette())
    chat_render.io.logging_setup.reset()
    yield
    chat_render.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Rendering fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def theme():
    return build_theme_colors(BUILTIN_THEMES["textual-dark"])
