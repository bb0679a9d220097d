"""JSON settings file for chat-render.

One file, $XDG_CONFIG_HOME/chat-render/settings.json, holding a flat object.
Rendering options live under its "render" key and are read as a typed
RenderSettings; everything else in the file is left untouched on save, so
hosts can keep their own keys beside ours.

Import as: import chat_render.io.settings
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

RENDER_SECTION = "render"


@dataclass(frozen=True)
class RenderSettings:
    """Host-facing rendering options."""

    preview_max_height: int = 5
    show_message_preview: bool = True
    time_format: str = "%H:%M"
    date_format: str = "%Y-%m-%d"
    theme: str = "textual-dark"
    seed_hue: float | None = None


def get_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return Path(base, "chat-render", "settings.json")


def load_settings() -> dict:
    """The whole settings object; a missing, unreadable or non-object file is {}."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Replace the settings file with ``data``.

    The JSON goes to a sibling temp file that is renamed over the target, so
    a crash mid-write never leaves a truncated settings file behind.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
    ) as tmp:
        try:
            json.dump(data, tmp, indent=2, sort_keys=True)
            tmp.write("\n")
        except BaseException:
            tmp.close()
            Path(tmp.name).unlink(missing_ok=True)
            raise
    os.replace(tmp.name, path)


def load_setting(key: str, default=None):
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Set one top-level key, keeping the rest of the file."""
    save_settings({**load_settings(), key: value})


def _accepts(default, value) -> bool:
    if default is None:
        return value is None or (isinstance(value, (int, float)) and not isinstance(value, bool))
    if isinstance(default, bool) or isinstance(value, bool):
        return type(value) is type(default)
    return isinstance(value, type(default))


def load_render_settings() -> RenderSettings:
    """RenderSettings from the "render" section; wrongly typed values fall back."""
    section = load_setting(RENDER_SECTION, {})
    if not isinstance(section, dict):
        logger.warning("ignoring settings %r section: not an object", RENDER_SECTION)
        return RenderSettings()
    defaults = RenderSettings()
    values = {}
    for f in fields(RenderSettings):
        if f.name not in section:
            continue
        value = section[f.name]
        if _accepts(getattr(defaults, f.name), value):
            values[f.name] = value
        else:
            logger.warning("ignoring %s.%s=%r (wrong type)", RENDER_SECTION, f.name, value)
    return RenderSettings(**values)
