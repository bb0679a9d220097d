"""Logging bootstrap for chat-render entry points.

Library modules only ever call logging.getLogger(__name__). Handlers hang off
the "chat_render" logger and are attached here, by the CLI and the preview
app, never as an import side effect.

Environment:
    CHAT_RENDER_LOG_LEVEL  level name, default WARNING
    CHAT_RENDER_LOG_FILE   explicit log file path
    CHAT_RENDER_LOG_DIR    directory for per-run log files when no file is given

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "chat_render"
DEFAULT_LOG_DIR = "~/.local/share/chat-render/logs"

_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"


@dataclass(frozen=True)
class LoggingRuntime:
    """What configure() settled on; returned so callers can report the log path."""

    level_name: str
    level: int
    file_path: str
    stream: bool


_RUNTIME: LoggingRuntime | None = None


def _resolve_level(raw: str | None) -> int:
    level = logging.getLevelName((raw or "WARNING").strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def _resolve_file(app_name: str) -> Path:
    explicit = os.environ.get("CHAT_RENDER_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.path.expanduser(os.environ.get("CHAT_RENDER_LOG_DIR", DEFAULT_LOG_DIR)))
    stamp = time.strftime("%Y%m%d-%H%M%S", time.gmtime())
    return log_dir / f"{app_name}-{stamp}-{os.getpid()}.log"


def _handlers(level: int, file_path: Path, stream: bool) -> list[logging.Handler]:
    file_handler = RotatingFileHandler(
        file_path, maxBytes=2 * 1024 * 1024, backupCount=2, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]
    if stream:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        handlers.append(console)
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def configure(app_name: str = "chat-render", stream: bool = True) -> LoggingRuntime:
    """Attach handlers to the chat_render logger; later calls are no-ops.

    ``stream=False`` leaves stderr alone, which full-screen Textual runs need
    because anything written there corrupts the display.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level = _resolve_level(os.environ.get("CHAT_RENDER_LOG_LEVEL"))
    file_path = _resolve_file(app_name)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    for handler in _handlers(level, file_path, stream):
        root.addHandler(handler)

    _RUNTIME = LoggingRuntime(
        level_name=logging.getLevelName(level),
        level=level,
        file_path=str(file_path),
        stream=stream,
    )
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME


def reset() -> None:
    """Detach everything configure() attached and forget the runtime."""
    global _RUNTIME
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    _RUNTIME = None
