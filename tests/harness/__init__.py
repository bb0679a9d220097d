"""Test harness for chat-render.

Re-exports all public API for convenient imports:
    from tests.harness import run_preview_app, plain, make_message, ...
"""

from tests.harness.app_runner import run_preview_app
from tests.harness.content import plain, strips_to_text, preview_text
from tests.harness.builders import make_message, make_reply, make_history

__all__ = [
    "run_preview_app",
    "plain",
    "strips_to_text",
    "preview_text",
    "make_message",
    "make_reply",
    "make_history",
]
