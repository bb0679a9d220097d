"""Interactive preview app: a message editor with a live rendered preview.

The editor is a TextArea; every edit or cursor move re-renders the preview
from scratch (rendering is pure and cheap) and the preview scrolls to the
row holding the cursor sentinel.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from textual.app import App, ComposeResult
from textual.widgets import Static, TextArea

from chat_render.io.settings import RenderSettings
from chat_render.tui.message_render import render_preview
from chat_render.tui.theme import set_theme
from chat_render.tui.widgets import MessagePreview

logger = logging.getLogger(__name__)

PREVIEW_LABEL = "[Preview ↑]"


class PreviewApp(App):
    CSS = """
    #preview-label {
        height: 1;
        color: $accent;
        text-style: italic;
    }
    #editor {
        height: 1fr;
    }
    """

    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(
        self,
        user_name: str,
        users: Collection[str] = frozenset(),
        settings: RenderSettings | None = None,
        initial_text: str = "",
    ):
        super().__init__()
        self._user_name = user_name
        self._users = frozenset(users)
        self._settings = settings or RenderSettings()
        self._initial_text = initial_text

    def compose(self) -> ComposeResult:
        preview = MessagePreview(id="preview")
        preview.styles.max_height = self._settings.preview_max_height
        preview.display = self._settings.show_message_preview
        yield preview
        yield Static(PREVIEW_LABEL, id="preview-label", markup=False)
        yield TextArea(self._initial_text, id="editor")

    def on_mount(self) -> None:
        if self._settings.theme in self.available_themes:
            self.theme = self._settings.theme
        set_theme(self.current_theme)
        self.query_one("#editor", TextArea).focus()
        self.refresh_preview()

    def watch_theme(self, theme_name: str) -> None:
        if not self.is_running:
            return
        set_theme(self.current_theme)
        self.refresh_preview()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.refresh_preview()

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        self.refresh_preview()

    def on_resize(self, event) -> None:
        self.refresh_preview()

    def refresh_preview(self) -> None:
        editor = self.query_one("#editor", TextArea)
        preview = self.query_one(MessagePreview)
        width = preview.size.width or self.size.width
        row, _ = editor.cursor_location
        rendered = render_preview(
            editor.text.split("\n"), row, self._user_name, self._users, width
        )
        preview.show(rendered)
