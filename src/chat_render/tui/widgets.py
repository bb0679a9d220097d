"""Textual host widgets for rendered messages."""

from __future__ import annotations

from textual.geometry import Region, Size
from textual.scroll_view import ScrollView
from textual.strip import Strip

from chat_render.tui.assembler import RenderedLines


class MessagePreview(ScrollView):
    """Bounded preview viewport using the Line API.

    Holds one RenderedLines and paints it line by line. Whenever new content
    is shown, the row carrying the cursor sentinel is scrolled into view so
    the line being edited never drops out of the preview.
    """

    DEFAULT_CSS = """
    MessagePreview {
        height: auto;
        max-height: 5;
        overflow-y: auto;
        overflow-x: hidden;
    }
    """

    def __init__(self, *, name: str | None = None, id: str | None = None, classes: str | None = None):
        super().__init__(name=name, id=id, classes=classes)
        self._rendered = RenderedLines()
        self._strips: list[Strip] = []

    @property
    def rendered(self) -> RenderedLines:
        return self._rendered

    def show(self, rendered: RenderedLines) -> None:
        self._rendered = rendered
        self._strips = rendered.to_strips()
        self.virtual_size = Size(rendered.width, rendered.height)
        self.refresh(layout=True)
        cursor = rendered.cursor_row
        if cursor is not None:
            self.call_after_refresh(self.scroll_to_row, cursor)

    def scroll_to_row(self, row: int) -> None:
        self.scroll_to_region(Region(0, row, 1, 1), animate=False)

    def render_line(self, y: int) -> Strip:
        """Line API: render a single line at viewport position y."""
        scroll_x, scroll_y = self.scroll_offset
        width = self.size.width
        index = scroll_y + y
        if index >= len(self._strips):
            return Strip.blank(width, self.rich_style)
        strip = self._strips[index].crop_extend(scroll_x, scroll_x + width, self.rich_style)
        return strip.apply_style(self.rich_style)
