"""Theme colors and style resolution for the rendering pipeline.

Maps a Textual Theme onto the handful of visual attributes message rendering
needs: one fixed style per fragment style tag, the block-level styles
(headers, code, reply parents, transitions), and a per-username color taken
from the golden-angle palette.

# [LAW:one-source-of-truth] All theme-derived styles live in ThemeColors.
# set_theme() is the sole entry point for rebuilding.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style
from textual.color import Color, ColorParseError
from textual.theme import BUILTIN_THEMES

import chat_render.palette
from chat_render.core.fragments import FragmentStyle

DEFAULT_THEME_NAME = "textual-dark"


@dataclass(frozen=True)
class ThemeColors:
    """Resolved #RRGGBB colors plus the Rich style strings built from them."""

    dark: bool
    primary: str
    accent: str
    warning: str
    error: str
    success: str
    surface: str
    foreground: str

    emph_style: str
    strong_style: str
    code_style: str
    url_style: str
    emoji_style: str

    header_style: str
    reply_parent_style: str
    client_message_style: str
    error_message_style: str
    date_transition_style: str
    new_message_transition_style: str
    time_style: str

    def style_for(self, tag: FragmentStyle) -> Style:
        """Fixed style for a fragment tag. USER is resolved per name instead."""
        if tag is FragmentStyle.NORMAL:
            return Style.null()
        if tag is FragmentStyle.USER:
            return Style(bold=True)
        return Style.parse(getattr(self, _TAG_FIELD[tag]))

    def username_style(self, name: str) -> Style:
        color = chat_render.palette.PALETTE.username_color(name, self.dark)
        return Style(color=color, bold=True)


_TAG_FIELD = {
    FragmentStyle.EMPH: "emph_style",
    FragmentStyle.STRONG: "strong_style",
    FragmentStyle.CODE: "code_style",
    FragmentStyle.LINK: "url_style",
    FragmentStyle.EMOJI: "emoji_style",
}

# Used when a theme leaves a slot unset or spells it in a way Rich can't use.
# (dark-mode fallback, light-mode fallback)
_FALLBACKS = {
    "primary": ("#0178D4", "#0178D4"),
    "warning": ("#FFA62B", "#FFA62B"),
    "error": ("#BA3C5B", "#BA3C5B"),
    "success": ("#4EBF71", "#4EBF71"),
    "surface": ("#2B2B2B", "#D0D0D0"),
    "foreground": ("#E0E0E0", "#1E1E1E"),
}


def _to_hex(value: str | None, fallback: str) -> str:
    """Any Textual color spelling (hex, rgb(), "ansi_red") as #RRGGBB.

    "ansi_default" is the terminal's own color and has no value we could
    put in a style string, so it takes the fallback like an unset slot.
    """
    if not value or value == "ansi_default":
        return fallback
    try:
        return Color.parse(value).hex6
    except ColorParseError:
        return fallback


def build_theme_colors(textual_theme) -> ThemeColors:
    """ThemeColors for a Textual Theme; sparse and ANSI themes are filled in."""
    dark = textual_theme.dark
    base = {
        slot: _to_hex(getattr(textual_theme, slot), fallbacks[0 if dark else 1])
        for slot, fallbacks in _FALLBACKS.items()
    }
    accent = _to_hex(textual_theme.accent, base["primary"])
    fg = base["foreground"]

    return ThemeColors(
        dark=dark,
        accent=accent,
        **base,
        emph_style="italic",
        strong_style="bold",
        code_style=f"{accent} on {base['surface']}",
        url_style=f"underline {base['primary']}",
        emoji_style=base["warning"],
        header_style=f"bold {base['primary']}",
        reply_parent_style=f"dim italic {fg}",
        client_message_style=f"dim {fg}",
        error_message_style=f"bold {base['error']}",
        date_transition_style=base["success"],
        new_message_transition_style=f"bold {base['warning']}",
        time_style=f"dim {fg}",
    )


_theme_colors: ThemeColors | None = None


def get_theme_colors() -> ThemeColors:
    """Current ThemeColors; the default theme is built on first use."""
    global _theme_colors
    if _theme_colors is None:
        _theme_colors = build_theme_colors(BUILTIN_THEMES[DEFAULT_THEME_NAME])
    return _theme_colors


def set_theme(textual_theme) -> None:
    """Rebuild theme-derived module state from a Textual Theme.

    // [LAW:single-enforcer] Sole entry point for theme changes.
    """
    global _theme_colors
    _theme_colors = build_theme_colors(textual_theme)
