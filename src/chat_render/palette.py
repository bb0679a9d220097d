"""Username colors: golden-angle hues in HSL space.

Consecutive palette slots are one golden angle (137.508°) apart on the hue
wheel, so even a handful of users in a channel land on clearly different
colors. A name picks its slot through a stable digest, which keeps a user's
color fixed across repaints, sessions and machines.

Lightness depends on the theme: 0.70 reads well on dark backgrounds, 0.35 on
light ones. Saturation is fixed at 0.75.
"""

import colorsys
import hashlib
import logging
import os

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = 137.508
DEFAULT_SEED_HUE = 190.0
DEFAULT_SLOTS = 38

SATURATION = 0.75
DARK_LIGHTNESS = 0.70
LIGHT_LIGHTNESS = 0.35


def _hsl_to_hex(h: float, s: float, lightness: float) -> str:
    """#RRGGBB for a hue in degrees and saturation/lightness in 0..1."""
    channels = colorsys.hls_to_rgb((h % 360) / 360.0, lightness, s)
    return "#" + "".join(f"{round(c * 255):02X}" for c in channels)


def username_color_index(name: str, count: int) -> int:
    """Palette slot for ``name``; str hash() is salted per process, sha1 is not.

    // [LAW:one-source-of-truth] Sole name → slot mapping.
    """
    digest = hashlib.sha1(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") % count


class Palette:
    """Golden-angle hue wheel starting at ``seed_hue`` with ``count`` slots."""

    def __init__(self, seed_hue: float = DEFAULT_SEED_HUE, count: int = DEFAULT_SLOTS):
        self.seed_hue = seed_hue
        self.count = count
        self._hues = [(seed_hue + slot * GOLDEN_ANGLE) % 360 for slot in range(count)]

    def color(self, slot: int, dark: bool = True) -> str:
        """Hex color of ``slot`` (wrapping) at the lightness for the theme mode."""
        lightness = DARK_LIGHTNESS if dark else LIGHT_LIGHTNESS
        return _hsl_to_hex(self._hues[slot % self.count], SATURATION, lightness)

    def username_color(self, name: str, dark: bool = True) -> str:
        return self.color(username_color_index(name, self.count), dark)


def _seed_hue_from_env() -> float:
    raw = os.environ.get("CHAT_RENDER_SEED_HUE")
    if raw is None:
        return DEFAULT_SEED_HUE
    try:
        return float(raw)
    except ValueError:
        logger.warning("invalid CHAT_RENDER_SEED_HUE=%r, using default", raw)
        return DEFAULT_SEED_HUE


def init_palette(seed_hue: float | None = None) -> None:
    """Replace the shared palette; ``None`` reads CHAT_RENDER_SEED_HUE."""
    global PALETTE
    PALETTE = Palette(seed_hue if seed_hue is not None else _seed_hue_from_env())


# Read through the module (chat_render.palette.PALETTE) so init_palette() takes effect.
PALETTE = Palette(_seed_hue_from_env())
