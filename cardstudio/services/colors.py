"""
Color model for card designs.

Designs store colors as strings in one of two notations: ``rgb(r, g, b)``
or ``#rrggbb``. Everything here parses into an ``RGB`` triplet first and
only formats back to a string at the edges. Bad input never raises; it
degrades to the default dark card color.
"""

import logging
import re
from functools import lru_cache
from typing import Literal, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

Notation = Literal["rgb", "hex"]


class RGB(NamedTuple):
    r: int
    g: int
    b: int


DEFAULT_RGB = RGB(28, 28, 30)
DEFAULT_HEX = "#1c1c1e"

# Single source of truth for every auto-contrast decision
LIGHT_THRESHOLD = 0.5

# Two-stop gradient derived from the background color
GRADIENT_LIGHTEN = 15
GRADIENT_DARKEN = -10

_TRIPLET_PATTERN = re.compile(
    r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$", re.IGNORECASE
)
_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")

ColorInput = Union[str, RGB, tuple, None]


def parse_color(value: ColorInput) -> Optional[RGB]:
    """Parse a color in either notation. Returns None if it cannot be parsed."""
    if value is None:
        return None

    if isinstance(value, tuple):
        if len(value) != 3:
            return None
        try:
            channels = [int(c) for c in value]
        except (TypeError, ValueError):
            return None
        if any(c < 0 or c > 255 for c in channels):
            return None
        return RGB(*channels)

    if not isinstance(value, str):
        return None

    text = value.strip()

    match = _TRIPLET_PATTERN.match(text)
    if match:
        channels = [int(group) for group in match.groups()]
        if any(c > 255 for c in channels):
            return None
        return RGB(*channels)

    match = _HEX_PATTERN.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return RGB(*(int(digits[i : i + 2], 16) for i in (0, 2, 4)))

    return None


def to_rgb(value: ColorInput, default: RGB = DEFAULT_RGB) -> RGB:
    """Parse a color, falling back to ``default`` for absent or malformed input."""
    parsed = parse_color(value)
    if parsed is not None:
        return parsed
    if value not in (None, ""):
        _warn_malformed(repr(value))
    return default


@lru_cache(maxsize=1024)
def _warn_malformed(text: str) -> None:
    # Once per distinct value
    logger.warning(f"Malformed color {text}, using the default color")


def format_hex(rgb: RGB) -> str:
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def format_triplet(rgb: RGB) -> str:
    return f"rgb({rgb[0]}, {rgb[1]}, {rgb[2]})"


def to_hex(value: ColorInput) -> str:
    """Canonical lowercase ``#rrggbb`` for either notation."""
    return format_hex(to_rgb(value))


def to_triplet(value: ColorInput) -> str:
    """Canonical ``rgb(r, g, b)`` for either notation."""
    return format_triplet(to_rgb(value))


def to_notation(value: ColorInput, notation: Notation = "rgb") -> str:
    """Serialize a color in the configured storage notation."""
    if notation == "hex":
        return to_hex(value)
    return to_triplet(value)


def luminance(value: ColorInput) -> float:
    """Relative luminance in [0, 1] using the 0.299/0.587/0.114 weights."""
    r, g, b = to_rgb(value)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def is_light(value: ColorInput) -> bool:
    return luminance(value) > LIGHT_THRESHOLD


def _clamp_channel(channel: int) -> int:
    return min(255, max(0, channel))


def adjust_brightness(value: ColorInput, delta: int) -> str:
    """Add ``delta`` to each channel, clamped to [0, 255]. Returns hex."""
    r, g, b = to_rgb(value)
    return format_hex(RGB(_clamp_channel(r + delta), _clamp_channel(g + delta), _clamp_channel(b + delta)))


def gradient_stops(background: ColorInput) -> tuple[str, str]:
    """The (from, to) stops of the card background gradient."""
    return (
        adjust_brightness(background, GRADIENT_LIGHTEN),
        adjust_brightness(background, GRADIENT_DARKEN),
    )


def auto_text_color(background: ColorInput) -> str:
    return "rgba(0,0,0,0.9)" if is_light(background) else "rgba(255,255,255,1)"


def auto_muted_color(background: ColorInput) -> str:
    return "rgba(0,0,0,0.5)" if is_light(background) else "rgba(255,255,255,0.5)"


def contrast_overlay(background: ColorInput, opacity: float) -> str:
    """Translucent black on light backgrounds, translucent white on dark ones."""
    base = "0,0,0" if is_light(background) else "255,255,255"
    return f"rgba({base},{opacity:g})"
