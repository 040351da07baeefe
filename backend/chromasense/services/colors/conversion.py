"""
ChromaSense - Color Space Conversion

Pure helpers converting between hex strings, RGB and HSL, plus WCAG contrast,
rule-based color naming and fixed-offset harmony colors. Hue is expressed in
degrees [0, 360); saturation and lightness in [0, 1].

Hex input is not validated: only the leading run of hex digits is parsed, so a
malformed string yields meaningless channels (black when there are no hex
digits) rather than an error.
"""

import colorsys
import math
import random
import re
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

HEX6_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
HEX3_RE = re.compile(r"^#[0-9A-Fa-f]{3}$")
HEX_PREFIX_RE = re.compile(r"[0-9A-Fa-f]+")

# WCAG AA threshold for normal text
AA_CONTRAST = 4.5


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    h: float  # Hue [0, 360)
    s: float  # Saturation [0, 1]
    l: float  # Lightness [0, 1]


@dataclass
class ColorAccessibility:
    """Contrast ratios of a color against pure white and pure black."""
    white_contrast: float
    black_contrast: float

    @property
    def white_text_passes_aa(self) -> bool:
        return self.white_contrast >= AA_CONTRAST

    @property
    def black_text_passes_aa(self) -> bool:
        return self.black_contrast >= AA_CONTRAST


def _to_byte(channel: float) -> int:
    # Half-up rounding so x.5 always goes up
    return int(math.floor(channel * 255 + 0.5))


def hex_to_rgb(hex_color: str) -> RGB:
    """
    Convert a hex color to RGB channels.

    Args:
        hex_color: Color as ``#RRGGBB`` (the leading ``#`` is optional)

    Returns:
        RGB named tuple with channels 0-255
    """
    if hex_color.startswith("#"):
        hex_color = hex_color[1:]
    match = HEX_PREFIX_RE.match(hex_color)
    value = int(match.group(0), 16) if match else 0
    return RGB((value >> 16) & 255, (value >> 8) & 255, value & 255)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Pack RGB channels into a lowercase ``#rrggbb`` string."""
    return "#" + format((1 << 24) + (int(r) << 16) + (int(g) << 8) + int(b), "x")[1:]


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    """
    Convert RGB to HSL using Python's colorsys.

    Args:
        r, g, b: Channels 0-255

    Returns:
        HSL with hue in degrees; achromatic colors get h=0, s=0
    """
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return HSL(h * 360.0, s, l)


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """
    Convert HSL to RGB using Python's colorsys.

    Args:
        h: Hue in degrees (wraps around)
        s: Saturation [0, 1]
        l: Lightness [0, 1]

    Returns:
        RGB named tuple with channels rounded to 8 bits
    """
    r, g, b = colorsys.hls_to_rgb(h / 360.0, l, s)
    return RGB(_to_byte(r), _to_byte(g), _to_byte(b))


def hex_to_hsl(hex_color: str) -> HSL:
    """Convert a hex color straight to HSL."""
    return rgb_to_hsl(*hex_to_rgb(hex_color))


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """Convert HSL straight to a lowercase hex color."""
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


def rotate_hue(h: float, degrees: float) -> float:
    """Rotate a hue in degrees, wrapping into [0, 360)."""
    return (h + degrees) % 360.0


def generate_random_color(rng: Optional[random.Random] = None) -> str:
    """Generate a uniformly random 24-bit color."""
    rng = rng or random
    return "#" + format(rng.randrange(0, 0xFFFFFF), "06x")


def normalize_hex(token: str) -> Optional[str]:
    """
    Normalize a user-supplied hex token to lowercase ``#rrggbb``.

    Adds a missing ``#`` and expands 3-digit shorthand by doubling each digit.

    Returns:
        The canonical color, or None if the token is not a valid hex color
    """
    color = token.strip()
    if not color.startswith("#"):
        color = "#" + color
    if HEX3_RE.match(color):
        color = "#" + color[1] * 2 + color[2] * 2 + color[3] * 2
    if not HEX6_RE.match(color):
        return None
    return color.lower()


def is_valid_hex(color: str) -> bool:
    return bool(HEX6_RE.match(color))


def color_distance(color_a: str, color_b: str) -> float:
    """Euclidean distance between two colors in RGB space."""
    r1, g1, b1 = hex_to_rgb(color_a)
    r2, g2, b2 = hex_to_rgb(color_b)
    return math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2)


def min_distance(color: str, others: Iterable[str]) -> float:
    """
    Smallest RGB distance from ``color`` to any of ``others``.

    Returns:
        Minimum Euclidean distance, or ``inf`` when ``others`` is empty
    """
    others = list(others)
    if not others:
        return math.inf
    target = np.array(hex_to_rgb(color), dtype=float)
    pool = np.array([hex_to_rgb(c) for c in others], dtype=float)
    return float(np.min(np.linalg.norm(pool - target, axis=1)))


def relative_luminance(hex_color: str) -> float:
    """WCAG relative luminance of a color."""
    r, g, b = hex_to_rgb(hex_color)

    def linearize(channel: int) -> float:
        c = channel / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * linearize(r) + 0.7152 * linearize(g) + 0.0722 * linearize(b)


def contrast_ratio(luminance_a: float, luminance_b: float) -> float:
    """WCAG contrast ratio, lighter luminance on top."""
    lighter, darker = max(luminance_a, luminance_b), min(luminance_a, luminance_b)
    return (lighter + 0.05) / (darker + 0.05)


def get_color_accessibility(hex_color: str) -> ColorAccessibility:
    """
    Contrast ratios of a color against white and black text.

    Args:
        hex_color: Color in format #RRGGBB

    Returns:
        ColorAccessibility with white_contrast and black_contrast
    """
    luminance = relative_luminance(hex_color)
    return ColorAccessibility(
        white_contrast=contrast_ratio(1.0, luminance),
        black_contrast=contrast_ratio(luminance, 0.0),
    )


def is_light_color(hex_color: str) -> bool:
    """Perceived brightness check used to pick dark or light label text."""
    r, g, b = hex_to_rgb(hex_color)
    brightness = (r * 299 + g * 587 + b * 114) / 1000
    return brightness > 128


def rgb_to_cmyk(r: int, g: int, b: int) -> Tuple[int, int, int, int]:
    """Convert RGB to CMYK percentages."""
    c = 1 - r / 255
    m = 1 - g / 255
    y = 1 - b / 255
    k = min(c, m, y)

    if k == 1:
        return 0, 0, 0, 100

    c = (c - k) / (1 - k)
    m = (m - k) / (1 - k)
    y = (y - k) / (1 - k)
    return _round_half_up(c * 100), _round_half_up(m * 100), _round_half_up(y * 100), _round_half_up(k * 100)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# Hue bands as (upper bound exclusive, name)
_HUE_BANDS = [
    (30, "Red"),
    (60, "Orange"),
    (90, "Yellow"),
    (150, "Green"),
    (210, "Cyan"),
    (270, "Blue"),
    (330, "Purple"),
]


def get_color_name(hex_color: str) -> str:
    """
    Human-readable name for a color from HSL bucketing.

    Lightness adds Dark/Light/Pale, saturation adds Muted/Vibrant; colors
    below 15% saturation are named Black, White or Gray.
    """
    h, s, l = hex_to_hsl(hex_color)

    name = ""
    if l < 0.2:
        name = "Dark "
    elif l > 0.8:
        name = "Light "
    elif l > 0.6:
        name = "Pale "

    if s < 0.15:
        if l < 0.2:
            return "Black"
        if l > 0.8:
            return "White"
        return f"Gray ({_round_half_up(l * 100)}%)"

    if s < 0.3:
        name += "Muted "
    elif s > 0.8:
        name += "Vibrant "

    for upper, hue_name in _HUE_BANDS:
        if h < upper:
            return name + hue_name
    return name + "Pink"


def get_color_harmony(hex_color: str) -> List[str]:
    """
    Four fixed-offset companions of a color at the same S and L.

    Returns:
        [complement (+180°), analogous (+30°), analogous (-30°), triadic (+120°)]
    """
    h, s, l = hex_to_hsl(hex_color)
    return [hsl_to_hex(rotate_hue(h, degrees), s, l) for degrees in (180, 30, -30, 120)]
