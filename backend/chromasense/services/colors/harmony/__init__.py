"""
ChromaSense Harmony Generators

This module implements the fixed hue-offset palette rules (random, harmonious,
analogous, monochromatic, complementary, triadic, tetradic). Every generator
works in HSL space around the seed's hue and converts back to hex.

All generators return exactly ``count`` colors; the seed is echoed verbatim as
the first entry where the rule includes it. ``count < 1`` yields an empty list.
"""

import random
from enum import Enum
from typing import Callable, Dict, List, Optional

from chromasense.exceptions import UnknownModeError
from chromasense.services.colors.conversion import (
    generate_random_color, hex_to_hsl, hsl_to_hex, rotate_hue,
)

# Analogous colors are 30 degrees apart
ANALOGOUS_STEP = 30.0

# Saturation decay per complementary variant
COMPLEMENTARY_SAT_DECAY = 0.2


class PaletteMode(str, Enum):
    """Palette generation modes offered to the user."""
    RANDOM = "random"
    HARMONIOUS = "harmonious"
    ANALOGOUS = "analogous"
    MONOCHROMATIC = "monochromatic"
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    TETRADIC = "tetradic"
    AI = "ai"


def generate_random_palette(count: int, rng: Optional[random.Random] = None) -> List[str]:
    """Generate ``count`` independent random colors."""
    return [generate_random_color(rng) for _ in range(max(0, count))]


def generate_harmonious_palette(seed_color: str, count: int) -> List[str]:
    """
    Seed plus colors with evenly spaced hues around the wheel.

    Args:
        seed_color: Seed color in format #RRGGBB
        count: Number of colors to return

    Returns:
        [seed, seed_hue + 360/count, seed_hue + 2*360/count, ...]
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(seed_color)
    hue_step = 360.0 / count

    palette = [seed_color]
    for i in range(1, count):
        palette.append(hsl_to_hex(rotate_hue(h, i * hue_step), s, l))
    return palette


def generate_analogous_palette(base_color: str, count: int) -> List[str]:
    """
    Seed plus neighbours stepping outward by 30° (right first, then left).

    Args:
        base_color: Seed color in format #RRGGBB
        count: Number of colors to return

    Returns:
        [seed, +30°, -30°, +60°, -60°, ...] with one extra step to the
        right when the sides leave the palette short
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(base_color)

    palette = [base_color]
    side_count = count // 2

    for i in range(1, side_count + 1):
        palette.append(hsl_to_hex(rotate_hue(h, i * ANALOGOUS_STEP), s, l))
        if len(palette) < count:
            palette.append(hsl_to_hex(rotate_hue(h, -i * ANALOGOUS_STEP), s, l))

    if len(palette) < count:
        palette.append(hsl_to_hex(rotate_hue(h, (side_count + 1) * ANALOGOUS_STEP), s, l))

    return palette[:count]


def generate_monochromatic_palette(base_color: str, count: int) -> List[str]:
    """
    Seed hue and saturation with lightness spread linearly over 20%-80%.

    A single-color palette keeps the seed's own lightness.
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(base_color)
    if count == 1:
        return [hsl_to_hex(h, s, l)]

    return [hsl_to_hex(h, s, (20 + (i * 60) / (count - 1)) / 100) for i in range(count)]


def generate_complementary_palette(base_color: str, count: int) -> List[str]:
    """
    Seed, desaturated seed variants, the complement, then complement variants.

    Each variant i scales saturation by (1 - 0.2*i). With two or fewer
    colors only the seed and its pure complement are used.
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(base_color)
    complementary_hue = rotate_hue(h, 180)

    palette = [base_color]
    variations = count - 2

    if variations > 0:
        variations_per_side = variations // 2

        for i in range(1, variations_per_side + 1):
            sat_factor = 1 - i * COMPLEMENTARY_SAT_DECAY
            palette.append(hsl_to_hex(h, s * sat_factor, l))

        palette.append(hsl_to_hex(complementary_hue, s, l))

        for i in range(1, variations - variations_per_side + 1):
            sat_factor = 1 - i * COMPLEMENTARY_SAT_DECAY
            palette.append(hsl_to_hex(complementary_hue, s * sat_factor, l))
    else:
        palette.append(hsl_to_hex(complementary_hue, s, l))

    return palette[:count]


def generate_triadic_palette(base_color: str, count: int) -> List[str]:
    """
    Seed with its +120° and +240° triad partners.

    Beyond three colors, extras sit at seed_hue + 30°*i with saturation x0.8.
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(base_color)
    triad1 = hsl_to_hex(rotate_hue(h, 120), s, l)
    triad2 = hsl_to_hex(rotate_hue(h, 240), s, l)

    palette = [base_color, triad1, triad2]

    for i in range(count - 3):
        hue_offset = (i * 30) % 360
        palette.append(hsl_to_hex(rotate_hue(h, hue_offset), s * 0.8, l))

    return palette[:count]


def generate_tetradic_palette(base_color: str, count: int) -> List[str]:
    """
    Seed with partners at +60°, +180° and +240°.

    Beyond four colors, extras cycle through the four base hues with
    saturation x0.7 and lightness ``(l * 1.2) % 1``. The modulo wraps very
    light seeds around to dark extras rather than clamping them.
    """
    if count < 1:
        return []
    h, s, l = hex_to_hsl(base_color)
    base_hues = [h, rotate_hue(h, 60), rotate_hue(h, 180), rotate_hue(h, 240)]

    palette = [base_color] + [hsl_to_hex(hue, s, l) for hue in base_hues[1:]]

    for i in range(count - 4):
        palette.append(hsl_to_hex(base_hues[i % 4], s * 0.7, (l * 1.2) % 1.0))

    return palette[:count]


SeededGenerator = Callable[[str, int], List[str]]

SEEDED_GENERATORS: Dict[PaletteMode, SeededGenerator] = {
    PaletteMode.HARMONIOUS: generate_harmonious_palette,
    PaletteMode.ANALOGOUS: generate_analogous_palette,
    PaletteMode.MONOCHROMATIC: generate_monochromatic_palette,
    PaletteMode.COMPLEMENTARY: generate_complementary_palette,
    PaletteMode.TRIADIC: generate_triadic_palette,
    PaletteMode.TETRADIC: generate_tetradic_palette,
}


def generate_palette_for_mode(
    mode: PaletteMode,
    seed_color: Optional[str],
    count: int,
    rng: Optional[random.Random] = None
) -> List[str]:
    """
    Dispatch one of the seven rule-based generation modes.

    Args:
        mode: Generation mode (``PaletteMode.AI`` is handled by the learning engine)
        seed_color: Seed for seeded modes; a random color is drawn when None
        count: Number of colors
        rng: Optional random source for reproducible output

    Returns:
        Palette of ``count`` hex colors

    Raises:
        UnknownModeError: For ``PaletteMode.AI`` or an unrecognised mode
    """
    try:
        mode = PaletteMode(mode)
    except ValueError:
        raise UnknownModeError(f"Unknown generation mode: {mode}")

    if mode == PaletteMode.RANDOM:
        return generate_random_palette(count, rng)

    generator = SEEDED_GENERATORS.get(mode)
    if generator is None:
        raise UnknownModeError(f"Mode '{mode.value}' is not a rule-based generator")

    seed = seed_color or generate_random_color(rng)
    return generator(seed, count)
