"""
ChromaSense - Swatch Generation

Renders a palette as a PNG strip of color chips, optionally captioned with
each color's hex code, and returns it base64-encoded for download.
"""

import base64
import io
from typing import Any, Dict, List

from PIL import Image, ImageDraw

from chromasense.services.colors.conversion import hex_to_rgb, is_light_color

LABEL_DARK = (31, 41, 55)
LABEL_LIGHT = (255, 255, 255)


def create_color_chip(color_hex: str, chip_size: int = 80, label: bool = False) -> Image.Image:
    """
    Create a single color chip image.

    Args:
        color_hex: Hex color to render
        chip_size: Size of the square chip in pixels
        label: Whether to print the uppercase hex code on the chip

    Returns:
        PIL Image of the color chip
    """
    chip = Image.new('RGB', (chip_size, chip_size), tuple(hex_to_rgb(color_hex)))

    if label:
        draw = ImageDraw.Draw(chip)
        fill = LABEL_DARK if is_light_color(color_hex) else LABEL_LIGHT
        draw.text((4, chip_size - 14), color_hex.upper(), fill=fill)

    return chip


def create_palette_strip(
    colors: List[str],
    chip_size: int = 80,
    spacing: int = 0,
    include_labels: bool = True
) -> Image.Image:
    """
    Create a horizontal strip of color chips.

    Args:
        colors: Palette colors in display order
        chip_size: Size of each chip in pixels
        spacing: Spacing between chips in pixels
        include_labels: Whether to caption chips with hex codes

    Returns:
        PIL Image of the strip
    """
    if not colors:
        return Image.new('RGB', (chip_size, chip_size), (255, 255, 255))

    num_chips = len(colors)
    strip_width = num_chips * chip_size + (num_chips - 1) * spacing
    strip = Image.new('RGB', (strip_width, chip_size), (255, 255, 255))

    x_pos = 0
    for color in colors:
        strip.paste(create_color_chip(color, chip_size, include_labels), (x_pos, 0))
        x_pos += chip_size + spacing

    return strip


def render_palette_swatch(
    colors: List[str],
    chip_size: int = 80,
    spacing: int = 0,
    include_labels: bool = True
) -> str:
    """
    Render a palette as a base64-encoded PNG swatch.

    Returns:
        Base64-encoded PNG image string
    """
    swatch = create_palette_strip(colors, chip_size, spacing, include_labels)

    buffer = io.BytesIO()
    swatch.save(buffer, format='PNG')
    return base64.b64encode(buffer.getvalue()).decode('utf-8')


def create_swatch_metadata(colors: List[str], chip_size: int, spacing: int) -> Dict[str, Any]:
    """Describe the swatch parameters and contents."""
    return {
        "format": "strip",
        "chip_size_px": chip_size,
        "spacing_px": spacing,
        "total_colors": len(colors),
        "width_px": len(colors) * chip_size + (len(colors) - 1) * spacing if colors else chip_size,
        "height_px": chip_size,
        "colors": [color.upper() for color in colors],
    }
