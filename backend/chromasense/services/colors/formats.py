"""
ChromaSense - Palette Import/Export Formats

Parses pasted hex lists and CSS snippets into palettes, renders palettes as
CSS variables, SCSS variables, a Tailwind config snippet, a hex list or JSON,
and formats single colors for display.
"""

import json
import math
import re
from typing import List

from chromasense.exceptions import ExportFormatError, ImportFormatError
from chromasense.services.colors.conversion import (
    hex_to_hsl, hex_to_rgb, normalize_hex, rgb_to_hex,
)

TOKEN_SPLIT_RE = re.compile(r"[\n,\s]+")
CSS_HEX_RE = re.compile(r"#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})")
CSS_RGB_RE = re.compile(r"rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)", re.IGNORECASE)

COLOR_FORMAT_CYCLE = ["HEX", "RGB", "HSL", "CSS", "TW"]


def extract_hex_colors(text: str) -> List[str]:
    """
    Extract colors from a list of hex codes.

    Tokens may be separated by newlines, commas or spaces; a missing ``#`` is
    added and 3-digit shorthand is expanded. Invalid tokens are dropped.
    """
    colors = []
    for part in TOKEN_SPLIT_RE.split(text):
        if not part:
            continue
        color = normalize_hex(part)
        if color:
            colors.append(color)
    return colors


def extract_css_colors(text: str) -> List[str]:
    """
    Extract colors from CSS code.

    Collects every ``#rgb``/``#rrggbb`` token first, then every
    ``rgb(r, g, b)`` call converted to hex. Calls with a channel above 255
    are skipped.
    """
    colors = [normalize_hex(match.group(0)) for match in CSS_HEX_RE.finditer(text)]

    for match in CSS_RGB_RE.finditer(text):
        r, g, b = (int(value) for value in match.groups())
        if max(r, g, b) > 255:
            continue
        colors.append(rgb_to_hex(r, g, b))

    return colors


def normalize_import(colors: List[str], size: int = 5) -> List[str]:
    """
    Fit imported colors to the palette size.

    Extra colors are dropped and a short list is padded by repeating the
    last color.

    Raises:
        ImportFormatError: If no colors were found
    """
    if not colors:
        raise ImportFormatError("No valid colors found. Please check your input.")

    palette = list(colors[:size])
    while len(palette) < size:
        palette.append(palette[-1] if palette else "#000000")
    return palette


def import_colors(text: str, kind: str = "hex", size: int = 5) -> List[str]:
    """
    Parse pasted text into a palette of ``size`` colors.

    Args:
        text: Raw user input
        kind: ``"hex"`` for a hex list, ``"css"`` for CSS code
        size: Palette size to fit the result to
    """
    if kind == "hex":
        colors = extract_hex_colors(text)
    elif kind == "css":
        colors = extract_css_colors(text)
    else:
        raise ImportFormatError(f"Unknown import type: {kind}")
    return normalize_import(colors, size)


def generate_css_variables(colors: List[str]) -> str:
    lines = [":root {"]
    lines += [f"  --color-{index + 1}: {color};" for index, color in enumerate(colors)]
    lines.append("}")
    return "\n".join(lines)


def generate_scss_variables(colors: List[str]) -> str:
    return "".join(f"$color-{index + 1}: {color};\n" for index, color in enumerate(colors))


def generate_tailwind_config(colors: List[str]) -> str:
    lines = [
        "// Add this to your tailwind.config.js",
        "module.exports = {",
        "  theme: {",
        "    extend: {",
        "      colors: {",
    ]
    lines += [f"        'palette-{index + 1}': '{color}'," for index, color in enumerate(colors)]
    lines += [
        "      }",
        "    }",
        "  }",
        "}",
    ]
    return "\n".join(lines)


def generate_hex_list(colors: List[str]) -> str:
    return "\n".join(colors)


def generate_json(colors: List[str]) -> str:
    return json.dumps(colors)


EXPORTERS = {
    "css": generate_css_variables,
    "scss": generate_scss_variables,
    "tailwind": generate_tailwind_config,
    "hex": generate_hex_list,
    "json": generate_json,
}


def export_palette(colors: List[str], fmt: str = "css") -> str:
    """
    Render a palette as code in the requested format.

    Raises:
        ExportFormatError: For an unknown format
    """
    exporter = EXPORTERS.get(fmt)
    if exporter is None:
        raise ExportFormatError(f"Unknown export format '{fmt}'. Valid formats: {', '.join(EXPORTERS)}")
    return exporter(colors)


def format_color(hex_color: str, index: int, fmt: str = "HEX") -> str:
    """
    Display value of a palette color in one of the card formats.

    Args:
        hex_color: Color in format #RRGGBB
        index: Zero-based position in the palette (used by CSS/TW names)
        fmt: One of HEX, RGB, HSL, CSS, TW
    """
    if fmt == "RGB":
        r, g, b = hex_to_rgb(hex_color)
        return f"RGB({r}, {g}, {b})"
    if fmt == "HSL":
        h, s, l = hex_to_hsl(hex_color)
        return f"HSL({_round(h)}°, {_round(s * 100)}%, {_round(l * 100)}%)"
    if fmt == "CSS":
        return f"var(--color-{index + 1})"
    if fmt == "TW":
        return f"palette-{index + 1}"
    return hex_color.upper()


def next_color_format(current: str) -> str:
    """Cycle HEX -> RGB -> HSL -> CSS -> TW -> HEX."""
    if current not in COLOR_FORMAT_CYCLE:
        return "HEX"
    return COLOR_FORMAT_CYCLE[(COLOR_FORMAT_CYCLE.index(current) + 1) % len(COLOR_FORMAT_CYCLE)]


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))
