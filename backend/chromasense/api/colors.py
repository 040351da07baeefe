"""
ChromaSense Color Info API Routes
"""
from fastapi import APIRouter, HTTPException

from chromasense.config import Config
from chromasense.schemas import AccessibilityInfo, ColorInfoResponse
from chromasense.services.colors.conversion import (
    get_color_accessibility, get_color_harmony, get_color_name, hex_to_hsl,
    hex_to_rgb, is_light_color, normalize_hex, rgb_to_cmyk,
)
from chromasense.services.colors.formats import format_color

router = APIRouter(prefix="/v1/colors", tags=["colors"])


def _percent(value: float) -> int:
    return int(value * 100 + 0.5)


@router.get("/{color}", response_model=ColorInfoResponse)
def get_color_info(color: str):
    """
    Describe a single color.

    - **color**: 6- or 3-digit hex code, with or without the leading ``#``
    """
    hex_color = normalize_hex(color)
    if hex_color is None:
        raise HTTPException(status_code=400, detail=f"Invalid hex color: {color}")

    r, g, b = hex_to_rgb(hex_color)
    h, s, l = hex_to_hsl(hex_color)
    accessibility = get_color_accessibility(hex_color)

    return ColorInfoResponse(
        hex=hex_color,
        name=get_color_name(hex_color),
        rgb=[r, g, b],
        hsl=[int(h + 0.5) % 360, _percent(s), _percent(l)],
        cmyk=list(rgb_to_cmyk(r, g, b)),
        is_light=is_light_color(hex_color),
        accessibility=AccessibilityInfo(
            white_contrast=round(accessibility.white_contrast, 2),
            black_contrast=round(accessibility.black_contrast, 2),
            white_text_passes_aa=accessibility.white_text_passes_aa,
            black_text_passes_aa=accessibility.black_text_passes_aa,
        ),
        harmony=get_color_harmony(hex_color),
        formatted={fmt: format_color(hex_color, 0, fmt) for fmt in Config.COLOR_FORMATS},
    )
