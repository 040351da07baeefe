"""
ChromaSense API Schemas
Pydantic models for palette, learning and color request/response validation.
"""
from typing import Annotated, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

HEX_PATTERN = r"^#[0-9A-Fa-f]{6}$"

HexColor = Annotated[str, Field(pattern=HEX_PATTERN)]


# ============================================================================
# PALETTE SCHEMAS
# ============================================================================

class GenerateRequest(BaseModel):
    """Palette generation request."""
    mode: Optional[Literal[
        "random", "harmonious", "analogous", "monochromatic",
        "complementary", "triadic", "tetradic", "ai",
    ]] = Field(None, description="Generation mode; defaults to the session's current mode")
    creativity: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        description="Exploration level for ai mode (0=exploit preferences, 1=explore)"
    )


class ColorUpdateRequest(BaseModel):
    """Replace a single palette color."""
    hex: str = Field(..., pattern=HEX_PATTERN, description="Hex color code in format #RRGGBB")


class ImportRequest(BaseModel):
    """Pasted colors to import as the current palette."""
    text: str = Field(..., min_length=1, description="Hex list or CSS text")
    kind: Literal["hex", "css"] = Field("hex", description="Parser to apply to the text")


class PaletteResponse(BaseModel):
    """The session's current palette."""
    colors: List[str] = Field(..., description="Current palette as lowercase hex codes")
    display: List[str] = Field(..., description="Colors rendered in the current display format")
    color_format: str = Field(..., description="Current display format")
    mode: str = Field(..., description="Current generation mode")
    request_id: Optional[str] = Field(None, description="Id of the generation that produced the palette")
    sources: Optional[List[str]] = Field(
        None,
        description="How each color was placed in ai mode (preferred, harmony, fallback)"
    )


class HistoryResponse(BaseModel):
    """Previously shown palettes, newest first."""
    history: List[List[str]]
    limit: int


class ExportResponse(BaseModel):
    """Palette rendered as code."""
    format: str
    code: str


class SwatchMetadata(BaseModel):
    """Parameters and contents of a rendered swatch."""
    format: str
    chip_size_px: int
    spacing_px: int
    total_colors: int
    width_px: int
    height_px: int
    colors: List[str]


class SwatchResponse(BaseModel):
    """Rendered palette swatch."""
    swatch_png_b64: str = Field(..., description="Base64-encoded PNG strip of color chips")
    metadata: SwatchMetadata


class ColorFormatResponse(BaseModel):
    color_format: str
    display: List[str]


# ============================================================================
# LEARNING SCHEMAS
# ============================================================================

class FeedbackRequest(BaseModel):
    """Like or dislike a palette."""
    sentiment: Literal["like", "dislike"]
    palette: Optional[List[HexColor]] = Field(
        None,
        min_length=1,
        description="Palette to learn from; defaults to the current palette"
    )


class PresetRequest(BaseModel):
    name: Literal["warm", "cool", "vibrant", "pastel", "dark", "balanced"]


class ColorBiasModel(BaseModel):
    """Preferred share of each RGB channel."""
    r: float = Field(..., ge=0.0, le=1.0)
    g: float = Field(..., ge=0.0, le=1.0)
    b: float = Field(..., ge=0.0, le=1.0)


class PreferencesUpdate(BaseModel):
    """
    Manual preference edits.

    Values are clamped to [0.1, 0.9] by the engine.
    """
    saturation: Optional[float] = Field(None, ge=0.0, le=1.0)
    lightness: Optional[float] = Field(None, ge=0.0, le=1.0)
    color_bias: Optional[ColorBiasModel] = None
    creativity: Optional[float] = Field(None, ge=0.0, le=1.0)


class TrainRequest(BaseModel):
    rounds: int = Field(10, ge=1, le=100, description="Number of random palettes to learn from")


class LearningStats(BaseModel):
    """Summary of what the engine has learned."""
    total_samples: int
    liked_colors: int
    disliked_colors: int
    confidence: float = Field(..., ge=0.0, le=1.0)
    saturation_preference: float
    lightness_preference: float
    color_bias: Dict[str, float]
    hue_preferences: List[float] = Field(..., min_length=36, max_length=36)


class TrainResponse(BaseModel):
    rounds: int
    liked: int
    disliked: int
    stats: LearningStats


class SnapshotResponse(BaseModel):
    """Learning data as the JSON snapshot string."""
    data: str


class SnapshotRequest(BaseModel):
    data: str = Field(..., description="JSON snapshot string produced by GET /v1/learning/snapshot")


class SnapshotLoadResponse(BaseModel):
    loaded: bool = Field(..., description="False when the snapshot was unreadable and the engine was reset")
    stats: LearningStats


# ============================================================================
# COLOR INFO SCHEMAS
# ============================================================================

class AccessibilityInfo(BaseModel):
    """WCAG contrast of the color against white and black text."""
    white_contrast: float
    black_contrast: float
    white_text_passes_aa: bool
    black_text_passes_aa: bool


class ColorInfoResponse(BaseModel):
    """Everything the service knows about a single color."""
    hex: str
    name: str
    rgb: List[int] = Field(..., min_length=3, max_length=3)
    hsl: List[int] = Field(..., min_length=3, max_length=3, description="Hue in degrees, saturation and lightness in percent")
    cmyk: List[int] = Field(..., min_length=4, max_length=4)
    is_light: bool
    accessibility: AccessibilityInfo
    harmony: List[str]
    formatted: Dict[str, str]


# ============================================================================
# SERVICE SCHEMAS
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field("ok", description="Service health status")
    service: str = Field("chromasense", description="Service name")
    version: str = Field(..., description="Service version")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
