"""
ChromaSense Palette API Routes
Generation, editing, history, import and export of the session palette.
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query

from chromasense.config import Config
from chromasense.exceptions import (
    ExportFormatError, HistoryIndexError, ImportFormatError, PaletteIndexError, UnknownModeError,
)
from chromasense.schemas import (
    ColorFormatResponse, ColorUpdateRequest, ExportResponse, GenerateRequest,
    HistoryResponse, ImportRequest, PaletteResponse, SwatchResponse,
)
from chromasense.services.orchestrator import PaletteOrchestrator
from chromasense.utils.logging import get_logger
from deps import get_orchestrator

logger = get_logger()
router = APIRouter(prefix="/v1/palettes", tags=["palettes"])


def _palette_response(orchestrator: PaletteOrchestrator, request_id=None, sources=None) -> PaletteResponse:
    return PaletteResponse(
        colors=orchestrator.current_palette,
        display=orchestrator.display_values(),
        color_format=orchestrator.state.color_format,
        mode=orchestrator.state.generation_mode,
        request_id=request_id,
        sources=sources,
    )


@router.get("/current", response_model=PaletteResponse)
def get_current_palette(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    """Return the current palette with its display values."""
    return _palette_response(orchestrator)


@router.post("/generate", response_model=PaletteResponse)
def generate_palette(
    body: GenerateRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """
    Generate a new palette.

    - **mode**: random, harmonious, analogous, monochromatic, complementary,
      triadic, tetradic or ai (preference-driven)
    - **creativity**: 0-1, only used by ai mode
    """
    try:
        result = orchestrator.generate(body.mode, body.creativity)
    except UnknownModeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _palette_response(orchestrator, result.request_id, result.sources)


@router.put("/current/{index}", response_model=PaletteResponse)
def update_palette_color(
    body: ColorUpdateRequest,
    index: int = Path(..., ge=0, description="Position of the color in the palette"),
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Replace one color of the current palette."""
    try:
        orchestrator.update_color(index, body.hex)
    except PaletteIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return _palette_response(orchestrator)


@router.get("/history", response_model=HistoryResponse)
def get_history(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    """Previously shown palettes, newest first."""
    return HistoryResponse(history=orchestrator.history, limit=orchestrator.history_limit)


@router.post("/history/{index}/select", response_model=PaletteResponse)
def select_history_palette(
    index: int = Path(..., ge=0),
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Restore a palette from history; the current palette moves into history."""
    try:
        orchestrator.select_history(index)
    except HistoryIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return _palette_response(orchestrator)


@router.post("/import", response_model=PaletteResponse)
def import_palette(
    body: ImportRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """
    Import pasted colors as the current palette.

    Palettes are truncated or padded (repeating the last color) to the
    palette size.
    """
    try:
        orchestrator.import_colors(body.text, body.kind)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _palette_response(orchestrator)


@router.get("/export", response_model=ExportResponse)
def export_palette(
    format: str = Query("css", description=f"One of: {', '.join(Config.EXPORT_FORMATS)}"),
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Render the current palette as CSS, SCSS, Tailwind, hex list or JSON."""
    try:
        code = orchestrator.export(format)
    except ExportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ExportResponse(format=format, code=code)


@router.get("/export/swatch", response_model=SwatchResponse)
def export_swatch(
    chip_size: int = Query(80, ge=16, le=256, description="Chip edge length in pixels"),
    include_labels: bool = Query(True, description="Draw the hex code on each chip"),
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Render the current palette as a PNG strip."""
    try:
        return orchestrator.render_swatch(chip_size, include_labels)
    except Exception as e:
        logger.error("Swatch rendering failed", extra={"error": str(e)})
        raise HTTPException(status_code=500, detail=f"Swatch rendering failed: {str(e)}")


@router.post("/format/next", response_model=ColorFormatResponse)
def cycle_color_format(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    """Advance the display format HEX → RGB → HSL → CSS → TW → HEX."""
    color_format = orchestrator.cycle_color_format()
    return ColorFormatResponse(color_format=color_format, display=orchestrator.display_values())
