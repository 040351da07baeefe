"""
ChromaSense Learning API Routes
Feedback ingestion, preference editing and learning snapshot transfer.
"""
from fastapi import APIRouter, Depends, HTTPException

from chromasense.exceptions import UnknownPresetError
from chromasense.schemas import (
    FeedbackRequest, LearningStats, PreferencesUpdate, PresetRequest,
    SnapshotLoadResponse, SnapshotRequest, SnapshotResponse, TrainRequest, TrainResponse,
)
from chromasense.services.orchestrator import PaletteOrchestrator
from chromasense.utils.logging import get_logger
from deps import get_orchestrator

logger = get_logger()
router = APIRouter(prefix="/v1/learning", tags=["learning"])


@router.post("/feedback", response_model=LearningStats)
def submit_feedback(
    body: FeedbackRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Like or dislike a palette (the current one unless a palette is given)."""
    liked = body.sentiment == "like"
    stats = orchestrator.feedback(liked, body.palette)

    logger.info(f"Feedback received: {body.sentiment}", extra={
        "total_samples": stats["total_samples"],
        "confidence": round(stats["confidence"], 3),
    })
    return stats


@router.get("/stats", response_model=LearningStats)
def get_learning_stats(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    return orchestrator.engine.get_stats()


@router.post("/preset", response_model=LearningStats)
def apply_preset(
    body: PresetRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Apply a named preset: warm, cool, vibrant, pastel, dark or balanced."""
    try:
        return orchestrator.apply_preset(body.name)
    except UnknownPresetError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/preferences", response_model=LearningStats)
def update_preferences(
    body: PreferencesUpdate,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Set saturation, lightness, RGB bias or ai creativity directly."""
    return orchestrator.set_preferences(
        saturation=body.saturation,
        lightness=body.lightness,
        color_bias=body.color_bias.model_dump() if body.color_bias else None,
        creativity=body.creativity,
    )


@router.post("/train", response_model=TrainResponse)
def train_engine(
    body: TrainRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """Learn from random palettes with coin-flip sentiment."""
    summary = orchestrator.train(body.rounds)
    return TrainResponse(stats=orchestrator.engine.get_stats(), **summary)


@router.post("/reset", response_model=LearningStats)
def reset_learning(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    """Forget all learned data."""
    return orchestrator.reset_learning()


@router.post("/reset-preferences", response_model=LearningStats)
def reset_preferences(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    """Return preferences to neutral while keeping liked/disliked colors."""
    return orchestrator.reset_preferences()


@router.get("/snapshot", response_model=SnapshotResponse)
def export_snapshot(orchestrator: PaletteOrchestrator = Depends(get_orchestrator)):
    return SnapshotResponse(data=orchestrator.engine.save_to_json())


@router.put("/snapshot", response_model=SnapshotLoadResponse)
def import_snapshot(
    body: SnapshotRequest,
    orchestrator: PaletteOrchestrator = Depends(get_orchestrator)
):
    """
    Replace learned data from a snapshot string.

    An unreadable snapshot resets the engine and reports ``loaded: false``.
    """
    loaded = orchestrator.load_learning_snapshot(body.data)
    return SnapshotLoadResponse(loaded=loaded, stats=orchestrator.engine.get_stats())
