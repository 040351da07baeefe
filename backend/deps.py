"""
Shared dependencies for the ChromaSense backend
"""
import random
import threading
from typing import Optional

from chromasense.config import config
from chromasense.services.orchestrator import PaletteOrchestrator
from chromasense.services.personalization.engine import ColorLearningEngine
from chromasense.services.personalization.storage import create_state_store
from chromasense.utils.logging import get_logger

logger = get_logger()

_orchestrator: Optional[PaletteOrchestrator] = None
_orchestrator_lock = threading.Lock()


def build_orchestrator() -> PaletteOrchestrator:
    """
    Create the session orchestrator from configuration and restore the saved session.
    """
    rng = random.Random(config.RANDOM_SEED)
    engine = ColorLearningEngine(rng=rng)
    orchestrator = PaletteOrchestrator(
        engine=engine,
        store=create_state_store(config),
        palette_size=config.PALETTE_SIZE,
        history_limit=config.HISTORY_LIMIT,
        rng=rng,
    )
    orchestrator.restore()
    logger.info("Palette session ready", extra={
        "storage": config.STORAGE_BACKEND,
        "seeded": config.RANDOM_SEED is not None,
    })
    return orchestrator


def get_orchestrator() -> PaletteOrchestrator:
    """
    FastAPI dependency returning the process-wide session.

    Tests replace it through ``app.dependency_overrides``.
    """
    global _orchestrator
    if _orchestrator is None:
        with _orchestrator_lock:
            if _orchestrator is None:
                _orchestrator = build_orchestrator()
    return _orchestrator
