"""
Test configuration and fixtures for ChromaSense tests.
"""
import random

import pytest
from fastapi.testclient import TestClient

from chromasense.services.orchestrator import PaletteOrchestrator
from chromasense.services.personalization.engine import ColorLearningEngine
from chromasense.services.personalization.storage import InMemoryStateStore
from deps import get_orchestrator

# Import the main app
from main import app


@pytest.fixture
def rng():
    """Seeded random source so generated palettes are reproducible."""
    return random.Random(1234)


@pytest.fixture
def engine(rng):
    return ColorLearningEngine(rng=rng)


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def orchestrator(engine, store, rng):
    """Restored session backed by in-memory storage."""
    session = PaletteOrchestrator(engine=engine, store=store, palette_size=5, history_limit=5, rng=rng)
    session.restore()
    return session


@pytest.fixture
def test_client(orchestrator):
    """Create test client for the FastAPI app with an isolated session."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from chromasense.utils.metrics import reset_metrics
    reset_metrics()
