from dotenv import load_dotenv

# Load environment variables before the configuration is read
load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from chromasense.api.colors import router as colors_router
from chromasense.api.learning import router as learning_router
from chromasense.api.palettes import router as palettes_router
from chromasense.config import config
from chromasense.schemas import HealthResponse
from chromasense.services.colors import __version__
from chromasense.utils.logging import get_logger
from chromasense.utils.metrics import get_metrics

logger = get_logger()

app = FastAPI(
    title="ChromaSense Palette Backend",
    description="Color palette generation that learns from likes and dislikes",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(palettes_router)
app.include_router(learning_router)
app.include_router(colors_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(status="ok", service="chromasense", version=__version__)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "ChromaSense Palette API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/metrics")
def metrics_summary():
    """Counters and timings collected since startup."""
    if not config.METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return get_metrics().get_summary()


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting ChromaSense backend", extra={"storage": config.STORAGE_BACKEND})
    uvicorn.run(app, host="0.0.0.0", port=8000)
