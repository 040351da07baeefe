"""
ChromaSense Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Dict, Any, List, Optional

from loguru import logger

from chromasense.config import config


class StructuredLogger:
    """Structured logger for the ChromaSense palette service."""

    def __init__(self, level: Optional[str] = None):
        self.level = level or config.LOG_LEVEL
        self._configure_logger()

    def _configure_logger(self):
        """Replace loguru's default sink with the structured stdout format."""
        logger.remove()
        logger.add(
            sys.stdout,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
            level=self.level,
            serialize=False  # Set to True for JSON output
        )

    def _log(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        target = logger.bind(**extra) if extra else logger
        # Skip this frame so records point at the caller
        target.opt(depth=2).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._log("DEBUG", message, extra)

    def log_generation(self, request_id: str, mode: str, colors: List[str], duration_ms: float):
        """Log a completed palette generation."""
        self._log("INFO", f"Palette generated {request_id}", {
            "request_id": request_id,
            "mode": mode,
            "colors": colors,
            "duration_ms": round(duration_ms, 2),
        })


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
