"""
ChromaSense Session Orchestrator
Owns the single user session: current palette, bounded history, display
format and the learning engine, and persists them through a StateStore.
"""
import json
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chromasense.config import config
from chromasense.exceptions import (
    HistoryIndexError, PaletteIndexError, StorageError, UnknownModeError,
)
from chromasense.services.colors.conversion import generate_random_color, normalize_hex
from chromasense.services.colors.formats import (
    COLOR_FORMAT_CYCLE, export_palette, format_color, import_colors, next_color_format,
)
from chromasense.services.colors.harmony import (
    PaletteMode, generate_palette_for_mode, generate_random_palette,
)
from chromasense.services.colors.swatches import create_swatch_metadata, render_palette_swatch
from chromasense.services.personalization.engine import ColorLearningEngine
from chromasense.services.personalization.storage import StateStore
from chromasense.utils.ids import generate_request_id
from chromasense.utils.logging import get_logger
from chromasense.utils.metrics import get_metrics

logger = get_logger()


@dataclass
class SessionState:
    """Everything about the session that is not learned preference data."""
    current_palette: List[str] = field(default_factory=list)
    history: List[List[str]] = field(default_factory=list)
    generation_mode: str = PaletteMode.RANDOM.value
    color_format: str = "HEX"
    creativity: float = 0.5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentPalette": list(self.current_palette),
            "paletteHistory": [list(p) for p in self.history],
            "generationMode": self.generation_mode,
            "currentColorFormat": self.color_format,
            "creativity": self.creativity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], history_limit: int) -> 'SessionState':
        """Restore session fields, dropping any that are malformed."""
        state = cls()

        palette = _clean_palette(data.get("currentPalette"))
        if palette:
            state.current_palette = palette

        history = data.get("paletteHistory")
        if isinstance(history, list):
            cleaned = [_clean_palette(p) for p in history]
            state.history = [p for p in cleaned if p][:history_limit]

        mode = data.get("generationMode")
        if mode in [m.value for m in PaletteMode]:
            state.generation_mode = mode

        fmt = data.get("currentColorFormat")
        if fmt in COLOR_FORMAT_CYCLE:
            state.color_format = fmt

        creativity = data.get("creativity")
        if isinstance(creativity, (int, float)) and not isinstance(creativity, bool) and 0 <= creativity <= 1:
            state.creativity = float(creativity)

        return state


def _clean_palette(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list) or not value:
        return None
    colors = [normalize_hex(c) if isinstance(c, str) else None for c in value]
    if any(c is None for c in colors):
        return None
    return colors


@dataclass
class GenerationResult:
    """Outcome of a palette generation request."""
    request_id: str
    colors: List[str]
    mode: str
    creativity: Optional[float] = None
    sources: Optional[List[str]] = None


class PaletteOrchestrator:
    """Coordinates palette generation, editing, history, feedback and persistence."""

    def __init__(
        self,
        engine: Optional[ColorLearningEngine] = None,
        store: Optional[StateStore] = None,
        palette_size: Optional[int] = None,
        history_limit: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        self.engine = engine or ColorLearningEngine()
        self.store = store
        self.palette_size = palette_size or config.PALETTE_SIZE
        self.history_limit = history_limit or config.HISTORY_LIMIT
        self.rng = rng or self.engine.rng
        self.state = SessionState(creativity=config.DEFAULT_CREATIVITY)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def restore(self) -> None:
        """
        Load the saved session and learning data.

        Without a saved palette a random one is generated. An unreadable
        snapshot starts a fresh session.
        """
        with self._lock:
            raw = None
            if self.store is not None:
                try:
                    raw = self.store.load()
                except StorageError as e:
                    logger.error("Could not read saved session, starting fresh", extra={"error": str(e)})

            document = {}
            if raw:
                try:
                    document = json.loads(raw)
                    if not isinstance(document, dict):
                        raise ValueError("session snapshot is not a JSON object")
                except ValueError as e:
                    logger.error("Saved session is corrupt, starting fresh", extra={"error": str(e)})
                    document = {}

            learning_data = document.get("learningData")
            if isinstance(learning_data, str):
                self.engine.load_from_json(learning_data)

            self.state = SessionState.from_dict(document, self.history_limit)
            if not self.state.current_palette:
                self.state.current_palette = generate_random_palette(self.palette_size, self.rng)

            logger.info("Session restored", extra={
                "palette": self.state.current_palette,
                "history": len(self.state.history),
                "samples": self.engine.total_samples,
            })

    def persist(self) -> bool:
        """
        Save session and learning data.

        Storage failures are logged and reported through the return value so
        a broken store never interrupts palette work.
        """
        if self.store is None:
            return False
        with self._lock:
            document = self.state.to_dict()
            document["learningData"] = self.engine.save_to_json()
            try:
                self.store.save(json.dumps(document))
            except StorageError as e:
                logger.error("Error saving session", extra={"error": str(e)})
                return False
        return True

    # ------------------------------------------------------------------
    # Palette operations
    # ------------------------------------------------------------------

    @property
    def current_palette(self) -> List[str]:
        return list(self.state.current_palette)

    @property
    def history(self) -> List[List[str]]:
        return [list(p) for p in self.state.history]

    def _push_history(self) -> None:
        if self.state.current_palette:
            self.state.history = ([list(self.state.current_palette)] + self.state.history)[:self.history_limit]

    def generate(self, mode: Optional[str] = None, creativity: Optional[float] = None) -> GenerationResult:
        """
        Replace the current palette with a newly generated one.

        Seeded modes use the first color of the current palette as seed (or a
        random color). ``ai`` mode asks the learning engine. The replaced
        palette moves to the front of the history.
        """
        start_time = time.time()
        request_id = generate_request_id("gen")

        with self._lock:
            mode = mode or self.state.generation_mode
            try:
                palette_mode = PaletteMode(mode)
            except ValueError:
                raise UnknownModeError(f"Unknown generation mode: {mode}")

            result = GenerationResult(request_id=request_id, colors=[], mode=palette_mode.value)

            if palette_mode == PaletteMode.AI:
                creativity = self.state.creativity if creativity is None else creativity
                generated = self.engine.generate_palette_detailed(self.palette_size, creativity)
                result.colors = generated.colors
                result.sources = generated.sources
                result.creativity = creativity
                self.state.creativity = creativity
            else:
                seed = self.state.current_palette[0] if self.state.current_palette else generate_random_color(self.rng)
                result.colors = generate_palette_for_mode(palette_mode, seed, self.palette_size, self.rng)

            self._push_history()
            self.state.current_palette = list(result.colors)
            self.state.generation_mode = palette_mode.value
            self.persist()

        duration_ms = (time.time() - start_time) * 1000
        metrics = get_metrics()
        metrics.increment_palette_count(palette_mode.value)
        metrics.record_timing("generate", duration_ms)

        logger.log_generation(request_id, palette_mode.value, result.colors, duration_ms)
        return result

    def set_mode(self, mode: str) -> None:
        try:
            palette_mode = PaletteMode(mode)
        except ValueError:
            raise UnknownModeError(f"Unknown generation mode: {mode}")
        with self._lock:
            self.state.generation_mode = palette_mode.value
            self.persist()

    def update_color(self, index: int, color: str) -> List[str]:
        """Replace one color of the current palette."""
        normalized = normalize_hex(color)
        if normalized is None:
            raise ValueError(f"Invalid color: {color}")

        with self._lock:
            if not 0 <= index < len(self.state.current_palette):
                raise PaletteIndexError(f"No color at position {index}")
            self.state.current_palette[index] = normalized
            self.persist()
            return self.current_palette

    def select_history(self, index: int) -> List[str]:
        """
        Make a history entry the current palette.

        The current palette takes the front of the history and any copies of
        the selected palette are removed from it.
        """
        with self._lock:
            if not 0 <= index < len(self.state.history):
                raise HistoryIndexError(f"No history entry at position {index}")

            selected = self.state.history[index]
            remaining = [p for p in self.state.history if p != selected]
            self.state.history = ([list(self.state.current_palette)] + remaining)[:self.history_limit]
            self.state.current_palette = list(selected)
            self.persist()
            return self.current_palette

    def import_colors(self, text: str, kind: str = "hex") -> List[str]:
        """Parse pasted colors into a new current palette."""
        colors = import_colors(text, kind, self.palette_size)
        with self._lock:
            self._push_history()
            self.state.current_palette = colors
            self.persist()

        get_metrics().increment_counter("palettes_imported_total")
        logger.info(f"Imported {len(colors)} colors", extra={"kind": kind, "colors": colors})
        return list(colors)

    def export(self, fmt: str = "css") -> str:
        code = export_palette(self.current_palette, fmt)
        get_metrics().increment_counter(f"palettes_exported_total_{fmt}")
        return code

    def render_swatch(self, chip_size: int = 80, include_labels: bool = True) -> Dict[str, Any]:
        colors = self.current_palette
        return {
            "swatch_png_b64": render_palette_swatch(colors, chip_size, 0, include_labels),
            "metadata": create_swatch_metadata(colors, chip_size, 0),
        }

    def cycle_color_format(self) -> str:
        with self._lock:
            self.state.color_format = next_color_format(self.state.color_format)
            self.persist()
            return self.state.color_format

    def display_values(self) -> List[str]:
        palette = self.current_palette
        return [format_color(color, index, self.state.color_format) for index, color in enumerate(palette)]

    # ------------------------------------------------------------------
    # Feedback and preferences
    # ------------------------------------------------------------------

    def feedback(self, liked: bool, palette: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Teach the engine from a liked or disliked palette.

        Args:
            liked: True for like, False for dislike
            palette: Palette to learn from; defaults to the current palette
        """
        with self._lock:
            colors = [c.lower() for c in palette] if palette else self.current_palette
            if colors:
                self.engine.learn_from_palette(colors, 1 if liked else -1)
                self.persist()

        get_metrics().increment_feedback_count("like" if liked else "dislike")
        return self.engine.get_stats()

    def like(self) -> Dict[str, Any]:
        return self.feedback(True)

    def dislike(self) -> Dict[str, Any]:
        return self.feedback(False)

    def apply_preset(self, name: str) -> Dict[str, Any]:
        with self._lock:
            self.engine.apply_preset(name)
            self.persist()
        return self.engine.get_stats()

    def set_preferences(
        self,
        saturation: Optional[float] = None,
        lightness: Optional[float] = None,
        color_bias: Optional[Dict[str, float]] = None,
        creativity: Optional[float] = None
    ) -> Dict[str, Any]:
        with self._lock:
            if saturation is not None:
                self.engine.set_saturation_preference(saturation)
            if lightness is not None:
                self.engine.set_lightness_preference(lightness)
            if color_bias is not None:
                self.engine.set_color_bias(color_bias["r"], color_bias["g"], color_bias["b"])
            if creativity is not None:
                self.state.creativity = creativity
            self.persist()
        return self.engine.get_stats()

    def train(self, rounds: Optional[int] = None) -> Dict[str, Any]:
        with self._lock:
            summary = self.engine.train(rounds)
            self.persist()
        return summary

    def reset_learning(self) -> Dict[str, Any]:
        with self._lock:
            self.engine.reset()
            self.persist()
        return self.engine.get_stats()

    def reset_preferences(self) -> Dict[str, Any]:
        with self._lock:
            self.engine.reset_preferences()
            self.persist()
        return self.engine.get_stats()

    def load_learning_snapshot(self, data: str) -> bool:
        with self._lock:
            loaded = self.engine.load_from_json(data)
            self.persist()
        return loaded
