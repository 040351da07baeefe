"""
ChromaSense Adaptive Palette Generator.
Combines the preference model with color-theory hue shifts to produce
creativity-parameterized palettes that lean toward what the user liked.
"""

import json
import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chromasense.config import config
from chromasense.exceptions import UnknownPresetError
from chromasense.services.colors.conversion import (
    hex_to_hsl, hsl_to_hex, hsl_to_rgb, min_distance, rgb_to_hex,
)
from chromasense.services.colors.harmony import generate_random_palette
from chromasense.utils.metrics import get_metrics

from . import HUE_BUCKET_DEGREES, PreferenceModel, clamp

logger = logging.getLogger(__name__)

# Chance that a follow-up color is derived from an existing one by a hue shift
HARMONY_PROBABILITY = 0.7

# Creativity added on each retry after drawing a disliked color
RETRY_CREATIVITY_STEP = 0.2

# Above this creativity the RGB bias is not applied
BIAS_CREATIVITY_LIMIT = 0.7

SOURCE_PREFERRED = "preferred"
SOURCE_HARMONY = "harmony"
SOURCE_FALLBACK = "fallback"

PRESETS = {
    "warm": {"color_bias": (0.7, 0.5, 0.3)},
    "cool": {"color_bias": (0.3, 0.5, 0.7)},
    "vibrant": {"saturation": 0.8},
    "pastel": {"saturation": 0.3, "lightness": 0.8},
    "dark": {"lightness": 0.2},
    "balanced": {},
}


@dataclass
class GeneratedPalette:
    """A generated palette with the placement path of each color."""
    colors: List[str]
    sources: List[str] = field(default_factory=list)


class ColorLearningEngine:
    """
    Owns one PreferenceModel and generates palettes from it.

    All reads and writes of the model go through a single re-entrant lock, so
    a learning call never interleaves with generation or serialization.
    """

    def __init__(
        self,
        model: Optional[PreferenceModel] = None,
        rng: Optional[random.Random] = None,
        similarity_threshold: Optional[float] = None,
        max_dislike_retries: Optional[int] = None
    ):
        self.model = model or PreferenceModel()
        self.rng = rng or random.Random(config.RANDOM_SEED)
        self.similarity_threshold = (
            config.SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold
        )
        self.max_dislike_retries = (
            config.MAX_DISLIKE_RETRIES if max_dislike_retries is None else max_dislike_retries
        )
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def learn_from_palette(self, palette: List[str], sentiment: float) -> None:
        """Feed a liked (+1) or disliked (-1) palette into the model."""
        with self._lock:
            self.model.learn_from_palette(palette, sentiment)
            logger.debug(
                f"Learned from {len(palette)} colors (sentiment={sentiment:+g}), "
                f"samples={self.model.total_samples}"
            )

    def train(self, rounds: Optional[int] = None) -> Dict[str, int]:
        """
        Learn from random palettes with coin-flip sentiment.

        Returns:
            Counts of rounds run and how many were liked/disliked
        """
        rounds = config.TRAINING_ROUNDS if rounds is None else rounds
        liked = 0
        with self._lock:
            for _ in range(rounds):
                palette = generate_random_palette(config.PALETTE_SIZE, self.rng)
                sentiment = 1 if self.rng.random() > 0.5 else -1
                liked += sentiment > 0
                self.model.learn_from_palette(palette, sentiment)

        logger.info(f"Training finished: {rounds} rounds, {liked} liked")
        return {"rounds": rounds, "liked": liked, "disliked": rounds - liked}

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_palette(self, count: int = 5, creativity: float = 0.5) -> List[str]:
        """
        Generate a palette shaped by learned preferences.

        Args:
            count: Number of colors
            creativity: 0 exploits liked colors and learned weights, 1 explores

        Returns:
            List of ``count`` hex colors
        """
        return self.generate_palette_detailed(count, creativity).colors

    def generate_palette_detailed(self, count: int = 5, creativity: float = 0.5) -> GeneratedPalette:
        """
        Generate a palette and report how each color was placed.

        The first color comes from ``generate_preferred_color``. Each later
        slot, with probability 0.7, shifts a random existing color by a
        harmony rule and jitters S/L by x[0.8, 1.2]; a result closer than the
        similarity threshold to any placed color is replaced by a preferred
        color ("fallback"). Otherwise the slot gets a preferred color directly.
        """
        creativity = clamp(creativity, 0.0, 1.0)
        result = GeneratedPalette(colors=[], sources=[])
        if count < 1:
            return result

        with self._lock:
            result.colors.append(self.generate_preferred_color(creativity))
            result.sources.append(SOURCE_PREFERRED)

            for _ in range(1, count):
                if self.rng.random() < HARMONY_PROBABILITY:
                    candidate = self._harmony_candidate(result.colors)
                    if not self.is_too_similar(candidate, result.colors):
                        result.colors.append(candidate)
                        result.sources.append(SOURCE_HARMONY)
                    else:
                        result.colors.append(self.generate_preferred_color(creativity))
                        result.sources.append(SOURCE_FALLBACK)
                else:
                    result.colors.append(self.generate_preferred_color(creativity))
                    result.sources.append(SOURCE_PREFERRED)

        return result

    def _harmony_candidate(self, palette: List[str]) -> str:
        base_color = self.rng.choice(palette)
        h, s, l = hex_to_hsl(base_color)

        new_hue = (h + self._harmony_shift() + 360) % 360
        new_sat = clamp(s * (0.8 + self.rng.random() * 0.4), 0.1, 0.9)
        new_light = clamp(l * (0.8 + self.rng.random() * 0.4), 0.1, 0.9)

        return hsl_to_hex(new_hue, new_sat, new_light)

    def _harmony_shift(self) -> float:
        """Hue shift in degrees drawn from the color-theory rules."""
        rng = self.rng
        harmony_type = rng.random()

        if harmony_type < 0.3:
            # Analogous
            return rng.random() * 40 - 20
        if harmony_type < 0.6:
            # Complementary
            return 180 + (rng.random() * 20 - 10)
        if harmony_type < 0.8:
            # Triadic
            return 120 * (rng.randrange(2) + 1) + (rng.random() * 20 - 10)
        # Split complementary
        return 180 + (30 if rng.random() > 0.5 else -30) + (rng.random() * 20 - 10)

    def generate_preferred_color(self, creativity: float = 0.5) -> str:
        """
        Draw one color from the learned preferences.

        With probability ``1 - creativity`` a previously liked color is reused.
        Otherwise a hue bucket is chosen by roulette over the hue weights and
        S/L are blended between preference and a random draw. A result within
        the similarity threshold of a disliked color is redrawn with creativity
        raised by 0.2, at most ``max_dislike_retries`` times; past the cap the
        last candidate is returned even though it is still disliked.
        """
        creativity = clamp(creativity, 0.0, 1.0)
        with self._lock:
            candidate = None
            for _ in range(self.max_dislike_retries + 1):
                if self.model.liked_colors and self.rng.random() > creativity:
                    return self.rng.choice(self.model.liked_colors)

                candidate = self._sample_color(creativity)
                if not self.is_disliked(candidate):
                    return candidate
                creativity = min(1.0, creativity + RETRY_CREATIVITY_STEP)

            logger.warning(
                f"Returning disliked color {candidate} after {self.max_dislike_retries} retries"
            )
            get_metrics().increment_retry_exhausted_count()
            return candidate

    def _select_hue_bucket(self) -> int:
        """Roulette-wheel pick over hue weights; ties go to the lower bucket."""
        weights = self.model.hue_preferences
        remaining = self.rng.random() * sum(weights)

        for index, weight in enumerate(weights):
            remaining -= weight
            if remaining <= 0:
                return index
        return 0

    def _sample_color(self, creativity: float) -> str:
        rng = self.rng
        model = self.model

        bucket = self._select_hue_bucket()
        hue = bucket * HUE_BUCKET_DEGREES + rng.random() * HUE_BUCKET_DEGREES
        hue = (hue + creativity * (rng.random() * 60 - 30) + 360) % 360

        saturation = clamp(
            model.saturation_preference * (1 - creativity * 0.5) + rng.random() * creativity * 0.8,
            0.1, 0.9
        )
        lightness = clamp(
            model.lightness_preference * (1 - creativity * 0.5) + rng.random() * creativity * 0.8,
            0.1, 0.9
        )

        r, g, b = hsl_to_rgb(hue, saturation, lightness)

        if creativity < BIAS_CREATIVITY_LIMIT:
            strength = 0.3 * (1 - creativity)
            bias = model.color_bias
            r = int(r * (1 - strength) + 255 * bias.r * strength + 0.5)
            g = int(g * (1 - strength) + 255 * bias.g * strength + 0.5)
            b = int(b * (1 - strength) + 255 * bias.b * strength + 0.5)

        return rgb_to_hex(r, g, b)

    def is_too_similar(self, color: str, palette: List[str], threshold: Optional[float] = None) -> bool:
        """True if ``color`` lies within ``threshold`` RGB distance of any palette color."""
        threshold = self.similarity_threshold if threshold is None else threshold
        return min_distance(color, palette) < threshold

    def is_disliked(self, color: str) -> bool:
        """True if ``color`` lies within the similarity threshold of a disliked color."""
        return min_distance(color, self.model.disliked_colors) < self.similarity_threshold

    # ------------------------------------------------------------------
    # Direct preference control
    # ------------------------------------------------------------------

    def set_color_bias(self, r: float, g: float, b: float) -> None:
        with self._lock:
            self.model.set_color_bias(r, g, b)

    def set_saturation_preference(self, value: float) -> None:
        with self._lock:
            self.model.set_saturation_preference(value)

    def set_lightness_preference(self, value: float) -> None:
        with self._lock:
            self.model.set_lightness_preference(value)

    def apply_preset(self, name: str) -> None:
        """
        Apply a named preference preset.

        ``balanced`` resets preferences to neutral; the others set only the
        values they name and leave the rest untouched.

        Raises:
            UnknownPresetError: For an unrecognised preset name
        """
        preset = PRESETS.get(name)
        if preset is None:
            raise UnknownPresetError(name, list(PRESETS))

        with self._lock:
            if not preset:
                self.model.reset_preferences()
            if "color_bias" in preset:
                self.model.set_color_bias(*preset["color_bias"])
            if "saturation" in preset:
                self.model.set_saturation_preference(preset["saturation"])
            if "lightness" in preset:
                self.model.set_lightness_preference(preset["lightness"])

        logger.info(f"Applied preference preset '{name}'")

    def reset_preferences(self) -> None:
        with self._lock:
            self.model.reset_preferences()

    def reset(self) -> None:
        with self._lock:
            self.model.reset()
        logger.info("Learning engine reset")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self.model.to_dict()

    def save_to_json(self) -> str:
        """Serialize the model to the JSON snapshot string."""
        with self._lock:
            return json.dumps(self.model.to_dict())

    def load_from_json(self, data: str) -> bool:
        """
        Replace the model from a JSON snapshot string.

        Malformed fields fall back to defaults one by one. Text that is not a
        JSON object resets the model completely; no exception reaches the
        caller.

        Returns:
            True if the snapshot was loaded, False if the model was reset
        """
        with self._lock:
            try:
                parsed = json.loads(data)
                if not isinstance(parsed, dict):
                    raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
                model = PreferenceModel.from_dict(parsed)
            except (TypeError, ValueError, OverflowError) as e:
                logger.error(f"Error loading learning data: {e}")
                self.model.reset()
                return False

            self.model = model
            return True

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @property
    def total_samples(self) -> int:
        with self._lock:
            return self.model.total_samples

    @property
    def liked_colors_count(self) -> int:
        with self._lock:
            return self.model.liked_colors_count

    @property
    def disliked_colors_count(self) -> int:
        with self._lock:
            return self.model.disliked_colors_count

    @property
    def confidence_score(self) -> float:
        with self._lock:
            return self.model.confidence_score

    def get_stats(self) -> Dict[str, Any]:
        """Summary of what the engine has learned."""
        with self._lock:
            model = self.model
            return {
                "total_samples": model.total_samples,
                "liked_colors": model.liked_colors_count,
                "disliked_colors": model.disliked_colors_count,
                "confidence": model.confidence_score,
                "saturation_preference": model.saturation_preference,
                "lightness_preference": model.lightness_preference,
                "color_bias": model.color_bias.to_dict(),
                "hue_preferences": list(model.hue_preferences),
            }
