"""
ChromaSense Preference Model
Tracks liked/disliked colors, a 36-bucket hue-weight histogram and
saturation/lightness/RGB-bias preferences learned from palette feedback.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chromasense.services.colors.conversion import hex_to_rgb, is_valid_hex, rgb_to_hsl

logger = logging.getLogger(__name__)

HUE_BUCKETS = 36
HUE_BUCKET_DEGREES = 10.0

NEUTRAL_HUE_WEIGHT = 1.0
HUE_WEIGHT_MIN = 0.1
HUE_WEIGHT_MAX = 2.0
HUE_WEIGHT_STEP = 0.1

DEFAULT_PREFERENCE = 0.5
PREFERENCE_MIN = 0.1
PREFERENCE_MAX = 0.9

# Blend weight of each new observation in the moving averages
LEARNING_RATE = 0.1

# Samples needed before sample-count confidence saturates
CONFIDENCE_SAMPLES = 50


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _is_number(value: Any) -> bool:
    # json.loads accepts NaN and Infinity
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def hue_bucket(hue: float) -> int:
    """Index of the 10° bucket containing ``hue`` (degrees)."""
    return int(hue // HUE_BUCKET_DEGREES) % HUE_BUCKETS


@dataclass
class ColorBias:
    """Preferred share of each RGB channel, each in [0.1, 0.9]."""
    r: float = DEFAULT_PREFERENCE
    g: float = DEFAULT_PREFERENCE
    b: float = DEFAULT_PREFERENCE

    def to_dict(self) -> Dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b}

    @classmethod
    def from_dict(cls, data: Any) -> Optional['ColorBias']:
        """Parse a bias mapping, or None if any channel is missing or not numeric."""
        if not isinstance(data, dict):
            return None
        channels = [data.get(key) for key in ("r", "g", "b")]
        if not all(_is_number(value) for value in channels):
            return None
        return cls(*(clamp(float(value), PREFERENCE_MIN, PREFERENCE_MAX) for value in channels))


def _default_hue_preferences() -> List[float]:
    return [NEUTRAL_HUE_WEIGHT] * HUE_BUCKETS


@dataclass
class PreferenceModel:
    """
    Learned color preferences for one session.

    The model is plain data plus update rules; it knows nothing about where its
    snapshot is stored. Callers own one instance and must not share it across
    concurrent writers without a lock (``ColorLearningEngine`` provides one).
    """
    liked_colors: List[str] = field(default_factory=list)
    disliked_colors: List[str] = field(default_factory=list)
    color_frequency: Dict[str, int] = field(default_factory=dict)
    hue_preferences: List[float] = field(default_factory=_default_hue_preferences)
    saturation_preference: float = DEFAULT_PREFERENCE
    lightness_preference: float = DEFAULT_PREFERENCE
    color_bias: ColorBias = field(default_factory=ColorBias)

    def learn_from_palette(self, palette: List[str], sentiment: float) -> None:
        """
        Update preferences from a liked (+1) or disliked (-1) palette.

        For each color the hue bucket weight moves by ``0.1 * sentiment`` and
        saturation, lightness and RGB bias follow
        ``pref = 0.9 * pref + 0.1 * sentiment * value``. The signed sentiment
        multiplies the raw value, so a dislike pulls the preference toward
        zero rather than away from the disliked value; the clamp to
        [0.1, 0.9] bounds the result.
        """
        keep = 1 - LEARNING_RATE

        for color in palette:
            r, g, b = hex_to_rgb(color)
            h, s, l = rgb_to_hsl(r, g, b)

            bucket = hue_bucket(h)
            self.hue_preferences[bucket] = clamp(
                self.hue_preferences[bucket] + sentiment * HUE_WEIGHT_STEP,
                HUE_WEIGHT_MIN, HUE_WEIGHT_MAX
            )

            self.saturation_preference = clamp(
                keep * self.saturation_preference + LEARNING_RATE * sentiment * s,
                PREFERENCE_MIN, PREFERENCE_MAX
            )
            self.lightness_preference = clamp(
                keep * self.lightness_preference + LEARNING_RATE * sentiment * l,
                PREFERENCE_MIN, PREFERENCE_MAX
            )

            bias = self.color_bias
            bias.r = clamp(keep * bias.r + LEARNING_RATE * sentiment * (r / 255), PREFERENCE_MIN, PREFERENCE_MAX)
            bias.g = clamp(keep * bias.g + LEARNING_RATE * sentiment * (g / 255), PREFERENCE_MIN, PREFERENCE_MAX)
            bias.b = clamp(keep * bias.b + LEARNING_RATE * sentiment * (b / 255), PREFERENCE_MIN, PREFERENCE_MAX)

            target = self.liked_colors if sentiment > 0 else self.disliked_colors
            if color not in target:
                target.append(color)

            key = f"{r},{g},{b}"
            self.color_frequency[key] = self.color_frequency.get(key, 0) + 1

    def set_color_bias(self, r: float, g: float, b: float) -> None:
        self.color_bias = ColorBias(
            clamp(r, PREFERENCE_MIN, PREFERENCE_MAX),
            clamp(g, PREFERENCE_MIN, PREFERENCE_MAX),
            clamp(b, PREFERENCE_MIN, PREFERENCE_MAX),
        )

    def set_saturation_preference(self, value: float) -> None:
        self.saturation_preference = clamp(value, PREFERENCE_MIN, PREFERENCE_MAX)

    def set_lightness_preference(self, value: float) -> None:
        self.lightness_preference = clamp(value, PREFERENCE_MIN, PREFERENCE_MAX)

    def reset_preferences(self) -> None:
        """Return hue weights, S/L preferences and bias to neutral; keep color history."""
        self.hue_preferences = _default_hue_preferences()
        self.saturation_preference = DEFAULT_PREFERENCE
        self.lightness_preference = DEFAULT_PREFERENCE
        self.color_bias = ColorBias()

    def reset(self) -> None:
        """Forget everything."""
        self.liked_colors = []
        self.disliked_colors = []
        self.color_frequency = {}
        self.reset_preferences()

    @property
    def total_samples(self) -> int:
        return len(self.liked_colors) + len(self.disliked_colors)

    @property
    def liked_colors_count(self) -> int:
        return len(self.liked_colors)

    @property
    def disliked_colors_count(self) -> int:
        return len(self.disliked_colors)

    @property
    def confidence_score(self) -> float:
        """
        How settled the learned preferences are, in [0, 1].

        Sample confidence ``min(1, n / 50)`` scaled by
        ``0.5 + 0.5 * mean(|weight - 1|)`` over the hue buckets.
        """
        total = self.total_samples
        if total == 0:
            return 0.0

        sample_confidence = min(1.0, total / CONFIDENCE_SAMPLES)
        preference_strength = sum(
            abs(weight - NEUTRAL_HUE_WEIGHT) for weight in self.hue_preferences
        ) / len(self.hue_preferences)

        return sample_confidence * (0.5 + preference_strength * 0.5)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON snapshot layout."""
        return {
            "likedColors": list(self.liked_colors),
            "dislikedColors": list(self.disliked_colors),
            "colorFrequency": dict(self.color_frequency),
            "huePreferences": list(self.hue_preferences),
            "saturationPreference": self.saturation_preference,
            "lightnessPreference": self.lightness_preference,
            "colorBias": self.color_bias.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PreferenceModel':
        """
        Create from a snapshot dictionary.

        Each field falls back to its default independently when missing or
        malformed; a warning names the fields that were dropped.
        """
        model = cls()
        rejected = []

        for key, attr in (("likedColors", "liked_colors"), ("dislikedColors", "disliked_colors")):
            value = data.get(key)
            if isinstance(value, list):
                colors = []
                for color in value:
                    if isinstance(color, str) and is_valid_hex(color) and color not in colors:
                        colors.append(color)
                setattr(model, attr, colors)
            elif value is not None:
                rejected.append(key)

        frequency = data.get("colorFrequency")
        if isinstance(frequency, dict) and all(
            isinstance(k, str) and _is_number(v) for k, v in frequency.items()
        ):
            model.color_frequency = {k: int(v) for k, v in frequency.items()}
        elif frequency is not None:
            rejected.append("colorFrequency")

        hues = data.get("huePreferences")
        if isinstance(hues, list) and len(hues) == HUE_BUCKETS and all(_is_number(w) for w in hues):
            model.hue_preferences = [clamp(float(w), HUE_WEIGHT_MIN, HUE_WEIGHT_MAX) for w in hues]
        elif hues is not None:
            rejected.append("huePreferences")

        for key, attr in (
            ("saturationPreference", "saturation_preference"),
            ("lightnessPreference", "lightness_preference"),
        ):
            value = data.get(key)
            if _is_number(value):
                setattr(model, attr, clamp(float(value), PREFERENCE_MIN, PREFERENCE_MAX))
            elif value is not None:
                rejected.append(key)

        bias_data = data.get("colorBias")
        bias = ColorBias.from_dict(bias_data)
        if bias is not None:
            model.color_bias = bias
        elif bias_data is not None:
            rejected.append("colorBias")

        if rejected:
            logger.warning(f"Ignoring malformed snapshot fields: {', '.join(rejected)}")

        return model
