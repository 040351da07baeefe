"""
Unit tests for the adaptive palette generator

Tests preference-driven generation, the similarity and dislike checks,
presets, training and JSON snapshot persistence.
"""

import json
import random
import threading

import pytest

from chromasense.exceptions import UnknownPresetError
from chromasense.services.colors.conversion import hex_to_hsl, hex_to_rgb, is_valid_hex, min_distance
from chromasense.services.personalization import HUE_BUCKETS, PreferenceModel
from chromasense.services.personalization.engine import (
    SOURCE_FALLBACK, SOURCE_HARMONY, SOURCE_PREFERRED, ColorLearningEngine,
)
from chromasense.utils.metrics import get_metrics


def make_engine(seed=42, **kwargs):
    return ColorLearningEngine(rng=random.Random(seed), **kwargs)


class TestGeneration:
    """Test palette generation from learned preferences."""

    def test_palette_has_requested_count(self):
        engine = make_engine()
        for count in (1, 3, 5, 9):
            palette = engine.generate_palette(count, 0.5)
            assert len(palette) == count
            assert all(is_valid_hex(color) for color in palette)

    def test_non_positive_count_is_empty(self):
        engine = make_engine()
        assert engine.generate_palette(0) == []
        assert engine.generate_palette(-3) == []

    def test_same_seed_same_palette(self):
        assert make_engine(7).generate_palette(5, 0.4) == make_engine(7).generate_palette(5, 0.4)

    def test_zero_creativity_reuses_liked_colors(self):
        engine = make_engine()
        liked = ["#123456", "#abcdef", "#fedcba"]
        engine.learn_from_palette(liked, 1)

        for _ in range(20):
            assert engine.generate_preferred_color(0.0) in liked

    def test_harmony_colors_respect_similarity_threshold(self):
        """Colors placed by a harmony shift are never near an earlier color."""
        engine = make_engine(3)
        for _ in range(30):
            result = engine.generate_palette_detailed(6, 0.6)
            assert len(result.sources) == len(result.colors) == 6
            assert result.sources[0] == SOURCE_PREFERRED
            for index, source in enumerate(result.sources):
                assert source in (SOURCE_PREFERRED, SOURCE_HARMONY, SOURCE_FALLBACK)
                if source == SOURCE_HARMONY:
                    assert min_distance(result.colors[index], result.colors[:index]) >= 30

    def test_creativity_is_clamped(self):
        engine = make_engine()
        assert len(engine.generate_palette(5, 7.5)) == 5
        assert len(engine.generate_palette(5, -2)) == 5

    def test_strong_hue_preference_dominates(self):
        """With one heavy bucket, sampled hues land mostly near it."""
        model = PreferenceModel()
        model.hue_preferences = [0.1] * HUE_BUCKETS
        model.hue_preferences[12] = 2.0
        engine = ColorLearningEngine(model=model, rng=random.Random(5))

        assert engine._select_hue_bucket() in range(HUE_BUCKETS)
        picks = [engine._select_hue_bucket() for _ in range(400)]
        assert picks.count(12) > 100

    def test_fresh_engine_zero_creativity(self, monkeypatch):
        """Without liked colors, creativity 0 samples hues inside the chosen bucket."""
        engine = make_engine(11)
        buckets = []
        select = engine._select_hue_bucket

        def recording_select():
            bucket = select()
            buckets.append(bucket)
            return bucket

        monkeypatch.setattr(engine, "_select_hue_bucket", recording_select)

        result = engine.generate_palette_detailed(5, 0)
        assert len(result.colors) == 5
        assert all(is_valid_hex(color) for color in result.colors)
        assert result.sources[0] == SOURCE_PREFERRED
        assert all(s in (SOURCE_PREFERRED, SOURCE_HARMONY, SOURCE_FALLBACK) for s in result.sources)

        sampled = [c for c, s in zip(result.colors, result.sources) if s != SOURCE_HARMONY]
        assert len(sampled) == len(buckets)
        for color, bucket in zip(sampled, buckets):
            hue, _, _ = hex_to_hsl(color)
            center = bucket * 10 + 5
            # No jitter at creativity 0; the neutral bias blend keeps hue up to rounding
            assert abs((hue - center + 180) % 360 - 180) <= 7

    def test_zero_creativity_applies_color_bias(self):
        engine = make_engine(4)
        engine.set_color_bias(0.9, 0.5, 0.1)

        reds, blues = [], []
        for _ in range(200):
            r, _, b = hex_to_rgb(engine.generate_preferred_color(0))
            reds.append(r)
            blues.append(b)
        assert sum(reds) / len(reds) > sum(blues) / len(blues)


class TestDislikes:
    """Test the dislike check and retry cap."""

    def test_is_disliked_uses_threshold(self):
        engine = make_engine()
        engine.learn_from_palette(["#808080"], -1)
        assert engine.is_disliked("#828282")
        assert not engine.is_disliked("#ffffff")

    def test_is_too_similar(self):
        engine = make_engine()
        assert engine.is_too_similar("#000000", ["#0a0a0a"])
        assert not engine.is_too_similar("#000000", ["#ffffff"])
        assert not engine.is_too_similar("#000000", [])

    def test_retry_cap_returns_last_candidate(self):
        """When every candidate is disliked the loop still terminates."""
        engine = make_engine(similarity_threshold=1000, max_dislike_retries=3)
        engine.model.disliked_colors = ["#808080"]

        color = engine.generate_preferred_color(0.5)

        assert is_valid_hex(color)
        assert get_metrics().get_counters()["dislike_retries_exhausted_total"] == 1

    def test_malformed_colors_do_not_raise(self):
        """A color without hex digits is learned as black."""
        engine = make_engine()
        engine.learn_from_palette(["#zzzzzz"], -1)

        assert engine.disliked_colors_count == 1
        assert engine.is_disliked("#000000")
        assert is_valid_hex(engine.generate_preferred_color(0.5))

    def test_disliked_colors_avoided_when_possible(self):
        engine = make_engine(11)
        disliked = ["#ff0000", "#00ff00", "#0000ff"]
        engine.model.disliked_colors = list(disliked)

        for _ in range(50):
            assert not engine.is_disliked(engine.generate_preferred_color(0.5))


class TestPreferences:

    def test_presets(self):
        engine = make_engine()
        engine.apply_preset("warm")
        assert engine.model.color_bias.to_dict() == {"r": 0.7, "g": 0.5, "b": 0.3}

        engine.apply_preset("pastel")
        assert engine.model.saturation_preference == 0.3
        assert engine.model.lightness_preference == 0.8
        # Presets only touch what they name
        assert engine.model.color_bias.r == 0.7

    def test_balanced_preset_resets(self):
        engine = make_engine()
        engine.apply_preset("dark")
        engine.apply_preset("balanced")
        assert engine.model.lightness_preference == 0.5
        assert engine.model.hue_preferences == [1.0] * HUE_BUCKETS

    def test_unknown_preset(self):
        with pytest.raises(UnknownPresetError) as exc_info:
            make_engine().apply_preset("neon")
        assert "warm" in exc_info.value.valid

    def test_bias_setter_clamps(self):
        engine = make_engine()
        engine.set_color_bias(0.0, 1.0, 0.5)
        assert engine.model.color_bias.to_dict() == {"r": 0.1, "g": 0.9, "b": 0.5}

    def test_train(self):
        engine = make_engine()
        summary = engine.train(6)
        assert summary["rounds"] == 6
        assert summary["liked"] + summary["disliked"] == 6
        assert engine.total_samples > 0

    def test_reset_preferences_keeps_samples(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000"], 1)
        engine.reset_preferences()
        assert engine.liked_colors_count == 1
        assert engine.model.saturation_preference == 0.5


class TestPersistence:
    """Test JSON snapshot save and load."""

    def test_save_load_roundtrip(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000", "#112233"], 1)
        engine.learn_from_palette(["#00ff00"], -1)
        data = engine.save_to_json()

        other = make_engine(99)
        assert other.load_from_json(data) is True
        assert other.snapshot() == engine.snapshot()
        assert other.save_to_json() == data

    def test_snapshot_uses_camel_case_keys(self):
        data = json.loads(make_engine().save_to_json())
        assert "huePreferences" in data
        assert len(data["huePreferences"]) == HUE_BUCKETS

    def test_unparsable_json_resets(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000"], 1)

        assert engine.load_from_json("{not json") is False
        assert engine.total_samples == 0
        assert engine.snapshot() == PreferenceModel().to_dict()

    def test_non_object_json_resets(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000"], 1)
        assert engine.load_from_json("[1, 2, 3]") is False
        assert engine.total_samples == 0

    def test_non_finite_numbers_fall_back_to_defaults(self):
        """json.loads accepts Infinity and NaN; such fields are dropped, the rest load."""
        engine = make_engine()
        data = (
            '{"likedColors": ["#ff0000"], "colorFrequency": {"255,0,0": Infinity},'
            ' "huePreferences": [NaN' + ', 1.0' * (HUE_BUCKETS - 1) + '],'
            ' "saturationPreference": -Infinity, "lightnessPreference": 0.7,'
            ' "colorBias": {"r": 0.6, "g": NaN, "b": 0.4}}'
        )

        assert engine.load_from_json(data) is True
        assert engine.liked_colors_count == 1
        assert engine.model.color_frequency == {}
        assert engine.model.hue_preferences == [1.0] * HUE_BUCKETS
        assert engine.model.saturation_preference == 0.5
        assert engine.model.lightness_preference == 0.7
        assert engine.model.color_bias.to_dict() == {"r": 0.5, "g": 0.5, "b": 0.5}
        assert "Infinity" not in engine.save_to_json()

    def test_counts_wait_for_the_engine_lock(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000"], 1)
        results = []

        def read_counts():
            results.append((engine.total_samples, engine.liked_colors_count, engine.disliked_colors_count))

        with engine._lock:
            reader = threading.Thread(target=read_counts)
            reader.start()
            reader.join(0.2)
            assert results == []

        reader.join()
        assert results == [(1, 1, 0)]

    def test_stats(self):
        engine = make_engine()
        engine.learn_from_palette(["#ff0000"], 1)
        stats = engine.get_stats()
        assert stats["total_samples"] == 1
        assert stats["liked_colors"] == 1
        assert stats["disliked_colors"] == 0
        assert 0 < stats["confidence"] <= 1
        assert len(stats["hue_preferences"]) == HUE_BUCKETS
