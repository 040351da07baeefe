"""
Tests for the palette session orchestrator

Covers generation and history, palette editing, import/export, feedback and
persistence of the session through a state store.
"""

import json
import random

import pytest

from chromasense.exceptions import (
    ExportFormatError, HistoryIndexError, ImportFormatError, PaletteIndexError,
    StorageError, UnknownModeError,
)
from chromasense.services.colors.conversion import is_valid_hex
from chromasense.services.orchestrator import PaletteOrchestrator, SessionState
from chromasense.services.personalization.engine import ColorLearningEngine
from chromasense.services.personalization.storage import InMemoryStateStore, StateStore


class FailingStore(StateStore):
    """Store whose writes always fail."""

    def load(self):
        return None

    def save(self, data):
        raise StorageError("disk full")

    def clear(self):
        pass


def new_session(store=None, seed=5):
    rng = random.Random(seed)
    session = PaletteOrchestrator(
        engine=ColorLearningEngine(rng=rng),
        store=store if store is not None else InMemoryStateStore(),
        palette_size=5,
        history_limit=5,
        rng=rng,
    )
    session.restore()
    return session


class TestRestore:

    def test_fresh_session_gets_random_palette(self, orchestrator):
        assert len(orchestrator.current_palette) == 5
        assert all(is_valid_hex(c) for c in orchestrator.current_palette)
        assert orchestrator.history == []

    def test_session_survives_restart(self):
        store = InMemoryStateStore()
        first = new_session(store)
        first.generate("analogous")
        first.feedback(liked=True)
        first.cycle_color_format()

        second = new_session(store, seed=99)
        assert second.current_palette == first.current_palette
        assert second.history == first.history
        assert second.state.color_format == "RGB"
        assert second.state.generation_mode == "analogous"
        assert second.engine.snapshot() == first.engine.snapshot()

    def test_corrupt_snapshot_starts_fresh(self):
        session = new_session(InMemoryStateStore("{broken"))
        assert len(session.current_palette) == 5
        assert session.engine.total_samples == 0

    def test_malformed_fields_are_dropped(self):
        document = {
            "currentPalette": ["#ff0000", "oops"],
            "paletteHistory": [["#111111"], "bad", []],
            "currentColorFormat": "CMYK",
            "generationMode": "triadic",
            "learningData": "not json",
        }
        session = new_session(InMemoryStateStore(json.dumps(document)))

        assert session.current_palette != ["#ff0000", "oops"]
        assert session.history == [["#111111"]]
        assert session.state.color_format == "HEX"
        assert session.state.generation_mode == "triadic"

    def test_non_finite_learning_data_is_dropped(self):
        document = {
            "currentPalette": ["#112233", "#445566"],
            "creativity": float("nan"),
            "learningData": '{"likedColors": ["#112233"], "colorFrequency": {"17,34,51": Infinity}}',
        }
        session = new_session(InMemoryStateStore(json.dumps(document)))

        assert session.current_palette == ["#112233", "#445566"]
        assert session.state.creativity == 0.5
        assert session.engine.liked_colors_count == 1
        assert session.engine.model.color_frequency == {}

    def test_session_state_roundtrip(self):
        state = SessionState(
            current_palette=["#ff0000"], history=[["#00ff00"]],
            generation_mode="ai", color_format="TW", creativity=0.8,
        )
        assert SessionState.from_dict(state.to_dict(), 5) == state


class TestGenerate:

    def test_generate_pushes_previous_palette_to_history(self, orchestrator):
        previous = orchestrator.current_palette
        result = orchestrator.generate("complementary")

        assert orchestrator.history[0] == previous
        assert orchestrator.current_palette == result.colors
        # Seeded modes keep the first color as seed
        assert result.colors[0] == previous[0]
        assert result.request_id.startswith("gen-")

    def test_history_is_capped(self, orchestrator):
        for _ in range(8):
            orchestrator.generate("random")
        assert len(orchestrator.history) == 5

    def test_ai_mode_reports_sources(self, orchestrator):
        result = orchestrator.generate("ai", creativity=0.3)
        assert len(result.colors) == 5
        assert len(result.sources) == 5
        assert orchestrator.state.creativity == 0.3

    def test_default_mode_is_session_mode(self, orchestrator):
        orchestrator.set_mode("monochromatic")
        assert orchestrator.generate().mode == "monochromatic"

    def test_unknown_mode(self, orchestrator):
        with pytest.raises(UnknownModeError):
            orchestrator.generate("sepia")
        with pytest.raises(UnknownModeError):
            orchestrator.set_mode("sepia")


class TestEditing:

    def test_update_color(self, orchestrator):
        palette = orchestrator.update_color(2, "#ABCDEF")
        assert palette[2] == "#abcdef"

    def test_update_color_out_of_range(self, orchestrator):
        with pytest.raises(PaletteIndexError):
            orchestrator.update_color(5, "#ffffff")

    def test_select_history(self, orchestrator):
        start = orchestrator.current_palette
        orchestrator.generate("random")
        second = orchestrator.current_palette
        orchestrator.generate("random")
        third = orchestrator.current_palette
        # history is now [second, start]

        selected = orchestrator.select_history(1)

        assert selected == start
        assert orchestrator.history == [third, second]

    def test_select_history_removes_duplicates(self, orchestrator):
        orchestrator.state.history = [["#111111"], ["#222222"], ["#111111"]]
        current = orchestrator.current_palette

        orchestrator.select_history(0)

        assert orchestrator.current_palette == ["#111111"]
        assert orchestrator.history == [current, ["#222222"]]

    def test_select_missing_history(self, orchestrator):
        with pytest.raises(HistoryIndexError):
            orchestrator.select_history(0)

    def test_import(self, orchestrator):
        previous = orchestrator.current_palette
        palette = orchestrator.import_colors("#f00 #0f0", "hex")

        assert palette == ["#ff0000", "#00ff00", "#00ff00", "#00ff00", "#00ff00"]
        assert orchestrator.history[0] == previous

    def test_failed_import_keeps_palette(self, orchestrator):
        previous = orchestrator.current_palette
        with pytest.raises(ImportFormatError):
            orchestrator.import_colors("body { margin: 0 }", "css")
        assert orchestrator.current_palette == previous
        assert orchestrator.history == []

    def test_export(self, orchestrator):
        orchestrator.import_colors("#ff0000", "hex")
        assert orchestrator.export("hex") == "\n".join(["#ff0000"] * 5)
        with pytest.raises(ExportFormatError):
            orchestrator.export("pdf")

    def test_display_values_follow_format(self, orchestrator):
        orchestrator.import_colors("#ff0000", "hex")
        assert orchestrator.cycle_color_format() == "RGB"
        assert orchestrator.display_values()[0] == "RGB(255, 0, 0)"


class TestFeedback:

    def test_like_current_palette(self, orchestrator):
        stats = orchestrator.feedback(liked=True)
        assert stats["liked_colors"] == len(set(orchestrator.current_palette))

    def test_like_and_dislike_shortcuts(self, orchestrator):
        orchestrator.import_colors("#ff0000 #00ff00", "hex")
        orchestrator.like()
        orchestrator.import_colors("#0000ff", "hex")
        stats = orchestrator.dislike()

        assert orchestrator.engine.model.liked_colors == ["#ff0000", "#00ff00"]
        assert stats["disliked_colors"] == 1

    def test_dislike_explicit_palette(self, orchestrator):
        stats = orchestrator.feedback(liked=False, palette=["#FF0000"])
        assert stats["disliked_colors"] == 1
        assert orchestrator.engine.model.disliked_colors == ["#ff0000"]

    def test_preferences_and_resets(self, orchestrator):
        stats = orchestrator.set_preferences(saturation=0.95, color_bias={"r": 0.2, "g": 0.4, "b": 0.6}, creativity=0.9)
        assert stats["saturation_preference"] == 0.9
        assert stats["color_bias"] == {"r": 0.2, "g": 0.4, "b": 0.6}
        assert orchestrator.state.creativity == 0.9

        orchestrator.feedback(liked=True)
        assert orchestrator.reset_preferences()["saturation_preference"] == 0.5
        assert orchestrator.reset_learning()["total_samples"] == 0

    def test_storage_failure_does_not_interrupt(self):
        session = new_session(FailingStore())
        assert session.persist() is False
        result = session.generate("random")
        assert len(result.colors) == 5
