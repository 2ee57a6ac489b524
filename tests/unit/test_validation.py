"""
Tests for tour configuration validation and strict action import.
"""

import pytest

from tour_automation.exceptions import InvalidActionShape
from tour_automation.recorder.validation import (
    ValidationReport,
    load_actions,
    validate_action,
    validate_tour_config,
)


@pytest.fixture
def tour_config():
    return {
        "_comment": "Guided tours for the flashcards app",
        "flashcards": {
            "review": [
                {
                    "title": "Pick a mode",
                    "description": "Review shows every card.",
                    "position": "bottom",
                    "preAction": {"type": "click", "target": '[data-mode="review"]'},
                },
                {
                    "title": "Flip",
                    "description": "Click to flip.",
                    "preAction": [
                        {"type": "click", "target": "#startBtn", "delay": 500},
                        {"type": "wait", "delay": 200},
                    ],
                },
            ],
        },
        "intro": [
            {"title": "Welcome", "description": "Hello", "position": "top"},
        ],
    }


class TestValidateTourConfig:
    """Test whole-config validation."""

    def test_valid_config(self, tour_config):
        report = validate_tour_config(tour_config)
        assert report.valid
        assert report.errors == []
        assert report.warnings == []

    def test_not_an_object(self):
        report = validate_tour_config(["nope"])
        assert not report.valid

    def test_phase_must_be_array(self):
        report = validate_tour_config({"flashcards": {"review": {"title": "x"}}})
        assert report.errors == ["flashcards.review should be an array"]

    def test_invalid_position(self):
        report = validate_tour_config({"intro": [{"title": "t", "description": "d", "position": "middle"}]})
        assert report.errors == ['intro[0]: Invalid position "middle"']

    def test_missing_title_and_description_warn(self):
        report = validate_tour_config({"intro": [{}]})
        assert report.valid
        assert report.warnings == ["intro[0]: Step has no title", "intro[0]: Step has no description"]

    def test_action_errors_have_paths(self, tour_config):
        tour_config["flashcards"]["review"][1]["preAction"][0] = {"type": "click"}
        tour_config["flashcards"]["review"][1]["preAction"][1] = {"type": "custom", "target": "#x"}

        report = validate_tour_config(tour_config)

        assert "flashcards.review[1].preAction[0]: Action requires target selector" in report.errors
        assert 'flashcards.review[1].preAction[1]: Invalid action type "custom"' in report.errors

    def test_comment_keys_skipped(self):
        report = validate_tour_config({"_notes": "free text", "_todo": 3})
        assert report.valid


class TestValidateAction:
    """Test single-action validation."""

    def test_wait_needs_no_target(self):
        report = ValidationReport()
        validate_action({"type": "wait", "delay": 100}, "a", report)
        assert report.valid

    def test_blank_target(self):
        report = ValidationReport()
        validate_action({"type": "scroll", "target": "  "}, "a", report)
        assert report.errors == ["a: Action requires target selector"]

    def test_input_without_value_warns(self):
        report = ValidationReport()
        validate_action({"type": "input", "target": "#answerInput"}, "a", report)
        assert report.valid
        assert report.warnings == ["a: Input action has no value"]

    @pytest.mark.parametrize("delay", [-5, "x", 1.5, float("nan"), True])
    def test_bad_delay_reported_at_path(self, delay):
        report = ValidationReport()
        validate_action({"type": "click", "target": "#startBtn", "delay": delay}, "intro[0].preAction", report)
        assert len(report.errors) == 1
        assert report.errors[0].startswith("intro[0].preAction: ")

    def test_bad_delay_rejected_by_both_boundaries(self):
        record = {"type": "click", "target": "#startBtn", "delay": -5}
        report = validate_tour_config({"intro": [{"title": "t", "description": "d", "preAction": record}]})
        assert not report.valid
        with pytest.raises(InvalidActionShape):
            load_actions(record)


class TestLoadActions:
    """Test strict import of stored actions."""

    def test_single_object(self):
        actions = load_actions({"type": "click", "target": "#startBtn"})
        assert len(actions) == 1

    def test_missing_target_rejected_with_index(self):
        with pytest.raises(InvalidActionShape) as exc_info:
            load_actions([{"type": "wait"}, {"type": "click"}], path="actions.json")
        assert exc_info.value.path == "actions.json[1]"

    def test_unknown_type_rejected(self):
        with pytest.raises(InvalidActionShape):
            load_actions([{"type": "custom", "target": "#x"}])
