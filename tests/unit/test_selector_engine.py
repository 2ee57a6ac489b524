"""
Tests for selector synthesis, validation and suggestions.
"""

import pytest

from tour_automation.dom import SelectorEngine, SelectorStrategy, parse_document
from tour_automation.dom.selector_engine import quote_attribute_value
from tour_automation.exceptions import NoUniqueSelector

from conftest import FLASHCARDS_HTML, TWIN_SECTIONS_HTML


@pytest.fixture
def document():
    return parse_document(FLASHCARDS_HTML)


@pytest.fixture
def engine():
    return SelectorEngine()


class TestSynthesize:
    """Test the ordered strategy chain."""

    def test_prefers_id(self, engine, document):
        """An element with an id is identified by it."""
        element = document.select_one("#startBtn")
        assert engine.synthesize(element) == "#startBtn"

    def test_data_attribute_before_classes(self, engine, document):
        """A unique data attribute wins over the shared class."""
        element = document.select('.mode-btn')[0]
        assert engine.synthesize(element) == '[data-mode="review"]'

    def test_unique_class(self, engine, document):
        """A class that appears once is enough."""
        element = document.select_one("button.submit-btn")
        assert engine.synthesize(element) == ".submit-btn"

    def test_ancestor_path_for_repeated_siblings(self, engine, document):
        """Repeated siblings get a positional path anchored at an id."""
        element = document.select("li.option")[1]
        selector = engine.synthesize(element)

        assert selector == "#app > ul.options > li.option:nth-child(2)"
        assert document.select(selector) == [element]

    def test_synthesized_selector_matches_only_the_element(self, engine, document):
        """Every synthesized selector resolves back to its element."""
        for element in document.select("#app *"):
            selector = engine.synthesize(element)
            assert document.select(selector) == [element], selector

    def test_transient_classes_ignored(self, engine):
        """Editor-injected and interaction-state classes never appear."""
        document = parse_document(
            '<body><p class="tour-highlight hint is-active">a</p><p class="other">b</p></body>'
        )
        element = document.select_one("p.hint")
        assert engine.synthesize(element) == ".hint"

    def test_no_unique_selector_carries_best_effort(self):
        """When even the path is ambiguous, the path is offered as best effort."""
        engine = SelectorEngine(max_depth=1)
        document = parse_document(TWIN_SECTIONS_HTML)
        element = document.select("span")[1]

        with pytest.raises(NoUniqueSelector) as exc_info:
            engine.synthesize(element)

        best = exc_info.value.best_effort
        assert best.selector == "span"
        assert best.match_count == 2
        assert best.strategy is SelectorStrategy.ANCESTOR_PATH

    def test_deeper_path_disambiguates_twins(self, engine):
        """With enough depth the sibling position separates the twins."""
        document = parse_document(TWIN_SECTIONS_HTML)
        element = document.select("span")[1]
        assert engine.synthesize(element) == "section:nth-child(2) > span"


class TestBuildPath:
    """Test ancestor path construction."""

    def test_stops_at_id(self, engine, document):
        element = document.select("div.card")[0]
        assert engine.build_path(element) == "#app > div.deck > div.card:nth-child(1)"

    def test_depth_limit(self, document):
        engine = SelectorEngine(max_depth=2)
        element = document.select("li.option")[2]
        assert engine.build_path(element) == "ul.options > li.option:nth-child(3)"

    def test_at_most_two_classes(self, engine):
        document = parse_document('<body><div class="a b c d">x</div></body>')
        assert engine.build_path(document.select_one("div")) == "div.a.b"

    def test_position_counts_all_element_siblings(self, engine):
        """nth-child is the position among all siblings, not just same-tag ones."""
        document = parse_document("<body><main><h1>t</h1><p>a</p><p>b</p></main></body>")
        element = document.select("p")[1]
        selector = engine.build_path(element)

        assert selector == "main > p:nth-child(3)"
        assert document.select(selector) == [element]

    def test_body_itself(self, engine):
        document = parse_document("<html><body><p>x</p></body></html>")
        assert engine.build_path(document.body) == "body"


class TestValidate:
    """Test selector validation."""

    def test_unique(self, engine, document):
        result = engine.validate("#startBtn", document)
        assert result.valid is True
        assert result.match_count == 1
        assert result.element is document.select_one("#startBtn")

    def test_ambiguous(self, engine, document):
        result = engine.validate(".card", document)
        assert result.valid is False
        assert result.match_count == 2
        assert result.element is None

    def test_missing(self, engine, document):
        result = engine.validate("#nope", document)
        assert result.valid is False
        assert result.match_count == 0

    def test_malformed_is_reported_not_raised(self, engine, document):
        result = engine.validate("div[", document)
        assert result.valid is False
        assert result.error

    def test_empty(self, engine, document):
        result = engine.validate("  ", document)
        assert result.valid is False
        assert result.error == "Empty selector"


class TestSuggestAlternatives:
    """Test alternative selector suggestions."""

    def test_ordered_by_priority_with_path_last(self, engine, document):
        element = document.select_one("#startBtn")
        suggestions = engine.suggest_alternatives(element)
        selectors = [s.selector for s in suggestions]

        assert suggestions[0].strategy is SelectorStrategy.IDENTITY
        assert ".btn" in selectors
        assert ".primary" in selectors
        assert suggestions[-1].strategy is SelectorStrategy.ANCESTOR_PATH
        priorities = [s.priority for s in suggestions]
        assert priorities == sorted(priorities)

    def test_non_unique_classes_left_out(self, engine, document):
        element = document.select("li.option")[0]
        suggestions = engine.suggest_alternatives(element)

        assert [s.strategy for s in suggestions] == [SelectorStrategy.ANCESTOR_PATH]

    def test_any_data_attribute_is_offered(self, engine):
        document = parse_document('<body><a data-testid="go">x</a><a>y</a></body>')
        suggestions = engine.suggest_alternatives(document.select_one("a"))
        assert suggestions[0].selector == '[data-testid="go"]'

    def test_candidate_to_dict(self, engine, document):
        suggestion = engine.suggest_alternatives(document.select_one("#startBtn"))[0]
        assert suggestion.to_dict() == {
            "selector": "#startBtn",
            "type": "identity",
            "priority": 1,
            "matchCount": 1,
        }


class TestHelpers:
    """Test module-level helpers."""

    def test_quote_attribute_value(self):
        assert quote_attribute_value("review") == '"review"'
        assert quote_attribute_value('say "hi"') == '"say \\"hi\\""'

    def test_from_settings(self, settings):
        engine = SelectorEngine.from_settings(settings.recorder)
        assert engine.max_depth == settings.recorder.max_path_depth
        assert engine.data_attributes[0] == "data-module"
