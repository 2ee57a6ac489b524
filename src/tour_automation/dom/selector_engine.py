"""
Selector Engine - Synthesize, validate and suggest CSS selectors.

Works on a BeautifulSoup snapshot of the content surface's document.
A selector is only accepted when it matches exactly one element, so
each strategy reports its match count and the first unique candidate
wins. Strategies are tried in order of robustness against markup churn:

1. Identity (``#id``)
2. Domain data attributes (``[data-module="flashcards"]``)
3. Class combinations, ignoring transient state classes
4. Ancestor path (``div.deck > ul > li:nth-child(3)``)

Example:
    >>> document = parse_document(html)
    >>> engine = SelectorEngine()
    >>> engine.synthesize(document.select_one("button.start"))
    'button.start'
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, TYPE_CHECKING

import soupsieve as sv
from bs4 import BeautifulSoup, Tag

from tour_automation.exceptions import NoUniqueSelector

if TYPE_CHECKING:
    from tour_automation.config.settings import RecorderSettings

logger = logging.getLogger(__name__)

# Elements the ancestor walk never climbs past
ROOT_CONTAINERS = ("body", "html")


class SelectorStrategy(Enum):
    """Strategies for generating selectors, in priority order."""
    IDENTITY = "identity"
    DATA_ATTRIBUTE = "data-attribute"
    CLASS_COMBINATION = "class-combination"
    ANCESTOR_PATH = "ancestor-path"

    @property
    def priority(self) -> int:
        return list(SelectorStrategy).index(self) + 1


@dataclass(frozen=True)
class SelectorCandidate:
    """
    A selector produced by one strategy.

    Attributes:
        selector: The CSS selector
        strategy: Strategy that produced it
        match_count: Elements it matches in the current document
    """
    selector: str
    strategy: SelectorStrategy
    match_count: int

    @property
    def is_unique(self) -> bool:
        return self.match_count == 1

    @property
    def priority(self) -> int:
        return self.strategy.priority

    def to_dict(self) -> dict:
        return {
            "selector": self.selector,
            "type": self.strategy.value,
            "priority": self.priority,
            "matchCount": self.match_count,
        }


@dataclass
class SelectorValidation:
    """Result of checking a selector against a document."""
    valid: bool
    match_count: int
    element: Optional[Tag] = None
    error: Optional[str] = None


def parse_document(html: str) -> BeautifulSoup:
    """Parse an HTML snapshot."""
    return BeautifulSoup(html, "html.parser")


def quote_attribute_value(value: str) -> str:
    """Quote a string for use inside an attribute selector."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")
    return f'"{escaped}"'


def document_of(element: Tag) -> Tag:
    """Return the document (topmost ancestor) an element belongs to."""
    root = element
    while root.parent is not None:
        root = root.parent
    return root


class SelectorEngine:
    """
    Build selectors that uniquely identify an element.

    Each strategy is a candidate generator yielding ``SelectorCandidate``
    values with their match counts; ``synthesize`` takes the first
    unique one across the ordered chain.
    """

    DEFAULT_DATA_ATTRIBUTES = ("data-module", "data-mode", "data-step", "data-card")

    def __init__(
        self,
        data_attributes: Optional[Sequence[str]] = None,
        max_depth: int = 5,
        transient_prefixes: Sequence[str] = ("tour-",),
        transient_markers: Sequence[str] = ("active", "hover"),
    ):
        """
        Initialize the engine.

        Args:
            data_attributes: Data attributes to try, highest priority first
            max_depth: Maximum number of segments in an ancestor path
            transient_prefixes: Class prefixes that denote editor-injected state
            transient_markers: Class substrings that denote interaction state
        """
        self.data_attributes = tuple(data_attributes or self.DEFAULT_DATA_ATTRIBUTES)
        self.max_depth = max_depth
        self.transient_prefixes = tuple(transient_prefixes)
        self.transient_markers = tuple(transient_markers)
        self._strategies: List[Callable[[Tag, Tag], Iterator[SelectorCandidate]]] = [
            self._identity_candidates,
            self._data_attribute_candidates,
            self._class_candidates,
            self._ancestor_path_candidates,
        ]

    @classmethod
    def from_settings(cls, settings: "RecorderSettings") -> "SelectorEngine":
        return cls(
            data_attributes=settings.data_attributes,
            max_depth=settings.max_path_depth,
            transient_prefixes=settings.transient_class_prefixes,
            transient_markers=settings.transient_class_markers,
        )

    # ==================== Public API ====================

    def synthesize(self, element: Tag) -> str:
        """
        Compute a selector matching exactly this element.

        Args:
            element: Element inside a parsed document

        Returns:
            The first unique selector in strategy order

        Raises:
            NoUniqueSelector: If no strategy disambiguates the element.
                The exception carries the best-effort ancestor path.
        """
        best_effort: Optional[SelectorCandidate] = None
        for candidate in self.candidates(element):
            if candidate.is_unique:
                logger.debug(f"Synthesized {candidate.selector!r} via {candidate.strategy.value}")
                return candidate.selector
            if candidate.strategy is SelectorStrategy.ANCESTOR_PATH:
                best_effort = candidate

        raise NoUniqueSelector(
            f"No unique selector for <{element.name}>",
            best_effort=best_effort,
        )

    def candidates(self, element: Tag) -> Iterator[SelectorCandidate]:
        """Yield every candidate of every strategy, in chain order."""
        document = document_of(element)
        for strategy in self._strategies:
            yield from strategy(element, document)

    def validate(self, selector: str, document: Tag) -> SelectorValidation:
        """
        Check that a selector matches exactly one element.

        Malformed selectors are reported, not raised.

        Args:
            selector: CSS selector to check
            document: Parsed document to check against

        Returns:
            Validation result with match count and the matched element
        """
        if not selector or not selector.strip():
            return SelectorValidation(valid=False, match_count=0, error="Empty selector")
        try:
            matches = document.select(selector)
        except sv.SelectorSyntaxError as e:
            return SelectorValidation(valid=False, match_count=0, error=str(e))

        return SelectorValidation(
            valid=len(matches) == 1,
            match_count=len(matches),
            element=matches[0] if len(matches) == 1 else None,
        )

    def suggest_alternatives(self, element: Tag) -> List[SelectorCandidate]:
        """
        List selector options an author can pick from.

        Unique identity, data-attribute and single-class selectors are
        listed by priority; the ancestor path always comes last, unique
        or not, so it can be edited by hand.
        """
        document = document_of(element)
        suggestions: List[SelectorCandidate] = []

        ident = self._identity(element)
        if ident:
            selector = "#" + sv.escape(ident)
            suggestions.append(SelectorCandidate(
                selector, SelectorStrategy.IDENTITY, self._count(document, selector),
            ))

        for name in self._data_attribute_names(element):
            selector = f"[{name}={quote_attribute_value(str(element[name]))}]"
            count = self._count(document, selector)
            if count == 1:
                suggestions.append(SelectorCandidate(selector, SelectorStrategy.DATA_ATTRIBUTE, count))

        for cls in self.significant_classes(element):
            selector = "." + sv.escape(cls)
            count = self._count(document, selector)
            if count == 1:
                suggestions.append(SelectorCandidate(selector, SelectorStrategy.CLASS_COMBINATION, count))

        suggestions.sort(key=lambda c: c.priority)
        suggestions.extend(self._ancestor_path_candidates(element, document))
        return suggestions

    def build_path(self, element: Tag) -> str:
        """
        Build an ancestor path selector for an element.

        Walks up toward ``<body>``, at most ``max_depth`` levels, stopping
        early at an ancestor with an id.
        """
        segments: List[str] = []
        current: Optional[Tag] = element

        while (
            isinstance(current, Tag)
            and current.name not in ROOT_CONTAINERS
            and not isinstance(current, BeautifulSoup)
            and len(segments) < self.max_depth
        ):
            ident = self._identity(current)
            if ident:
                segments.insert(0, "#" + sv.escape(ident))
                break

            segment = current.name
            classes = [sv.escape(c) for c in self.significant_classes(current)[:2]]
            if classes:
                segment += "." + ".".join(classes)

            parent = current.parent
            if parent is not None:
                siblings = [child for child in parent.children if isinstance(child, Tag)]
                same_tag = [child for child in siblings if child.name == current.name]
                if len(same_tag) > 1:
                    position = next(i for i, child in enumerate(siblings) if child is current) + 1
                    segment += f":nth-child({position})"

            segments.insert(0, segment)
            current = parent

        if not segments:
            return element.name
        return " > ".join(segments)

    def significant_classes(self, element: Tag) -> List[str]:
        """Element classes minus transient state classes."""
        classes = element.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        return [c for c in classes if c and not self._is_transient(c)]

    # ==================== Strategies ====================

    def _identity_candidates(self, element: Tag, document: Tag) -> Iterator[SelectorCandidate]:
        ident = self._identity(element)
        if ident:
            selector = "#" + sv.escape(ident)
            yield SelectorCandidate(selector, SelectorStrategy.IDENTITY, self._count(document, selector))

    def _data_attribute_candidates(self, element: Tag, document: Tag) -> Iterator[SelectorCandidate]:
        for name in self.data_attributes:
            if element.has_attr(name):
                selector = f"[{name}={quote_attribute_value(str(element[name]))}]"
                yield SelectorCandidate(
                    selector, SelectorStrategy.DATA_ATTRIBUTE, self._count(document, selector),
                )

    def _class_candidates(self, element: Tag, document: Tag) -> Iterator[SelectorCandidate]:
        classes = [sv.escape(c) for c in self.significant_classes(element)]
        if not classes:
            return

        tag = element.name
        combinations = [
            "." + ".".join(classes),
            tag + "." + ".".join(classes),
            tag + "." + classes[0],
            "." + classes[0],
        ]
        seen = set()
        for selector in combinations:
            if selector in seen:
                continue
            seen.add(selector)
            yield SelectorCandidate(
                selector, SelectorStrategy.CLASS_COMBINATION, self._count(document, selector),
            )

    def _ancestor_path_candidates(self, element: Tag, document: Tag) -> Iterator[SelectorCandidate]:
        selector = self.build_path(element)
        yield SelectorCandidate(selector, SelectorStrategy.ANCESTOR_PATH, self._count(document, selector))

    # ==================== Helpers ====================

    def _data_attribute_names(self, element: Tag) -> List[str]:
        """Data attributes on the element, priority-list ones first."""
        present = [name for name in element.attrs if name.startswith("data-")]
        ranked = [name for name in self.data_attributes if name in present]
        return ranked + [name for name in present if name not in ranked]

    def _is_transient(self, cls: str) -> bool:
        return (
            any(cls.startswith(prefix) for prefix in self.transient_prefixes)
            or any(marker in cls for marker in self.transient_markers)
        )

    @staticmethod
    def _identity(element: Tag) -> Optional[str]:
        ident = element.get("id")
        if isinstance(ident, str) and ident.strip():
            return ident
        return None

    @staticmethod
    def _count(document: Tag, selector: str) -> int:
        try:
            return len(document.select(selector))
        except sv.SelectorSyntaxError as e:
            logger.debug(f"Unparseable candidate {selector!r}: {e}")
            return 0
