"""
DOM submodule - Selector synthesis over document snapshots.
"""

from tour_automation.dom.selector_engine import (
    SelectorEngine,
    SelectorStrategy,
    SelectorCandidate,
    SelectorValidation,
    parse_document,
)

__all__ = [
    "SelectorEngine",
    "SelectorStrategy",
    "SelectorCandidate",
    "SelectorValidation",
    "parse_document",
]
