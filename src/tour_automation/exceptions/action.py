"""
Errors about recorded actions and the recording lifecycle.
"""

from tour_automation.exceptions.base import TourAutomationError


class ActionError(TourAutomationError):
    """An action, or the session producing actions, is unusable."""
    pass


class InvalidActionShape(ActionError):
    """
    An imported action record cannot be parsed.

    ``path`` locates the record, e.g. ``flashcards.review[2].preAction[0]``.
    """

    def __init__(self, message: str, path: str = "", value: object = None):
        super().__init__(message, {"path": path})
        self.path = path
        self.value = value

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class RecordingStateError(ActionError):
    """``start`` was called while a recording is already running."""

    def __init__(self, message: str, state: str):
        super().__init__(message, {"state": state})
        self.state = state
