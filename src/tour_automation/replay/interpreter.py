"""
Replay Interpreter - run an action sequence against the content surface.

Replay is best-effort: a step whose target is missing, ambiguous, or
whose interaction throws is recorded as failed and the next step still
runs. Every step is followed by its ``delay_ms`` pause, failed or not.

Only one ``performAction`` command is outstanding at a time; the next
step is issued after the previous one's outcome arrives or its recovery
timeout expires.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from tour_automation.bridge.channel import ContentChannel
from tour_automation.bridge.messages import ChannelMessage, Command, Event
from tour_automation.recorder.actions import Action, ActionKind, ActionSequence

logger = logging.getLogger(__name__)


@dataclass
class ActionOutcome:
    """
    Outcome of one replayed action.

    Attributes:
        index: Position of the action in the sequence
        action: The action that ran
        success: Whether it completed
        error: Failure reason
        match_count: Elements the target matched on the content side
        timed_out: No outcome arrived before the recovery timeout
        duration_ms: Time until the outcome, excluding the delay
    """
    index: int
    action: Action
    success: bool
    error: Optional[str] = None
    match_count: int = 0
    timed_out: bool = False
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "action": self.action.to_dict(),
            "success": self.success,
            "error": self.error,
            "matchCount": self.match_count,
            "timedOut": self.timed_out,
            "durationMs": round(self.duration_ms, 1),
        }


@dataclass
class ReplayReport:
    """Per-action outcomes of one replay."""
    outcomes: List[ActionOutcome] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def failed(self) -> List[ActionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "durationMs": round(self.duration_ms, 1),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


class ReplayInterpreter:
    """
    Execute actions in list order over the content channel.

    Example:
        >>> interpreter = ReplayInterpreter(channel)
        >>> report = await interpreter.execute(actions)
        >>> for outcome in report.failed:
        ...     print(outcome.index, outcome.error)
    """

    def __init__(
        self,
        channel: ContentChannel,
        step_timeout_ms: int = 5000,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        owner: Any = None,
    ):
        """
        Initialize the interpreter.

        Args:
            channel: Controller side of the content channel
            step_timeout_ms: How long to wait for a step's outcome
            sleep: Coroutine used for delays (seconds); asyncio.sleep by default
            owner: Owner tag for the outcome listener (defaults to the interpreter)
        """
        self._channel = channel
        self._step_timeout_ms = step_timeout_ms
        self._sleep = sleep or asyncio.sleep
        self._owner = owner if owner is not None else self
        self._pending: Dict[str, asyncio.Future] = {}

    async def execute(
        self,
        sequence: ActionSequence,
        on_outcome: Optional[Callable[[ActionOutcome], None]] = None,
    ) -> ReplayReport:
        """
        Replay a sequence.

        Args:
            sequence: Actions in replay order
            on_outcome: Optional callback invoked after each step

        Returns:
            Report with one outcome per action
        """
        report = ReplayReport()
        started = time.monotonic()
        subscription = self._channel.on_event(Event.ACTION_PERFORMED, self._handle_outcome, owner=self._owner)

        try:
            for index, action in enumerate(sequence):
                if action.kind is ActionKind.WAIT:
                    outcome = ActionOutcome(index=index, action=action, success=True)
                else:
                    outcome = await self._perform(index, action)
                    if not outcome.success:
                        logger.warning(f"Step {index + 1} ({action.kind.value} {action.target}) failed: {outcome.error}")

                report.outcomes.append(outcome)
                if on_outcome is not None:
                    on_outcome(outcome)

                await self._sleep(action.delay_ms / 1000)
        finally:
            subscription.revoke()
            for future in self._pending.values():
                future.cancel()
            self._pending.clear()

        report.duration_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"Replayed {len(report.outcomes)} action(s), {len(report.failed)} failed "
            f"in {report.duration_ms:.0f}ms"
        )
        return report

    async def _perform(self, index: int, action: Action) -> ActionOutcome:
        request_id = uuid.uuid4().hex
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        started = time.monotonic()

        self._channel.send(Command.PERFORM_ACTION, {
            "requestId": request_id,
            "index": index,
            "action": action.to_dict(),
        })

        try:
            data = await asyncio.wait_for(future, timeout=self._step_timeout_ms / 1000)
        except asyncio.TimeoutError:
            return ActionOutcome(
                index=index,
                action=action,
                success=False,
                error=f"No response within {self._step_timeout_ms}ms",
                timed_out=True,
                duration_ms=(time.monotonic() - started) * 1000,
            )
        finally:
            self._pending.pop(request_id, None)

        return ActionOutcome(
            index=index,
            action=action,
            success=bool(data.get("success")),
            error=data.get("error"),
            match_count=int(data.get("matchCount") or 0),
            duration_ms=(time.monotonic() - started) * 1000,
        )

    def _handle_outcome(self, message: ChannelMessage) -> None:
        data = message.data
        if not isinstance(data, dict):
            return
        future = self._pending.get(data.get("requestId"))
        if future is not None and not future.done():
            future.set_result(data)
