"""
Content Channel - message protocol between the editor and the content surface.

The content surface is an isolated rendering of the target application
that the editor cannot touch directly. Both sides hold a ContentChannel
over a linked transport and talk only by tagged messages.

Listener registrations are explicit: whoever registers a handler owns
revoking it. Registrations can be tagged with an owner so a session or
view can drop all of its listeners in one call.

Example:
    >>> controller_side, content_side = LoopbackTransport.pair()
    >>> channel = ContentChannel(controller_side)
    >>> sub = channel.on_event("actionRecorded", handle_action, owner=session)
    >>> channel.send("startRecording")
    >>> ...
    >>> sub.revoke()
"""

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Dict, Optional, Set, Union

from tour_automation.bridge.messages import PROTOCOL_TAG, ChannelMessage
from tour_automation.bridge.transport import ITransport
from tour_automation.exceptions import ChannelClosedError, ChannelProtocolMismatch

logger = logging.getLogger(__name__)

Handler = Callable[[ChannelMessage], Any]
Predicate = Union[str, Collection[str], Callable[[str], bool]]


def _compile_predicate(predicate: Predicate) -> Callable[[str], bool]:
    if isinstance(predicate, str):
        return lambda message_type: message_type == predicate
    if callable(predicate):
        return predicate
    names = frozenset(predicate)
    return lambda message_type: message_type in names


@dataclass(eq=False)
class Subscription:
    """
    A revocable listener registration.

    Attributes:
        id: Registration number, unique per channel
        owner: Optional owner tag used for bulk revocation
    """
    id: int
    matches: Callable[[str], bool]
    handler: Handler
    owner: Any = None
    _channel: Optional["ContentChannel"] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._channel is not None and self.id in self._channel._subscriptions

    def revoke(self) -> bool:
        """Remove this registration. Safe to call more than once."""
        if self._channel is None:
            return False
        return self._channel.revoke(self)


class ContentChannel:
    """
    One side of the duplex channel.

    Sending is fire-and-forget. Inbound messages without this protocol's
    source tag are dropped without logging an error; tagged messages are
    dispatched, in arrival order, to every registration whose predicate
    accepts the message type.
    """

    def __init__(self, transport: ITransport, protocol_tag: str = PROTOCOL_TAG):
        """
        Initialize the channel.

        Args:
            transport: The pipe to the other side
            protocol_tag: Source tag identifying this protocol
        """
        self.protocol_tag = protocol_tag
        self._transport = transport
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False
        transport.set_receiver(self._receive)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def send(self, message_type: str, data: Any = None) -> None:
        """
        Send a command or event to the other side.

        Args:
            message_type: Command or event name
            data: JSON-compatible payload
        """
        if self._closed:
            raise ChannelClosedError(f"Cannot send {message_type!r} on a closed channel")
        message = ChannelMessage(type=message_type, data=data, source=self.protocol_tag)
        logger.debug(f"-> {message_type}")
        self._transport.post(message.to_dict())

    def on_event(self, predicate: Predicate, handler: Handler, owner: Any = None) -> Subscription:
        """
        Register a handler for inbound messages.

        Args:
            predicate: A message type, a collection of types, or a callable
                taking the type and returning True to accept it
            handler: Called with each accepted ChannelMessage. May be async.
            owner: Optional tag for ``revoke_owner``

        Returns:
            The registration, which the caller must revoke
        """
        if self._closed:
            raise ChannelClosedError("Cannot register a listener on a closed channel")
        subscription = Subscription(
            id=next(self._ids),
            matches=_compile_predicate(predicate),
            handler=handler,
            owner=owner,
            _channel=self,
        )
        self._subscriptions[subscription.id] = subscription
        return subscription

    def revoke(self, subscription: Subscription) -> bool:
        """
        Revoke one registration.

        Returns:
            True if it was active, False if already revoked
        """
        return self._subscriptions.pop(subscription.id, None) is not None

    def revoke_owner(self, owner: Any) -> int:
        """
        Revoke every registration tagged with ``owner``.

        Returns:
            Number of registrations removed
        """
        doomed = [sid for sid, sub in self._subscriptions.items() if sub.owner is owner]
        for sid in doomed:
            del self._subscriptions[sid]
        if doomed:
            logger.debug(f"Revoked {len(doomed)} listener(s) for {owner!r}")
        return len(doomed)

    def listener_count(self, owner: Any = None) -> int:
        """Count active registrations, optionally for one owner."""
        if owner is None:
            return len(self._subscriptions)
        return sum(1 for sub in self._subscriptions.values() if sub.owner is owner)

    def close(self) -> None:
        """Revoke all registrations and close the transport."""
        if self._closed:
            return
        self._closed = True
        self._subscriptions.clear()
        self._transport.set_receiver(None)
        self._transport.close()

    def _receive(self, raw: Any) -> None:
        try:
            message = ChannelMessage.from_wire(raw, self.protocol_tag)
        except ChannelProtocolMismatch:
            return

        logger.debug(f"<- {message.type}")
        # Snapshot so handlers may revoke themselves or others while dispatching
        for subscription in list(self._subscriptions.values()):
            if subscription.id not in self._subscriptions:
                continue
            if not subscription.matches(message.type):
                continue
            try:
                result = subscription.handler(message)
            except Exception as e:
                logger.warning(f"Handler error for {message.type!r}: {e}", exc_info=True)
                continue
            if inspect.isawaitable(result):
                self._track(result, message.type)

    def _track(self, awaitable: Any, message_type: str) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if not t.cancelled() and t.exception() is not None:
                logger.warning(f"Async handler error for {message_type!r}: {t.exception()}")

        task.add_done_callback(_done)
