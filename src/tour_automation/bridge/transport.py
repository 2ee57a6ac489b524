"""
Transports - the unreliable pipe under a content channel.

A transport moves wire dicts between the two sides of the boundary.
It promises FIFO delivery when the receiver is ready and nothing more:
no acknowledgement, no retry.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

Receiver = Callable[[Any], None]


class ITransport(ABC):
    """Abstract duplex message pipe."""

    @abstractmethod
    def post(self, message: Any) -> None:
        """Send a wire message to the other side. Never blocks."""
        ...

    @abstractmethod
    def set_receiver(self, receiver: Optional[Receiver]) -> None:
        """Install the callback that receives inbound wire messages."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Stop delivering in both directions."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        ...


class LoopbackTransport(ITransport):
    """
    In-process transport linking two endpoints on one event loop.

    Messages are copied through JSON so nothing is shared across the
    boundary, and delivered on a later loop iteration in post order.

    Example:
        >>> editor_side, surface_side = LoopbackTransport.pair()
    """

    def __init__(self, name: str = "loopback"):
        self.name = name
        self._peer: Optional["LoopbackTransport"] = None
        self._receiver: Optional[Receiver] = None
        self._closed = False

    @classmethod
    def pair(cls, names: Tuple[str, str] = ("controller", "content")) -> Tuple["LoopbackTransport", "LoopbackTransport"]:
        """Create two linked endpoints."""
        left, right = cls(names[0]), cls(names[1])
        left._peer = right
        right._peer = left
        return left, right

    @property
    def is_closed(self) -> bool:
        return self._closed

    def post(self, message: Any) -> None:
        if self._closed or self._peer is None:
            logger.debug(f"[{self.name}] Dropping message on closed transport")
            return
        payload = json.dumps(message)
        loop = asyncio.get_running_loop()
        loop.call_soon(self._peer._deliver, payload)

    def set_receiver(self, receiver: Optional[Receiver]) -> None:
        self._receiver = receiver

    def close(self) -> None:
        self._closed = True
        self._receiver = None

    def _deliver(self, payload: str) -> None:
        if self._closed or self._receiver is None:
            # Surface not ready yet; the sender is not told
            logger.debug(f"[{self.name}] No receiver, message dropped")
            return
        self._receiver(json.loads(payload))
