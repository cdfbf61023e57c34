"""In-process transport.

An :class:`Exchange` connects any number of :class:`LocalTransport`
instances within one process. Messages are delivered on the exchange's own
delivery thread, the same way a network transport delivers on its receive
thread. Peers can be marked unreachable, and messages can be dropped, to
exercise the failure modes of a real transport.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Dict, Optional, Tuple

from ..errors import TransportSendFailure
from ..protocol.message import Message
from .base import Receiver, Transport


logger = logging.getLogger(__name__)


class Exchange:
    """Route messages between the :class:`LocalTransport` instances attached
    to it.

    :ivar drop: Optional predicate; a message for which it returns True is
        silently discarded after being accepted for delivery.
    """

    def __init__(self):
        self._nodes: Dict[str, LocalTransport] = {}
        self._unreachable = set()
        self._lock = threading.Lock()
        self.drop: Optional[Callable[[Message, str], bool]] = None

        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread = threading.Thread(target=self.run, name="sensorlink:exchange")
        self._thread.daemon = True
        self._thread.start()

    def attach(self, transport: LocalTransport) -> None:
        with self._lock:
            self._nodes[transport.local_node_id] = transport

    def detach(self, transport: LocalTransport) -> None:
        with self._lock:
            if self._nodes.get(transport.local_node_id) is transport:
                del self._nodes[transport.local_node_id]

    def nodes(self) -> Tuple[str, ...]:
        return tuple(self._nodes.keys())

    def set_reachable(self, node_id: str, reachable: bool) -> None:
        with self._lock:
            if reachable:
                self._unreachable.discard(node_id)
            else:
                self._unreachable.add(node_id)

    def is_reachable(self, node_id: str) -> bool:
        return node_id in self._nodes and node_id not in self._unreachable

    def submit(self, message: Message, target: str) -> None:
        if self.is_reachable(target):
            pass
        else:
            raise TransportSendFailure(f"{target!r} is not reachable", target)

        self._queue.put((message, target))

    def flush(self, timeout: Optional[float] = 5) -> bool:
        """Block until everything submitted before this call was delivered."""

        done = threading.Event()
        self._queue.put(done)
        return done.wait(timeout)

    def run(self) -> None:
        while True:
            dequeued = self._queue.get()

            if isinstance(dequeued, threading.Event):
                dequeued.set()
                continue

            message, target = dequeued

            drop = self.drop
            if drop is not None and drop(message, target):
                logger.debug("dropping %r for %r", message, target)
                continue

            transport = self._nodes.get(target)
            if transport is None or transport.is_open == False:
                continue

            transport.deliver(message)


class LocalTransport(Transport):
    """A :class:`Transport` attached to an :class:`Exchange`."""

    def __init__(self, exchange: Exchange, local_node_id: str, receiver: Optional[Receiver] = None):
        Transport.__init__(self, local_node_id, receiver)
        self.exchange = exchange
        self._open = False

    def open(self) -> None:
        self.exchange.attach(self)
        self._open = True

    def close(self) -> None:
        self._open = False
        self.exchange.detach(self)

    @property
    def is_open(self) -> bool:
        return self._open

    def peers(self) -> Tuple[str, ...]:
        return tuple(node for node in self.exchange.nodes() if node != self.local_node_id)

    def send(self, path: str, payload: bytes, target: str) -> None:
        if self._open:
            pass
        else:
            raise TransportSendFailure("transport is closed", target)

        message = Message(path, payload, self.local_node_id)
        self.exchange.submit(message, target)
