"""Transport interface.

This is the (small) contract that transport implementations follow. It
lives outside :mod:`sensorlink.protocol` so the protocol remains
transport-agnostic.

Delivery is at-most-once; messages may be reordered or lost. Nothing above
this layer retries.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from ..errors import (
    TransportError,
    TransportPortError,
    TransportSendFailure,
)
from ..protocol.message import Message


logger = logging.getLogger(__name__)

Receiver = Callable[[Message], None]


class Transport(ABC):
    """Minimal contract for a message transport between peers.

    Inbound messages are handed to :attr:`receiver`, on a thread owned by
    the transport.
    """

    def __init__(self, local_node_id: str, receiver: Optional[Receiver] = None):
        self.local_node_id = local_node_id
        self.receiver = receiver

    @abstractmethod
    def open(self) -> None:
        """Start sending and receiving."""

    @abstractmethod
    def close(self) -> None:
        """Stop sending and receiving; release any resources."""

    @abstractmethod
    def send(self, path: str, payload: bytes, target: str) -> None:
        """Hand *payload* to the transport for delivery to *target*.

        Raises :class:`TransportSendFailure` if the message cannot be handed
        off; a successful return does not imply delivery.
        """

    @abstractmethod
    def peers(self) -> Tuple[str, ...]:
        """The node ids a broadcast is sent to."""

    @property
    def is_open(self) -> bool:
        return False

    def send_broadcast(self, path: str, payload: bytes) -> Dict[str, Exception]:
        """Send to every peer. Returns a dictionary of node id to exception
        for each peer the message could not be sent to.
        """

        errors: Dict[str, Exception] = {}

        for target in self.peers():
            try:
                self.send(path, payload, target)
            except TransportError as e:
                errors[target] = e

        return errors

    def deliver(self, message: Message) -> None:
        """Hand an inbound *message* to the receiver, if any."""

        receiver = self.receiver
        if receiver is None:
            return

        try:
            receiver(message)
        except Exception:
            logger.warning("receiver failed on %r", message, exc_info=True)
