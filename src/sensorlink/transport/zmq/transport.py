"""ZeroMQ transport.

Inbound messages arrive on a ROUTER socket, which listens on every interface
on the first available port in the configured range, unless a fixed port is
requested. Outbound messages go through one DEALER socket per peer, connected
as soon as the peer is known. Messages to a peer whose connection is still
coming up are queued by ZeroMQ, up to the high water mark; once that queue
is full a send fails immediately instead of blocking.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional, Set, Tuple

import zmq

from ... import config
from ...errors import TransportPortError, TransportSendFailure, UnknownSourcePeer
from ..base import Receiver, Transport
from .framing import from_frames, to_frames


logger = logging.getLogger(__name__)

minimum_port = config.defaults["minimum_port"]
maximum_port = config.defaults["maximum_port"]
zmq_context = zmq.Context.instance()


class _Connection:
    """A DEALER socket connected to a single peer."""

    def __init__(self, address: str, port: int, identity: str, high_water_mark: int):
        self.address = address
        self.port = port

        self.socket = zmq_context.socket(zmq.DEALER)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.setsockopt(zmq.SNDHWM, high_water_mark)
        self.socket.identity = identity.encode()
        self.socket.connect(f"tcp://{address}:{port}")

        # The lock around the ZeroMQ socket is necessary in a multithreaded
        # application; otherwise, if two different threads both invoke
        # send_multipart(), the message parts can and will get mixed together.

        self.lock = threading.Lock()

    def send(self, frames: Tuple[bytes, ...]) -> None:
        with self.lock:
            self.socket.send_multipart(frames, flags=zmq.NOBLOCK)

    def close(self) -> None:
        with self.lock:
            self.socket.close()


class ZmqTransport(Transport):
    """A :class:`Transport` over ZeroMQ TCP sockets.

    The *directory* is a :class:`sensorlink.peers.PeerDirectory`; a peer
    must have an address and port to be sent to.
    """

    high_water_mark = 100

    def __init__(
        self,
        local_node_id: str,
        directory,
        port: Optional[int] = None,
        address: str = "*",
        avoid: Optional[Set[int]] = None,
        minimum: int = minimum_port,
        maximum: int = maximum_port,
        receiver: Optional[Receiver] = None,
    ):
        Transport.__init__(self, local_node_id, receiver)

        self.directory = directory
        self.address = address
        self.port = int(port) if port is not None else None
        self.avoid = set(avoid or ())
        self.minimum = int(minimum)
        self.maximum = int(maximum)

        self.socket = None
        self.shutdown = False
        self.thread: Optional[threading.Thread] = None

        self._connections: Dict[Tuple[str, int], _Connection] = {}
        self._connections_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self.thread is not None and self.shutdown == False

    def open(self) -> None:
        if self.is_open:
            return

        self.socket = zmq_context.socket(zmq.ROUTER)
        self.socket.setsockopt(zmq.LINGER, 0)

        if self.port is None:
            self.port = self._bind_any()
        else:
            try:
                self.socket.bind(f"tcp://{self.address}:{self.port}")
            except zmq.ZMQError as exc:
                self.socket.close()
                raise TransportPortError(f"port already in use: {self.port}") from exc

        logger.info("%s listening on port %d", self.local_node_id, self.port)

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name="sensorlink:zmq")
        self.thread.daemon = True
        self.thread.start()

        self.connect_all()

    def _bind_any(self) -> int:
        for port in range(self.minimum, self.maximum + 1):
            if port in self.avoid:
                continue
            try:
                self.socket.bind(f"tcp://{self.address}:{port}")
            except zmq.ZMQError:
                # Assume this port is in use.
                continue
            return port

        self.socket.close()
        raise TransportPortError(f"no ports available in range {self.minimum}:{self.maximum}")

    def close(self) -> None:
        if self.thread is None:
            return

        self.shutdown = True
        self.thread.join(2)
        self.thread = None

        with self._connections_lock:
            connections = list(self._connections.values())
            self._connections.clear()

        for connection in connections:
            connection.close()

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        while self.shutdown == False:
            for active, _flag in poller.poll(250):
                if active == self.socket:
                    parts = self.socket.recv_multipart()
                    self._incoming(parts)

        # The ROUTER socket is only ever touched from this thread.
        self.socket.close()
        self.socket = None

    def _incoming(self, parts) -> None:
        try:
            message = from_frames(parts)
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug("dropping undecodable message: %s", e)
            return

        self.deliver(message)

    def peers(self) -> Tuple[str, ...]:
        return tuple(node for node in self.directory.node_ids() if node != self.local_node_id)

    def connect_all(self) -> None:
        """Connect ahead of time to every peer in the directory with a known
        address, so the first message to each one is not held up.
        """

        for peer in self.directory:
            if peer.node_id == self.local_node_id:
                continue
            if peer.address is None or peer.port is None:
                continue
            self._connection(peer.address, peer.port)

    def _connection(self, address: str, port: int) -> _Connection:
        key = (address, port)

        with self._connections_lock:
            connection = self._connections.get(key)
            if connection is None:
                identity = f"{self.local_node_id}.{id(self)}"
                connection = _Connection(address, port, identity, self.high_water_mark)
                self._connections[key] = connection

        return connection

    def send(self, path: str, payload: bytes, target: str) -> None:
        if self.is_open:
            pass
        else:
            raise TransportSendFailure("transport is closed", target)

        try:
            peer = self.directory.get(target)
        except UnknownSourcePeer as exc:
            raise TransportSendFailure(str(exc), target) from exc

        if peer.address is None or peer.port is None:
            raise TransportSendFailure(f"no address known for {target!r}", target)

        frames = to_frames(path, self.local_node_id, payload)
        connection = self._connection(peer.address, peer.port)

        try:
            connection.send(frames)
        except zmq.ZMQError as exc:
            raise TransportSendFailure(f"unable to send to {target!r}: {exc}", target) from exc
