"""ZMQ multipart framing for sensorlink messages.

DEALER -> ROUTER
    version, path, source_node_id, payload

The ROUTER side sees the sender's identity frame prepended to these.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from ...protocol.message import Message, version


def to_frames(path: str, source_node_id: str, payload: bytes) -> Tuple[bytes, ...]:
    """Encode an outbound message to multipart frames."""

    if payload is None:
        payload = b""

    try:
        payload = payload.encode()
    except AttributeError:
        pass

    path = getattr(path, "value", path)

    return (version, str(path).encode(), source_node_id.encode(), bytes(payload))


def from_frames(parts: Sequence[bytes]) -> Message:
    """Decode ROUTER parts, with or without the identity prefix, into a
    :class:`Message`. Raises :class:`ValueError` for anything that is not
    a sensorlink message of the expected version.
    """

    if len(parts) == 5:
        parts = parts[1:]

    if len(parts) != 4:
        raise ValueError(f"expected 4 message parts, received {len(parts)}")

    their_version, path, source, payload = parts

    if their_version != version:
        raise ValueError(f"message is framing version {their_version!r}, recipient expects {version!r}")

    return Message(path.decode(), payload, source.decode())
