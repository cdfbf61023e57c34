"""ZeroMQ transport: one ROUTER socket to receive, one DEALER per peer to
send. Peer addresses come from a :class:`sensorlink.peers.PeerDirectory`.
"""

from .transport import ZmqTransport
