"""Transport layer implementations: the in-process exchange here, and the
network transport in :mod:`sensorlink.transport.zmq`.
"""

from ..errors import (
    TransportError,
    TransportPortError,
    TransportSendFailure,
)

from .base import Transport
from .local import Exchange, LocalTransport
