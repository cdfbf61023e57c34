""" Python implementation of sensorlink: streaming sensor data between a
    hub device and any number of paired, intermittently reachable remote
    devices. This includes the request lifecycle on the hub, routing of
    messages by path, aggregation of incoming data per peer and sensor,
    and the remote side that answers requests.
"""

# Utility components.

from . import json
from . import callbacks
from . import poll
from . import errors

# Submodules used by multiple other components.

from . import config
from . import data
from . import protocol
from . import transport

# Primary public-facing interfaces.

from .aggregate import AggregationStore, Card
from .hub import Hub
from .peers import Peer, PeerDirectory
from .remote import Remote
from .request import RequestManager

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
