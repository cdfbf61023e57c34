""" The transport-agnostic messaging protocol shared by hub and remote
    peers: the path vocabulary, the message envelope, message handlers,
    and the dispatcher that routes inbound messages to handlers.

    Dependencies only flow downward: the protocol layer never imports a
    transport implementation.
"""

from . import paths
from . import message
from . import handler
from . import dispatch

from .paths import Path
from .message import Message, data_as_string, source_node_id
from .handler import MessageHandler, SinglePathMessageHandler
from .dispatch import Dispatcher

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
