""" Exceptions raised within sensorlink. None of these escape to the caller
    of a hub or remote from a callback path; they are raised where a failure
    occurs and caught at the boundary of the peer or message being handled.
"""


class SensorLinkError(Exception):
    """ Base class for all sensorlink errors. """


class TransportError(SensorLinkError):
    """ Base class for all transport-layer errors. """


class TransportSendFailure(TransportError):
    """ A message could not be handed to the transport for a specific peer.
        The *target* attribute identifies the peer.
    """

    def __init__(self, message, target=None):
        SensorLinkError.__init__(self, message)
        self.target = target


class TransportPortError(TransportError):
    """ No suitable port could be bound. """


class MalformedResponse(SensorLinkError):
    """ An inbound payload could not be decoded. The message is dropped. """


class UnknownSourcePeer(SensorLinkError):
    """ A peer identifier could not be resolved to a known peer. """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
