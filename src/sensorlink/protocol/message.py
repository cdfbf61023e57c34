""" A class representation of a message as it arrives from, or is handed to,
    the transport.
"""

import time as timemodule

from . import paths


# This is the version of the on-the-wire framing implemented here; it is
# identified by a single byte, and is only checked by transports that put
# multiple parts on the wire.

version = b'1'


class Message:
    """ The :class:`Message` provides a very thin encapsulation of what it
        means to be a message: the *path* identifying the message type, the
        raw *data* payload as bytes, and the node id of the peer that sent
        it. The path is kept as received; :attr:`known_path` resolves it
        against the fixed vocabulary.

        :ivar timestamp: A UNIX epoch timestamp for the message arrival time.
    """

    def __init__(self, path, data=b'', source_node_id=None):

        if isinstance(path, paths.Path):
            path = path.value
        else:
            try:
                path = path.decode()
            except AttributeError:
                path = str(path)

        if data is None:
            data = b''
        else:
            try:
                data = data.encode()
            except AttributeError:
                data = bytes(data)

        self.path = path
        self.data = data
        self.source_node_id = source_node_id
        self.timestamp = timemodule.time()


    def __repr__(self):
        return 'Message(%r, %r, source=%r)' % (self.path, self.data, self.source_node_id)


    @property
    def known_path(self):
        """ The :class:`paths.Path` for this message, or None if the path
            is not part of the vocabulary. Only the exact wire value
            matches; member names such as 'SET_STATUS' are not paths.
        """

        try:
            return paths.Path(self.path)
        except ValueError:
            return None


# end of class Message



def source_node_id(message):
    """ Return the node id of the peer that sent *message*. """
    return message.source_node_id


def data_as_string(message):
    """ Return the payload of *message* decoded as UTF-8. Undecodable bytes
        are replaced rather than raising; any payload that matters is JSON,
        and a damaged JSON payload fails to parse further down the line.
    """

    return message.data.decode('utf-8', errors='replace')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
