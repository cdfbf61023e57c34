""" The directory of known peers: their display names, and where a network
    transport can reach them.
"""

import threading

from . import config
from .errors import UnknownSourcePeer


class Peer:

    def __init__(self, node_id, display_name=None, address=None, port=None):

        if display_name is None:
            display_name = node_id

        if port is not None:
            port = int(port)

        self.node_id = node_id
        self.display_name = display_name
        self.address = address
        self.port = port


    def __repr__(self):
        return 'Peer(%r, %r, %r, %r)' % (self.node_id, self.display_name, self.address, self.port)


# end of class Peer



class PeerDirectory:
    """ A thread-safe mapping of node id to :class:`Peer`. Transports update
        it as peers come and go; the aggregation store consults it for
        display names.
    """

    def __init__(self, peers=()):

        self._peers = dict()
        self._lock = threading.Lock()

        for peer in peers:
            self.add(peer)


    def __contains__(self, node_id):
        return node_id in self._peers


    def __iter__(self):
        return iter(tuple(self._peers.values()))


    def __len__(self):
        return len(self._peers)


    def add(self, peer):

        self._lock.acquire()
        self._peers[peer.node_id] = peer
        self._lock.release()


    def remove(self, node_id):

        self._lock.acquire()
        try:
            del self._peers[node_id]
        except KeyError:
            pass
        finally:
            self._lock.release()


    def get(self, node_id):
        """ Return the :class:`Peer` for *node_id*; raise
            :class:`UnknownSourcePeer` if there is no such peer.
        """

        try:
            return self._peers[node_id]
        except KeyError:
            raise UnknownSourcePeer('unknown peer: ' + repr(node_id))


    def display_name(self, node_id):
        return self.get(node_id).display_name


    def node_ids(self):
        return tuple(self._peers.keys())


    def load(self, peers=None):
        """ Add the peers described by *peers*, a dictionary keyed by node id
            as returned by :func:`sensorlink.config.load_peers`; the default
            is to load the configured peers file.
        """

        if peers is None:
            peers = config.load_peers()

        for node_id, description in peers.items():
            name = description.get('name')
            address = description.get('address')
            port = description.get('port')
            self.add(Peer(node_id, name, address, port))


# end of class PeerDirectory


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
