""" Aggregation of incoming sensor data, one :class:`Card` per combination
    of peer and sensor. A card only exists while its data is wanted, that
    is, while an active request covers its sensor on its peer.

    The state of a given key moves from absent, to active (a card exists and
    its request is active), to stale (the request was replaced or stopped),
    and back to absent. A card becomes stale purely through request changes;
    it only goes away through :func:`AggregationStore.evict_unwanted`.
"""

import logging

from .callbacks import Callbacks
from .data.batch import CAPACITY_UNLIMITED, DataBatch
from .errors import UnknownSourcePeer


logger = logging.getLogger(__name__)


def make_key(peer_id, source):
    """ Return the key for the card holding data from *source* on *peer_id*.
        The peer id is length-prefixed, so no combination of peer id and
        source can collide with another.
    """

    peer_id = str(peer_id)
    return '%d:%s:%s' % (len(peer_id), peer_id, source)


class Card:
    """ The aggregated state for one peer/sensor combination: a *heading*
        (the sensor name), a *sub_heading* (the peer's display name), and
        the accumulated :class:`sensorlink.data.DataBatch`.
    """

    def __init__(self, key, peer_id, heading, sub_heading):

        self.key = key
        self.peer_id = peer_id
        self.heading = heading
        self.sub_heading = sub_heading
        self.batch = None


    def __repr__(self):
        return 'Card(%r, %r, %r)' % (self.heading, self.sub_heading, self.batch)


    @property
    def source(self):
        if self.batch is None:
            return self.heading
        return self.batch.source


    def copy(self):
        """ Return a copy of this card that shares no state with it. """

        card = Card(self.key, self.peer_id, self.heading, self.sub_heading)

        if self.batch is not None:
            card.batch = DataBatch(self.batch.source, self.batch.data, capacity=CAPACITY_UNLIMITED)

        return card


# end of class Card



class AggregationStore:
    """ Own the mapping of card key to :class:`Card`. Whether a batch is
        wanted is decided by the *requests* argument, a
        :class:`sensorlink.request.RequestManager`; display names for new
        cards come from *peers*, a :class:`sensorlink.peers.PeerDirectory`.

        Consumers register for changes through three :class:`Callbacks`
        attributes: :attr:`created` and :attr:`invalidated` are invoked with
        the key of a card that was created or whose content changed;
        :attr:`removed` is invoked with the key of an evicted card.

        Like the request manager, an instance is confined to one owning
        thread.
    """

    def __init__(self, requests, peers):

        self.requests = requests
        self.peers = peers
        self._cards = dict()

        self.created = Callbacks('card created')
        self.invalidated = Callbacks('card invalidated')
        self.removed = Callbacks('card removed')


    def __contains__(self, key):
        return key in self._cards


    def __len__(self):
        return len(self._cards)


    def __repr__(self):
        return 'AggregationStore: ' + repr(self._cards)


    def get(self, key):
        return self._cards.get(key)


    def keys(self):
        return tuple(self._cards.keys())


    def cards(self):
        return list(self._cards.values())


    def is_sensor_wanted(self, peer_id, source):
        """ Return True if data from *source* on *peer_id* is covered by an
            active request.
        """

        return self.requests.is_active(peer_id, source)


    def ingest(self, batch, peer_id):
        """ Merge *batch*, received from *peer_id*, into the card for its
            peer and sensor, creating the card if necessary. Batches that are
            no longer wanted are discarded; so are batches from a peer with no
            known display name, if a new card would be required.

            Returns the updated :class:`Card`, or None if the batch was
            discarded.
        """

        try:
            return self._ingest(batch, peer_id)
        except UnknownSourcePeer as e:
            logger.warning('unable to aggregate %s data: %s', batch.source, e)
            return None


    def _ingest(self, batch, peer_id):

        source = batch.source

        # Don't aggregate if the data isn't requested anymore. This happens
        # when a request has been replaced, but the peer already sent data
        # under the old request.

        if self.is_sensor_wanted(peer_id, source):
            pass
        else:
            logger.debug('discarding stale %s batch from %r (%d readings)', source, peer_id, len(batch))
            return None

        key = make_key(peer_id, source)

        try:
            card = self._cards[key]
        except KeyError:
            display_name = self.peers.display_name(peer_id)
            card = Card(key, peer_id, source, display_name)
            self._cards[key] = card
            logger.debug('created card %r for %s on %r', key, source, peer_id)
            self.created.propagate(key)

        # The card keeps its own copy; the incoming batch is handed on to
        # data change callbacks and must not alias store state.

        if card.batch is None:
            card.batch = DataBatch(source, batch.data, capacity=CAPACITY_UNLIMITED)
        else:
            card.batch.extend(batch.data)

        self.invalidated.propagate(key)
        return card


    def evict_unwanted(self):
        """ Remove every card whose peer and sensor are no longer covered by
            an active request. Returns the keys of the removed cards.
        """

        removable = list()

        for key, card in self._cards.items():
            if self.is_sensor_wanted(card.peer_id, card.source):
                continue
            removable.append(key)

        for key in removable:
            card = self._cards.pop(key)
            logger.debug('removing unneeded card %r (%s on %s)', key, card.heading, card.sub_heading)
            self.removed.propagate(key)

        return removable


# end of class AggregationStore


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
