""" The hub side of the sensor streaming protocol. A :class:`Hub` requests
    sensor data from its peers, aggregates what comes back, and keeps the
    aggregated state consistent with the requests currently in effect.
"""

import logging

from . import config
from .aggregate import AggregationStore
from .callbacks import Callbacks
from .errors import UnknownSourcePeer
from .executor import Owner, Workers
from .peers import PeerDirectory
from .pipeline import ResponseHandler
from .protocol import message as protocol_message
from .protocol.dispatch import Dispatcher
from .protocol.handler import SinglePathMessageHandler
from .protocol.paths import Path
from .reachability import Checker, Reachability
from .request import RequestManager


logger = logging.getLogger(__name__)


class Hub:
    """ Coordinate sensor data requests with the peers reachable through
        *transport*, a :class:`sensorlink.transport.Transport`. Display
        names for peers come from *peers*, a
        :class:`sensorlink.peers.PeerDirectory`; *settings* default to
        :func:`sensorlink.config.load`.

        Request and aggregation state is confined to a single owner thread.
        The public methods here may be called from any thread; they hand
        their work to the owner and wait for it to complete.

        Consumers register callbacks on:

        :ivar data_changed: invoked with the peer id and the batch, for every
            batch accepted into the aggregation store.
        :ivar store: the :class:`AggregationStore`, whose ``created``,
            ``invalidated`` and ``removed`` callbacks report card changes.
        :ivar reachability: the :class:`Reachability` state, whose
            ``changed`` callbacks report peers coming and going.
    """

    def __init__(self, transport, peers=None, settings=None):

        if peers is None:
            peers = PeerDirectory()

        if settings is None:
            settings = config.load()

        self.transport = transport
        self.peers = peers
        self.settings = settings
        self.started = False

        self.owner = Owner('hub')
        self.workers = Workers(settings.worker_count, settings.handoff_timeout)

        self.requests = RequestManager()
        self.store = AggregationStore(self.requests, peers)
        self.dispatcher = Dispatcher()
        self.data_changed = Callbacks('data changed')

        self.reachability = Reachability()
        self.reachability.changed.register(self._reachability_changed)
        self.checker = Checker(self.reachability, self.request_status,
                               settings.reachability_period,
                               settings.reachability_timeout)

        self._statuses = dict()

        # Every message from a peer is proof that it is reachable. The seen
        # handler for responses is registered ahead of the response handler
        # so that it runs first.

        self.handlers = list()
        self.handlers.append(SinglePathMessageHandler(Path.SET_STATUS, self._status_received))
        self.handlers.append(SinglePathMessageHandler(Path.SENSOR_DATA_REQUEST_RESPONSE, self._seen))
        self.handlers.append(ResponseHandler(self._data_received, self.owner, self.workers))
        self.handlers.append(SinglePathMessageHandler(Path.CLOSING, self._closing_received))

        transport.receiver = self.dispatcher


    @property
    def local_node_id(self):
        return self.transport.local_node_id


    def start(self):
        """ Begin handling inbound messages, and (re-)send every tracked
            request, so that peers resume streaming anything still active.
        """

        if self.started:
            return

        if self.transport.is_open:
            pass
        else:
            self.transport.open()

        for handler in self.handlers:
            self.dispatcher.register(handler)

        self.started = True
        logger.info('hub %r started', self.local_node_id)

        self.owner.call(self.requests.send_all, self._send_request)

        if self.settings.reachability_period:
            self.checker.start()


    def stop(self):
        """ Stop every active request, letting each peer know, and tell all
            peers that this hub is going away. Handlers are unregistered;
            the hub can be started again later.
        """

        if self.started:
            pass
        else:
            return

        self.owner.call(self.requests.stop_all, self._send_request)

        # Let other devices know that this hub won't be reachable anymore.
        # This is best effort; nobody is waiting for it.

        label = str(self.settings.device_label)
        errors = self.transport.send_broadcast(Path.CLOSING, label.encode())
        for node_id, error in errors.items():
            logger.debug('closing notice not sent to %r: %s', node_id, error)

        self.checker.stop()

        for handler in self.handlers:
            self.dispatcher.unregister(handler)

        self.started = False
        logger.info('hub %r stopped', self.local_node_id)


    def close(self):
        """ Stop, and release the threads and transport owned by this hub.
            A closed hub cannot be restarted.
        """

        self.stop()
        self.workers.shutdown(wait=False)
        self.owner.shutdown()
        self.transport.close()


    def select_sensors(self, peer_id, sensors):
        """ Request data from *sensors* on *peer_id*, replacing whatever was
            previously requested from that peer. The request is sent to every
            tracked peer, and cards for data that is no longer wanted are
            removed immediately. Returns a copy of the new request.
        """

        sensors = list(sensors)
        return self.owner.call(self._select_sensors, peer_id, sensors)


    def _select_sensors(self, peer_id, sensors):

        names = ', '.join(str(sensor) for sensor in sensors)
        logger.debug('sensors selected for %r: %s', peer_id, names)

        request = self.requests.set_request(peer_id, sensors, self.local_node_id)
        self.requests.send_all(self._send_request)
        self.store.evict_unwanted()

        return request


    def stop_requesting(self):
        """ Stop every active request without shutting the hub down. Returns
            True if anything was stopped.
        """

        return self.owner.call(self.requests.stop_all, self._send_request)


    def _send_request(self, peer_id, payload):
        self.transport.send(Path.SENSOR_DATA_REQUEST, payload, peer_id)


    def request_status(self):
        """ Ask every peer for its status. Replies arrive asynchronously, and
            are available via :func:`status`.
        """

        logger.debug('sending a status update request')

        errors = self.transport.send_broadcast(Path.GET_STATUS, b'')
        for node_id, error in errors.items():
            logger.debug('status request not sent to %r: %s', node_id, error)


    def status(self, peer_id):
        """ Return the most recent status string received from *peer_id*,
            or None.
        """

        return self.owner.call(self._statuses.get, peer_id)


    def is_requesting(self, peer_id=None, sensor=None):
        """ With no arguments, return True if any request is active;
            otherwise see :func:`RequestManager.is_active`.
        """

        if peer_id is None:
            return self.owner.call(self.requests.is_requesting)

        return self.owner.call(self.requests.is_active, peer_id, sensor)


    def is_sensor_wanted(self, peer_id, source):
        return self.owner.call(self.store.is_sensor_wanted, peer_id, source)


    def evict_unwanted(self):
        return self.owner.call(self.store.evict_unwanted)


    def cards(self):
        """ Return copies of every card currently held by the store. """

        return self.owner.call(self._cards)


    def _cards(self):
        return [card.copy() for card in self.store.cards()]


    def card(self, key):
        """ Return a copy of the card for *key*, or None. """
        return self.owner.call(self._card, key)


    def _card(self, key):

        card = self.store.get(key)

        if card is None:
            return None

        return card.copy()


    def flush(self, timeout=60):
        """ Block until every inbound batch handed to the owner thread so
            far has been aggregated.
        """

        self.owner.flush(timeout)


    def _data_received(self, batch, peer_id):
        """ Invoked on the owner thread for every batch in a response. """

        card = self.store.ingest(batch, peer_id)

        if card is None:
            return

        self.data_changed.propagate(peer_id, batch)


    def _seen(self, message):
        node_id = protocol_message.source_node_id(message)

        if node_id is not None:
            self.checker.seen(node_id)


    def _status_received(self, message):

        node_id = protocol_message.source_node_id(message)
        status = protocol_message.data_as_string(message)

        logger.debug('received status from %r: %s', node_id, status)

        self._seen(message)
        self.owner.post(self._statuses.__setitem__, node_id, status)


    def _closing_received(self, message):

        node_id = protocol_message.source_node_id(message)
        label = protocol_message.data_as_string(message)

        logger.info('%r (%s) is closing', node_id, label)

        if node_id is not None:
            self.checker.gone(node_id)


    def _reachability_changed(self, node_id, reachable):

        try:
            name = self.peers.display_name(node_id)
        except UnknownSourcePeer:
            name = node_id

        if reachable:
            logger.info('%s connected', name)
        else:
            logger.info('%s disconnected', name)


# end of class Hub


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
