""" Bookkeeping for the data requests a hub has issued to its peers.
"""

import logging

from .data import request as datarequest
from .data import sensor
from .data.request import SensorDataRequest


logger = logging.getLogger(__name__)


class RequestManager:
    """ Track at most one :class:`SensorDataRequest` per peer. A new
        selection for a peer replaces its request outright; sensor sets are
        never merged, a re-selection is a new streaming session.

        Stopped requests are kept as tombstones, so that the next call to
        :func:`send_all` tells the peer the request has ended. They remain
        until replaced.

        Instances are not thread-safe. All calls are expected to come from
        a single owning thread; see :class:`sensorlink.executor.Owner`.

        The *clock* argument is a callable returning the current time in
        milliseconds since the epoch.
    """

    def __init__(self, clock=None):

        if clock is None:
            clock = datarequest.now

        self.clock = clock
        self._requests = dict()


    def __contains__(self, peer_id):
        return peer_id in self._requests


    def __len__(self):
        return len(self._requests)


    def __repr__(self):
        return 'RequestManager: ' + repr(self._requests)


    def set_request(self, peer_id, sensors, source_node_id):
        """ Request data from the *sensors* of *peer_id*, replacing any
            existing request for that peer. The *sensors* may be
            :class:`sensorlink.data.DeviceSensor` instances, integer sensor
            types, or sensor names. The *source_node_id* is the node the
            request is stamped with, usually the local node.

            Returns a copy of the new request.
        """

        sensors = [sensor.lookup(identifier) for identifier in sensors]

        if sensors:
            pass
        else:
            logger.info('empty sensor selection for %r; the request will not cover any sensor', peer_id)

        types = [selected.type for selected in sensors]

        request = SensorDataRequest(types, source_node_id, start_timestamp=self.clock())
        self._requests[peer_id] = request

        logger.debug('request for %r set to sensor types %r', peer_id, types)
        return request.copy()


    def get(self, peer_id):
        """ Return a copy of the request for *peer_id*, or None. """

        try:
            request = self._requests[peer_id]
        except KeyError:
            return None

        return request.copy()


    def peers(self):
        return tuple(self._requests.keys())


    def sensors(self, peer_id):
        """ Return the :class:`sensorlink.data.DeviceSensor` instances covered
            by the request for *peer_id*, whether or not it is active.
        """

        try:
            request = self._requests[peer_id]
        except KeyError:
            return []

        return request.sensors()


    def is_active(self, peer_id, sensor=None):
        """ With no *sensor*, return True if there is an active request for
            *peer_id*. With a *sensor*, which may be a name, an integer type,
            or a :class:`sensorlink.data.DeviceSensor`, additionally require
            that the active request covers that sensor.
        """

        try:
            request = self._requests[peer_id]
        except KeyError:
            return False

        if request.active:
            pass
        else:
            return False

        if sensor is None:
            return True

        return request.covers(sensor)


    def is_requesting(self):
        """ Return True if any tracked request is active. """

        for request in self._requests.values():
            if request.active:
                return True

        return False


    def stop_all(self, send=None):
        """ Set the end timestamp of every active request to now. If nothing
            is active this is a no-op and False is returned, nothing is sent.
            Otherwise, if *send* is provided, every tracked request is sent
            via :func:`send_all`, and True is returned.
        """

        if self.is_requesting():
            pass
        else:
            return False

        logger.info('stopping all sensor data requests')

        timestamp = self.clock()

        for request in self._requests.values():
            if request.active:
                request.stop(timestamp)

        if send is not None:
            self.send_all(send)

        return True


    def serialize(self, peer_id):
        """ Return the wire encoding of the request for *peer_id*. """
        return self._requests[peer_id].to_json()


    def send_all(self, send):
        """ Serialize every tracked request, active or stopped, and invoke
            *send* with the peer id and the encoded request for each one.
            An exception raised for one peer is logged, and the remaining
            peers are still sent their requests. Returns the list of peer
            ids for which *send* failed.
        """

        failed = list()

        for peer_id, request in tuple(self._requests.items()):
            try:
                payload = request.to_json()
                logger.debug('sending sensor data request to %r: %r', peer_id, request)
                send(peer_id, payload)
            except Exception as e:
                logger.warning('unable to send sensor data request to %r: %s', peer_id, e)
                failed.append(peer_id)
                continue

        return failed


# end of class RequestManager


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
