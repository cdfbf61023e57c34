""" Data requests, as issued by a hub and interpreted by a remote peer.

    The end timestamp doubles as the activity flag: a request is active
    for as long as its end timestamp is :data:`TIMESTAMP_NOT_SET`. Remote
    peers branch on that value after decoding, so it is part of the wire
    format and not an implementation detail.
"""

import time

from .. import json
from . import sensor

TIMESTAMP_NOT_SET = -1


def now():
    """ Return the current time in milliseconds since the epoch. """
    return int(time.time() * 1000)


class DataRequest:
    """ The fields common to every request: the *source_node_id* the request
        is stamped with, and the start and end timestamps.
    """

    def __init__(self, source_node_id=None, start_timestamp=None, end_timestamp=TIMESTAMP_NOT_SET):

        if start_timestamp is None:
            start_timestamp = now()

        self.source_node_id = source_node_id
        self.start_timestamp = int(start_timestamp)
        self.end_timestamp = int(end_timestamp)


    @property
    def active(self):
        return self.end_timestamp == TIMESTAMP_NOT_SET


    def stop(self, timestamp=None):
        """ Terminate this request by setting its end timestamp to *timestamp*,
            or to now if no timestamp is provided.
        """

        if timestamp is None:
            timestamp = now()

        self.end_timestamp = int(timestamp)


    def expired(self, timestamp=None):
        """ Return True if the end of this request has been reached as of
            *timestamp* (default: now).
        """

        if self.active:
            return False

        if timestamp is None:
            timestamp = now()

        return timestamp >= self.end_timestamp


# end of class DataRequest



class SensorDataRequest(DataRequest):
    """ A request to stream readings from the sensors enumerated by
        *sensor_types*, a sequence of integer sensor types.
    """

    def __init__(self, sensor_types, source_node_id=None, start_timestamp=None, end_timestamp=TIMESTAMP_NOT_SET):

        DataRequest.__init__(self, source_node_id, start_timestamp, end_timestamp)
        self.sensor_types = [int(type) for type in sensor_types]


    def __repr__(self):
        return 'SensorDataRequest(%r, source=%r, start=%d, end=%d)' % (self.sensor_types, self.source_node_id, self.start_timestamp, self.end_timestamp)


    def copy(self):
        return SensorDataRequest(self.sensor_types, self.source_node_id, self.start_timestamp, self.end_timestamp)


    def sensors(self):
        """ Return the :class:`sensor.DeviceSensor` instances for the requested
            sensor types, in request order.
        """

        return [sensor.lookup(type) for type in self.sensor_types]


    def covers(self, identifier):
        """ Return True if the sensor identified by *identifier* (a name, an
            integer type, or a :class:`sensor.DeviceSensor`) is part of this
            request. Activity is not considered here.
        """

        for requested in self.sensors():
            if requested.matches(identifier):
                return True

        return False


    def to_dict(self):
        request = dict()
        request['sourceNodeId'] = self.source_node_id
        request['sensorTypes'] = list(self.sensor_types)
        request['startTimestamp'] = self.start_timestamp
        request['endTimestamp'] = self.end_timestamp
        return request


    def to_json(self):
        return json.dumps(self.to_dict())


    @classmethod
    def from_dict(cls, request):

        sensor_types = request['sensorTypes']
        source_node_id = request.get('sourceNodeId')
        start = request.get('startTimestamp')
        end = request.get('endTimestamp', TIMESTAMP_NOT_SET)

        if end is None:
            end = TIMESTAMP_NOT_SET

        return cls(sensor_types, source_node_id, start, end)


    @classmethod
    def from_json(cls, encoded):
        """ Decode a request. Raises :class:`ValueError` (including JSON
            decode errors), :class:`KeyError` or :class:`TypeError` for
            payloads that do not describe a request.
        """

        request = json.loads(encoded)

        if isinstance(request, dict):
            pass
        else:
            raise ValueError('a sensor data request must be a JSON object')

        return cls.from_dict(request)


# end of class SensorDataRequest


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
