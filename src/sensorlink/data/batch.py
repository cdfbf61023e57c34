""" Sensor readings, and the batches used to carry them between peers and
    to accumulate them on the hub.
"""

import collections

CAPACITY_UNLIMITED = -1
CAPACITY_DEFAULT = 200


class Reading:
    """ A single sensor sample: a *timestamp* in milliseconds since the epoch,
        and a vector of floating point *values*.
    """

    __slots__ = ('timestamp', 'values')

    def __init__(self, timestamp, values):
        self.timestamp = int(timestamp)
        self.values = [float(value) for value in values]


    def __eq__(self, other):
        try:
            return self.timestamp == other.timestamp and self.values == other.values
        except AttributeError:
            return NotImplemented


    def __repr__(self):
        return 'Reading(%d, %r)' % (self.timestamp, self.values)


    def to_dict(self):
        return {'timestamp': self.timestamp, 'values': list(self.values)}


    @classmethod
    def from_dict(cls, data):
        return cls(data['timestamp'], data['values'])


# end of class Reading



class DataBatch:
    """ An ordered sequence of :class:`Reading` instances from a single
        *source* sensor, in arrival order. A batch with a bounded *capacity*
        drops its oldest readings on overflow; :data:`CAPACITY_UNLIMITED`
        disables the bound. The *source* is fixed at creation.
    """

    def __init__(self, source, data=(), capacity=CAPACITY_DEFAULT):

        self._source = str(source)
        self._capacity = CAPACITY_UNLIMITED
        self._data = collections.deque()

        self.capacity = capacity
        self.extend(data)


    def __len__(self):
        return len(self._data)


    def __iter__(self):
        return iter(self._data)


    def __repr__(self):
        return 'DataBatch(%r, %d readings, capacity %d)' % (self._source, len(self._data), self._capacity)


    @property
    def source(self):
        return self._source


    @property
    def data(self):
        """ A copy of the readings in this batch, oldest first. """
        return list(self._data)


    @property
    def capacity(self):
        return self._capacity


    @capacity.setter
    def capacity(self, capacity):

        capacity = int(capacity)

        if capacity == CAPACITY_UNLIMITED or capacity > 0:
            pass
        else:
            raise ValueError('capacity must be positive or CAPACITY_UNLIMITED: ' + repr(capacity))

        self._capacity = capacity
        self.trim()


    def add(self, reading):
        self._data.append(reading)
        self.trim()


    def extend(self, readings):
        """ Append every reading in *readings*, preserving their order. """

        self._data.extend(readings)
        self.trim()


    def trim(self):
        """ Drop the oldest readings until the batch fits its capacity. """

        capacity = self._capacity

        if capacity == CAPACITY_UNLIMITED:
            return

        data = self._data
        while len(data) > capacity:
            data.popleft()


    def clear(self):
        self._data.clear()


    def newest(self):
        """ Return the most recently added reading, or None if empty. """

        try:
            return self._data[-1]
        except IndexError:
            return None


    def since(self, timestamp):
        """ Return the readings whose timestamp is newer than *timestamp*. """
        return [reading for reading in self._data if reading.timestamp > timestamp]


    def to_dict(self):
        data = [reading.to_dict() for reading in self._data]
        return {'source': self._source, 'data': data}


    @classmethod
    def from_dict(cls, data, capacity=CAPACITY_UNLIMITED):
        readings = [Reading.from_dict(reading) for reading in data['data']]
        return cls(data['source'], readings, capacity=capacity)


# end of class DataBatch


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
