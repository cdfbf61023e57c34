""" The remote side of the sensor streaming protocol. A :class:`Remote`
    answers sensor data requests by streaming batches of readings back to
    the requesting node until the request's end time is reached.
"""

import logging
import threading

from . import config
from . import json
from . import poll
from .data.batch import CAPACITY_UNLIMITED, DataBatch
from .data.request import SensorDataRequest, now
from .data.response import DataRequestResponse
from .errors import TransportSendFailure
from .protocol import message as protocol_message
from .protocol.dispatch import Dispatcher
from .protocol.handler import SinglePathMessageHandler
from .protocol.paths import Path


logger = logging.getLogger(__name__)


class Stream:
    """ Periodically collect readings for the sensors in *request* and send
        them to *target*. Readings are buffered in one bounded
        :class:`DataBatch` per sensor between sends; if sends fail for long
        enough, the oldest readings are dropped.
    """

    def __init__(self, remote, target, request, period, capacity):

        self.remote = remote
        self.target = target
        self.request = request
        self.sensors = request.sensors()

        self.buffers = list()
        for sensor in self.sensors:
            self.buffers.append(DataBatch(sensor.name, capacity=capacity))

        self.poller = poll.Poller(self.tick, period, name='stream:' + str(target))


    def __repr__(self):
        return 'Stream(%r, %r)' % (self.target, self.request)


    def start(self):
        self.poller.start()


    def stop(self):
        self.poller.stop()


    def update(self, request):
        """ Adopt the end timestamp of *request*; the sensors being streamed
            do not change.
        """

        self.request.end_timestamp = request.end_timestamp


    def collect(self):
        """ Ask the sampler for new readings from every requested sensor. A
            sampler failure for one sensor does not affect the others.
        """

        sampler = self.remote.sampler

        for sensor, buffer in zip(self.sensors, self.buffers):
            try:
                readings = sampler(sensor)
            except Exception:
                logger.warning('sampling %s failed', sensor.name, exc_info=True)
                continue

            if readings:
                buffer.extend(readings)


    def tick(self):
        """ Invoked on every polling interval. Returns False once the request
            has ended, which stops the poller.
        """

        if self.request.expired():
            logger.debug('request from %r has ended', self.target)
            self.remote._finished(self)
            return False

        self.collect()

        batches = list()
        for buffer in self.buffers:
            if len(buffer) == 0:
                continue
            batches.append(DataBatch(buffer.source, buffer.data, capacity=CAPACITY_UNLIMITED))

        if batches:
            pass
        else:
            return True

        response = DataRequestResponse(self.remote.local_node_id, batches)

        try:
            self.remote.transport.send(Path.SENSOR_DATA_REQUEST_RESPONSE, response.to_json(), self.target)
        except TransportSendFailure as e:
            # Keep the readings buffered; they go out with the next send.
            logger.debug('unable to send sensor data to %r: %s', self.target, e)
            return True

        for buffer in self.buffers:
            buffer.clear()

        return True


# end of class Stream



class Remote:
    """ Serve sensor data to any hub that asks for it, over *transport*.
        The *sampler* is a callable invoked with a
        :class:`sensorlink.data.DeviceSensor`, returning an iterable of
        :class:`sensorlink.data.Reading` instances collected since the
        previous call.
    """

    def __init__(self, transport, sampler, settings=None):

        if settings is None:
            settings = config.load()

        self.transport = transport
        self.sampler = sampler
        self.settings = settings
        self.started = False

        self._streams = dict()
        self._streams_lock = threading.Lock()

        self.dispatcher = Dispatcher()
        self.handlers = list()
        self.handlers.append(SinglePathMessageHandler(Path.SENSOR_DATA_REQUEST, self._request_received))
        self.handlers.append(SinglePathMessageHandler(Path.GET_STATUS, self._status_requested))
        self.handlers.append(SinglePathMessageHandler(Path.CLOSING, self._closing_received))

        transport.receiver = self.dispatcher


    @property
    def local_node_id(self):
        return self.transport.local_node_id


    def start(self):

        if self.started:
            return

        if self.transport.is_open:
            pass
        else:
            self.transport.open()

        for handler in self.handlers:
            self.dispatcher.register(handler)

        self.started = True
        logger.info('remote %r started', self.local_node_id)


    def stop(self):
        """ Stop all streams, and tell every peer this remote is going away.
        """

        if self.started:
            pass
        else:
            return

        for handler in self.handlers:
            self.dispatcher.unregister(handler)

        self._streams_lock.acquire()
        streams = list(self._streams.values())
        self._streams.clear()
        self._streams_lock.release()

        for stream in streams:
            stream.stop()

        label = str(self.settings.device_label)
        errors = self.transport.send_broadcast(Path.CLOSING, label.encode())
        for node_id, error in errors.items():
            logger.debug('closing notice not sent to %r: %s', node_id, error)

        self.started = False
        logger.info('remote %r stopped', self.local_node_id)


    def close(self):
        self.stop()
        self.transport.close()


    def streaming(self):
        """ Return a tuple of the node ids currently being streamed to. """
        return tuple(self._streams.keys())


    def _request_received(self, message):

        node_id = protocol_message.source_node_id(message)

        try:
            request = SensorDataRequest.from_json(message.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning('dropping malformed sensor data request from %r: %s', node_id, e)
            return

        # Responses go to the node the request is stamped with.

        target = request.source_node_id
        if target is None:
            target = node_id

        if request.active:
            self._start(target, request)
        else:
            self._end(target, request)


    def _start(self, target, request):

        stream = Stream(self, target, request, self.settings.stream_period, self.settings.batch_capacity)

        self._streams_lock.acquire()
        previous = self._streams.get(target)
        self._streams[target] = stream
        self._streams_lock.release()

        if previous is not None:
            previous.stop()

        types = ', '.join(sensor.name for sensor in stream.sensors)
        logger.info('streaming %s to %r', types, target)
        stream.start()


    def _end(self, target, request):

        self._streams_lock.acquire()
        stream = self._streams.get(target)
        self._streams_lock.release()

        if stream is None:
            return

        stream.update(request)

        if request.expired():
            self._finished(stream)
            stream.stop()


    def _finished(self, stream):
        """ Forget *stream*, unless it has already been replaced. """

        self._streams_lock.acquire()
        if self._streams.get(stream.target) is stream:
            del self._streams[stream.target]
            logger.info('stopped streaming to %r', stream.target)
        self._streams_lock.release()


    def status(self):
        """ Return the status of this remote as a JSON string. """

        status = dict()
        status['deviceLabel'] = str(self.settings.device_label)
        status['streaming'] = list(self.streaming())
        status['time'] = now()

        return json.dumps(status).decode()


    def _status_requested(self, message):

        node_id = protocol_message.source_node_id(message)

        try:
            self.transport.send(Path.SET_STATUS, self.status(), node_id)
        except TransportSendFailure as e:
            logger.debug('unable to send status to %r: %s', node_id, e)


    def _closing_received(self, message):

        node_id = protocol_message.source_node_id(message)

        self._streams_lock.acquire()
        stream = self._streams.pop(node_id, None)
        self._streams_lock.release()

        if stream is not None:
            logger.info('%r is closing, stopped streaming to it', node_id)
            stream.stop()


# end of class Remote


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
