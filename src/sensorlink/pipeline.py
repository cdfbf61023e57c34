""" The path from an inbound sensor data response to the aggregation store.

    Responses arrive on a transport thread. Decoding one can be expensive,
    so it happens on a worker; the decoded batches are then handed to the
    owner context, which is the only thread allowed to touch aggregation
    and request state. Batches within one response are delivered in the
    order they were listed; nothing is promised across responses.
"""

import logging

from .data.response import DataRequestResponse
from .errors import MalformedResponse
from .protocol import message as protocol_message
from .protocol.handler import SinglePathMessageHandler
from .protocol.paths import Path


logger = logging.getLogger(__name__)


class ResponseHandler(SinglePathMessageHandler):
    """ Handle :data:`Path.SENSOR_DATA_REQUEST_RESPONSE` messages. The
        *receiver* is invoked on the *owner* thread once for every batch in
        a response, with the batch and the node id of the peer that sent it.
        Decoding runs on *workers*, a :class:`sensorlink.executor.Workers`.
    """

    def __init__(self, receiver, owner, workers):

        SinglePathMessageHandler.__init__(self, Path.SENSOR_DATA_REQUEST_RESPONSE)

        self.receiver = receiver
        self.owner = owner
        self.workers = workers


    def handle_message(self, message):
        """ Hand *message* off to a worker and return immediately. """

        future = self.workers.submit(self.parse, message)

        if future is None:
            logger.warning('dropped sensor data response from %r, no worker available', message.source_node_id)
            return

        future.add_done_callback(self._parsed)


    def parse(self, message):
        """ Decode *message* into a :class:`DataRequestResponse`. Returns a
            tuple of the node id the message came from and the response.
        """

        source_node_id = protocol_message.source_node_id(message)
        response = protocol_message.data_as_string(message)
        response = DataRequestResponse.from_json(response)

        if source_node_id is None:
            source_node_id = response.source_node_id

        return source_node_id, response


    def _parsed(self, future):
        """ Completion callback for :func:`parse`; runs on the worker thread.
        """

        if future.cancelled():
            return

        error = future.exception()

        if error is None:
            pass
        elif isinstance(error, MalformedResponse):
            logger.warning('dropping malformed sensor data response: %s', error)
            return
        else:
            logger.warning('unable to decode sensor data response', exc_info=error)
            return

        source_node_id, response = future.result()
        self.owner.post(self.deliver, response, source_node_id)


    def deliver(self, response, source_node_id):
        """ Hand every batch in *response* to the receiver, in order. Runs on
            the owner thread. A failure for one batch does not prevent the
            remaining batches from being delivered.
        """

        for batch in response.data_batches:
            try:
                self.receiver(batch, source_node_id)
            except Exception:
                logger.warning('unable to handle %s batch from %r', batch.source, source_node_id, exc_info=True)
                continue


# end of class ResponseHandler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
