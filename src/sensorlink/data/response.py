""" The response container a remote peer sends back for a data request.
"""

from .. import json
from ..errors import MalformedResponse
from .batch import DataBatch


class DataRequestResponse:
    """ Readings from *source_node_id*, as a list of :class:`DataBatch`
        instances, typically one per requested sensor.
    """

    def __init__(self, source_node_id, data_batches=()):

        self.source_node_id = source_node_id
        self.data_batches = list(data_batches)


    def __repr__(self):
        return 'DataRequestResponse(%r, %r)' % (self.source_node_id, self.data_batches)


    def to_dict(self):
        batches = [batch.to_dict() for batch in self.data_batches]
        return {'sourceNodeId': self.source_node_id, 'dataBatches': batches}


    def to_json(self):
        return json.dumps(self.to_dict())


    @classmethod
    def from_json(cls, encoded):
        """ Decode a response. Any problem with the payload, whether it is
            invalid JSON or JSON of the wrong shape, raises
            :class:`MalformedResponse`.
        """

        try:
            response = json.loads(encoded)
        except ValueError as e:
            raise MalformedResponse('response is not valid JSON: ' + str(e))

        try:
            source_node_id = response['sourceNodeId']
            batches = response['dataBatches']
            batches = [DataBatch.from_dict(batch) for batch in batches]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse('unexpected response structure: %s: %s' % (e.__class__.__name__, e))

        return cls(source_node_id, batches)


# end of class DataRequestResponse


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
