""" The data model shared by hub and remote peers: sensors, readings,
    batches of readings, and the request/response containers that carry
    them on the wire.
"""

from . import sensor

from .batch import CAPACITY_UNLIMITED, DataBatch, Reading
from .request import TIMESTAMP_NOT_SET, DataRequest, SensorDataRequest
from .response import DataRequestResponse
from .sensor import DeviceSensor

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
