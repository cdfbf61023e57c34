""" The fixed vocabulary of message paths. Each path identifies a message
    type; the payload shape for each path is defined by whoever handles it.

    Keep these in one place to avoid stringly-typed message handling.
"""

import enum


class Path(str, enum.Enum):

    GET_STATUS = '/get_status'
    SET_STATUS = '/set_status'
    SENSOR_DATA_REQUEST = '/sensor_data_request'
    SENSOR_DATA_REQUEST_RESPONSE = '/sensor_data_request_response'
    CLOSING = '/closing'


def lookup(path):
    """ Return the :class:`Path` member for *path*, which may be a member, a
        path string such as ``'/closing'``, or a member name such as
        ``'CLOSING'``. Anything outside the vocabulary raises
        :class:`ValueError`.
    """

    if isinstance(path, Path):
        return path

    try:
        path = path.decode()
    except AttributeError:
        pass

    path = str(path)

    try:
        return Path(path)
    except ValueError:
        pass

    try:
        return Path[path]
    except KeyError:
        raise ValueError('unknown message path: ' + repr(path))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
