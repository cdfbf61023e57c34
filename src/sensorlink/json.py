''' Wrapper module for the JSON library used on the wire. Every peer speaks
    the same encoding; the :func:`dumps` method always returns bytes, and
    :func:`loads` accepts either bytes or a string.
'''

import orjson


JSONDecodeError = orjson.JSONDecodeError


def dumps(value):
    return orjson.dumps(value)


def loads(encoded):
    ''' Decode the JSON in *encoded*. A :class:`JSONDecodeError`, which is a
        subclass of :class:`ValueError`, is raised for anything that does
        not parse.
    '''

    if encoded is None:
        raise JSONDecodeError('cannot decode None', '', 0)

    return orjson.loads(encoded)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
