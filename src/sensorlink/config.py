""" Configuration for hub and remote peers. Settings are loaded from
    ``settings.json`` in the configuration :func:`directory`, merged over
    the built-in :data:`defaults`; any individual setting can be overridden
    with a ``SENSORLINK_<NAME>`` environment variable, for example
    ``SENSORLINK_STREAM_PERIOD=0.5``.
"""

import os
import socket
import threading

from . import json


defaults = dict()
defaults['device_label'] = None
defaults['worker_count'] = 4
defaults['handoff_timeout'] = 1.0
defaults['stream_period'] = 1.0
defaults['batch_capacity'] = 200
defaults['reachability_period'] = 5.0
defaults['reachability_timeout'] = 15.0
defaults['minimum_port'] = 10179
defaults['maximum_port'] = 13679

settings_filename = 'settings.json'
peers_filename = 'peers.json'

_cache = dict()
_cache_lock = threading.Lock()


class Settings:
    """ A convenience class to represent sensorlink settings. To first order
        an instance acts like a read-only dictionary; attribute access is
        also supported, so ``settings.stream_period`` and
        ``settings['stream_period']`` are equivalent.
    """

    def __init__(self, values=None, **overrides):

        merged = dict(defaults)

        if values:
            for key, value in values.items():
                merged[key] = value

        for key, value in overrides.items():
            merged[key] = value

        if merged['device_label'] is None:
            merged['device_label'] = _hostname()

        self._values = merged


    def __contains__(self, key):
        return key in self._values


    def __getitem__(self, key):
        return self._values[key]


    def __getattr__(self, key):
        if key.startswith('_'):
            raise AttributeError(key)

        try:
            return self._values[key]
        except KeyError:
            raise AttributeError('no such setting: ' + key)


    def __repr__(self):
        return 'Settings(' + repr(self._values) + ')'


    def get(self, key, default=None):
        return self._values.get(key, default)


    def items(self):
        return self._values.items()


    def keys(self):
        return self._values.keys()


# end of class Settings



def directory(default=None):
    """ Return the directory location where we should be loading and/or saving
        configuration files. This defaults to ``$HOME/.sensorlink``, but can
        be overridden by calling this method with a valid path, or by setting
        the ``SENSORLINK_HOME`` environment variable. Note that changes to the
        environment variable will be ignored unless it is set prior to the
        first invocation of this method.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        if os.path.exists(default):
            pass
        else:
            os.makedirs(default, mode=0o775)

        os.environ['SENSORLINK_HOME'] = default
        directory.found = default
        _cache.clear()


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['SENSORLINK_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    found = os.path.join(os.path.expanduser('~'), '.sensorlink')
    directory.found = found
    return found

directory.found = None



def load(refresh=False):
    """ Return the :class:`Settings` for this process. The settings file is
        only read once; pass *refresh* as True to read it again.
    """

    _cache_lock.acquire()
    try:
        if refresh == False:
            try:
                return _cache['settings']
            except KeyError:
                pass

        values = _read(settings_filename)

        if values is None:
            values = dict()
        elif isinstance(values, dict):
            pass
        else:
            raise ValueError(settings_filename + ' must contain a JSON object')

        for key, default in defaults.items():
            variable = 'SENSORLINK_' + key.upper()
            try:
                value = os.environ[variable]
            except KeyError:
                continue

            values[key] = _interpret(value, default)

        settings = Settings(values)
        _cache['settings'] = settings
    finally:
        _cache_lock.release()

    return settings



def load_peers():
    """ Return the contents of ``peers.json`` in the configuration directory,
        a dictionary keyed by node id; each value is a dictionary that may
        contain 'name', 'address', and 'port'. An empty dictionary is
        returned if there is no such file.
    """

    peers = _read(peers_filename)

    if peers is None:
        return dict()

    if isinstance(peers, dict):
        pass
    else:
        raise ValueError(peers_filename + ' must contain a JSON object')

    return peers



def _read(filename):
    """ Return the decoded JSON contents of *filename* within the
        configuration directory, or None if the file does not exist.
    """

    filename = os.path.join(directory(), filename)

    try:
        file = open(filename, 'rb')
    except FileNotFoundError:
        return None

    with file:
        contents = file.read()

    return json.loads(contents)



def _interpret(value, default):
    """ Environment variables are always strings; convert *value* to the
        type of the corresponding *default*.
    """

    if default is None or isinstance(default, str):
        return value

    if isinstance(default, bool):
        return value.lower() in ('1', 'true', 'yes', 'on')

    if isinstance(default, int):
        return int(value)

    if isinstance(default, float):
        return float(value)

    return value



def _hostname():
    return socket.gethostname()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
