""" Reachability of peers. The state is a boolean per peer; interested
    parties register a callback and are notified of transitions only.
"""

import logging
import threading
import time

from . import poll
from .callbacks import Callbacks


logger = logging.getLogger(__name__)


class Reachability:
    """ Track whether each known peer is currently reachable. The
        :attr:`changed` callbacks are invoked with the node id and the new
        boolean state whenever a peer's state actually changes; repeated
        updates with the same state are silent. A peer that has never been
        updated is not reachable.
    """

    def __init__(self):

        self._state = dict()
        self._lock = threading.Lock()
        self.changed = Callbacks('reachability changed')


    def __repr__(self):
        return 'Reachability: ' + repr(self._state)


    def is_reachable(self, node_id):
        return self._state.get(node_id, False)


    def reachable(self):
        """ Return a tuple of the node ids currently reachable. """
        return tuple(node_id for node_id, state in self._state.items() if state)


    def known(self):
        return tuple(self._state.keys())


    def update(self, node_id, reachable):
        """ Record the reachability of *node_id*. Returns True if this was a
            transition.
        """

        reachable = bool(reachable)

        self._lock.acquire()
        try:
            previous = self._state.get(node_id)
            self._state[node_id] = reachable
        finally:
            self._lock.release()

        if previous == reachable:
            return False

        if previous is None and reachable == False:
            # First sighting of a peer that is not reachable. Nothing changed
            # from the point of view of anyone asking is_reachable().
            return False

        logger.info('reachability of %r changed to %s', node_id, reachable)
        self.changed.propagate(node_id, reachable)
        return True


# end of class Reachability



class Checker:
    """ Periodically probe peers, and mark a peer unreachable if nothing has
        been heard from it within *timeout* seconds. The *probe* is invoked
        with no arguments every *period* seconds; it is expected to prompt
        peers for a reply (for example, by broadcasting a status request),
        and whoever receives the reply calls :func:`seen`.
    """

    def __init__(self, state, probe, period=5.0, timeout=15.0, clock=time.monotonic):

        self.state = state
        self.probe = probe
        self.period = float(period)
        self.timeout = float(timeout)
        self.clock = clock

        self._last_seen = dict()
        self._lock = threading.Lock()
        self.poller = None


    def seen(self, node_id):
        """ Record that *node_id* was just heard from. """

        self._lock.acquire()
        self._last_seen[node_id] = self.clock()
        self._lock.release()

        self.state.update(node_id, True)


    def gone(self, node_id):
        """ Record that *node_id* announced it is going away. """

        self._lock.acquire()
        self._last_seen.pop(node_id, None)
        self._lock.release()

        self.state.update(node_id, False)


    def check(self):
        """ Mark stale peers unreachable, then probe. This is the method
            invoked on every polling interval.
        """

        now = self.clock()
        expired = list()

        self._lock.acquire()
        try:
            for node_id, last in self._last_seen.items():
                if now - last > self.timeout:
                    expired.append(node_id)

            for node_id in expired:
                del self._last_seen[node_id]
        finally:
            self._lock.release()

        for node_id in expired:
            self.state.update(node_id, False)

        try:
            self.probe()
        except Exception:
            logger.warning('reachability probe failed', exc_info=True)


    def start(self):

        if self.poller is not None and self.poller.running:
            return

        self.poller = poll.Poller(self.check, self.period, name='reachability')
        self.poller.start()


    def stop(self):

        if self.poller is None:
            return

        self.poller.stop()
        self.poller = None


# end of class Checker


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
