""" Route inbound messages to the handlers registered for their path.
"""

import logging
import threading

from . import paths


logger = logging.getLogger(__name__)


class Dispatcher:
    """ Maintain the set of active :class:`handler.MessageHandler` instances
        and hand each inbound message to every handler registered for its
        path. The dispatch table is keyed by :class:`paths.Path`; a handler
        whose path is outside the vocabulary is rejected at registration.

        Registration and dispatch may happen concurrently from different
        threads. The table is replaced, never modified in place, so
        :func:`dispatch` always iterates over a consistent snapshot.
    """

    def __init__(self):

        self._table = dict()
        self._lock = threading.Lock()


    def __contains__(self, handler):

        try:
            path = paths.lookup(handler.path)
        except (AttributeError, ValueError):
            return False

        handlers = self._table.get(path, ())
        return any(existing is handler for existing in handlers)


    def __len__(self):
        return sum(len(handlers) for handlers in self._table.values())


    def register(self, handler):
        """ Add *handler* to the dispatch table. Registering a handler that
            is already registered is a no-op.
        """

        path = paths.lookup(handler.path)

        self._lock.acquire()
        try:
            handlers = self._table.get(path, ())

            for existing in handlers:
                if existing is handler:
                    return

            table = dict(self._table)
            table[path] = handlers + (handler,)
            self._table = table
        finally:
            self._lock.release()

        logger.debug('registered %r for %s', handler, path.name)


    def unregister(self, handler):
        """ Remove *handler* from the dispatch table. Removing a handler that
            is not registered is a no-op.
        """

        try:
            path = paths.lookup(handler.path)
        except (AttributeError, ValueError):
            return

        self._lock.acquire()
        try:
            handlers = self._table.get(path, ())
            remaining = tuple(existing for existing in handlers if existing is not handler)

            if len(remaining) == len(handlers):
                return

            table = dict(self._table)
            if remaining:
                table[path] = remaining
            else:
                del table[path]
            self._table = table
        finally:
            self._lock.release()

        logger.debug('unregistered %r for %s', handler, path.name)


    def handlers(self, path):
        """ Return a tuple of the handlers registered for *path*, in
            registration order.
        """

        path = paths.lookup(path)
        return self._table.get(path, ())


    def dispatch(self, message):
        """ Invoke every handler registered for the path of *message*, in
            registration order, on the calling thread. An exception raised
            by one handler is logged and does not prevent the remaining
            handlers from running. Returns the number of handlers invoked.
        """

        path = message.known_path

        if path is None:
            logger.debug('dropping message with unknown path %r from %r', message.path, message.source_node_id)
            return 0

        handlers = self._table.get(path, ())

        if handlers:
            pass
        else:
            logger.debug('no handler registered for %s from %r', path.name, message.source_node_id)
            return 0

        for handler in handlers:
            try:
                handler.handle_message(message)
            except Exception:
                logger.warning('handler %r failed on %s from %r', handler, path.name, message.source_node_id, exc_info=True)
                continue

        return len(handlers)


    def __call__(self, message):
        """ A :class:`Dispatcher` can be used directly as the receiver for
            a transport.
        """

        self.dispatch(message)


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
