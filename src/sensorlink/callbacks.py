""" Lists of weakly referenced callbacks. A receiver registering a bound
    method does not keep its instance alive; once the instance is gone the
    callback is quietly dropped from the list on the next invocation.
"""

import logging
import threading
import weakref


logger = logging.getLogger(__name__)


def ref(thing):
    """ Return a weak reference to the supplied argument, regardless of
        whether it is a simple object or a bound method.
    """

    try:
        thing.__func__
        thing.__self__
    except AttributeError:
        return weakref.ref(thing)
    else:
        return weakref.WeakMethod(thing)



class Callbacks:
    """ An ordered collection of callbacks for a single event. Registration
        and removal are safe to call from any thread; :func:`propagate`
        iterates over a snapshot, so a callback may unregister itself.

        The *name* is only used in log messages.
    """

    def __init__(self, name):

        self.name = name
        self._references = tuple()
        self._lock = threading.Lock()


    def __len__(self):
        return len(self._references)


    def __bool__(self):
        return len(self._references) > 0


    def register(self, callback):
        """ Add *callback* to the list. Registering the same callback twice
            is a no-op.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        reference = ref(callback)

        self._lock.acquire()
        try:
            if reference in self._references:
                return
            self._references = self._references + (reference,)
        finally:
            self._lock.release()


    def unregister(self, callback):

        reference = ref(callback)

        self._lock.acquire()
        try:
            references = list(self._references)
            try:
                references.remove(reference)
            except ValueError:
                return
            self._references = tuple(references)
        finally:
            self._lock.release()


    def propagate(self, *args):
        """ Invoke every registered callback with *args*. An exception raised
            by one callback is logged and does not prevent the remaining
            callbacks from being invoked.
        """

        references = self._references

        if references:
            pass
        else:
            return

        invalid = list()

        for reference in references:
            callback = reference()

            if callback is None:
                invalid.append(reference)
                continue

            try:
                callback(*args)
            except Exception:
                logger.warning('%s callback %r failed', self.name, callback, exc_info=True)
                continue

        if invalid:
            self._lock.acquire()
            try:
                self._references = tuple(r for r in self._references if r not in invalid)
            finally:
                self._lock.release()


# end of class Callbacks


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
