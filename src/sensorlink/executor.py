""" Execution contexts. An :class:`Owner` is the single thread that owns
    request and aggregation state; :class:`Workers` is a bounded pool for
    work that must not run on a transport's receive thread, and whose
    results are handed back to an :class:`Owner`.
"""

from __future__ import annotations

import concurrent.futures
import logging
import queue
import threading
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class Owner:
    """ A single background thread that runs posted callables one at a time,
        in the order they were posted. State confined to an :class:`Owner`
        is only ever touched from its thread, and needs no further locking.

        Once :func:`shutdown` is called any further posts are discarded; this
        prevents late callbacks from touching state that has been torn down.
    """

    def __init__(self, name: str = 'owner'):

        self.name = name
        self.closed = False
        self.queue: queue.SimpleQueue = queue.SimpleQueue()

        self.thread = threading.Thread(target=self.run, name='sensorlink:' + name)
        self.thread.daemon = True
        self.thread.start()


    def __repr__(self):
        return 'Owner(%r)' % (self.name)


    def is_current(self) -> bool:
        """ Return True if the caller is running on this owner's thread. """
        return threading.current_thread() is self.thread


    def post(self, method: Callable, *args: Any) -> bool:
        """ Queue *method* to be invoked with *args* on the owner thread.
            Returns False, and does nothing, if this owner has shut down.
        """

        if self.closed:
            logger.debug('%r has shut down, discarding %r', self, method)
            return False

        self.queue.put((method, args))
        return True


    def call(self, method: Callable, *args: Any, timeout: Optional[float] = 60) -> Any:
        """ Invoke *method* with *args* on the owner thread and return its
            result, blocking the caller for up to *timeout* seconds. Any
            exception raised by *method* is re-raised here. Calls made
            from the owner thread itself run immediately.
        """

        if self.is_current():
            return method(*args)

        future: concurrent.futures.Future = concurrent.futures.Future()

        def invoke():
            if future.set_running_or_notify_cancel():
                pass
            else:
                return

            try:
                result = method(*args)
            except BaseException as e:
                future.set_exception(e)
            else:
                future.set_result(result)

        if self.post(invoke):
            pass
        else:
            raise RuntimeError(repr(self) + ' has shut down')

        return future.result(timeout)


    def flush(self, timeout: Optional[float] = 60) -> None:
        """ Block until every callable posted before this call has run. """

        self.call(_noop, timeout=timeout)


    def run(self) -> None:

        while True:
            dequeued = self.queue.get()

            if dequeued is None:
                break

            method, args = dequeued

            try:
                method(*args)
            except Exception:
                logger.warning('%r: posted call %r failed', self, method, exc_info=True)
                continue


    def shutdown(self, wait: bool = True, timeout: Optional[float] = 5) -> None:
        """ Stop accepting new work. Callables already posted still run;
            if *wait* is True, block until they have.
        """

        if self.closed:
            return

        self.closed = True
        self.queue.put(None)

        if wait and self.is_current() == False:
            self.thread.join(timeout)


# end of class Owner



class Workers:
    """ A thin wrapper around :class:`concurrent.futures.ThreadPoolExecutor`
        that bounds the number of tasks in flight. When the bound is reached
        :func:`submit` waits up to *handoff_timeout* seconds for a slot, then
        gives up and returns None; the caller drops the work rather than
        blocking its own thread indefinitely.
    """

    def __init__(self, count: int = 4, handoff_timeout: float = 1.0, pending: Optional[int] = None, name: str = 'worker'):

        count = int(count)
        if count < 1:
            raise ValueError('worker count must be at least 1')

        if pending is None:
            pending = count * 4

        self.name = name
        self.handoff_timeout = float(handoff_timeout)
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=count, thread_name_prefix='sensorlink:' + name)
        self.slots = threading.BoundedSemaphore(count + int(pending))
        self.closed = False


    def submit(self, method: Callable, *args: Any) -> Optional[concurrent.futures.Future]:

        if self.closed:
            logger.debug('%s pool has shut down, discarding %r', self.name, method)
            return None

        if self.slots.acquire(timeout=self.handoff_timeout):
            pass
        else:
            logger.warning('%s pool saturated for %.2fs, dropping %r', self.name, self.handoff_timeout, method)
            return None

        try:
            future = self.executor.submit(method, *args)
        except RuntimeError:
            # The executor was shut down between the check above and now.
            self.slots.release()
            logger.debug('%s pool has shut down, discarding %r', self.name, method)
            return None

        future.add_done_callback(self._release)
        return future


    def _release(self, future: concurrent.futures.Future) -> None:
        self.slots.release()


    def shutdown(self, wait: bool = True) -> None:
        """ Stop accepting new work and cancel anything not yet started. """

        self.closed = True
        self.executor.shutdown(wait=wait, cancel_futures=True)


# end of class Workers



def _noop():
    pass


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
