""" Background threads that invoke a method at a fixed cadence. Remote peers
    use these to stream batches at the configured period, and the hub uses
    one to probe peer reachability.
"""

import logging
import threading
import time

from . import callbacks


logger = logging.getLogger(__name__)


class Poller:
    """ Call the provided *method* every *period* seconds on a dedicated
        background thread, until :func:`stop` is called or the method
        returns False. The method is held by weak reference; if its owner
        goes away the poller exits on its own.

        An exception raised by the method is logged; polling continues.
    """

    def __init__(self, method, period, name=None):

        period = float(period)
        if period <= 0:
            raise ValueError('polling period must be positive: ' + repr(period))

        if name is None:
            name = getattr(method, '__qualname__', repr(method))

        self.name = name
        self.interval = period
        self.reference = callbacks.ref(method)
        self.shutdown = False

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run, name='poll:' + name)
        self.thread.daemon = True


    def start(self):
        self.thread.start()


    @property
    def running(self):
        return self.thread.is_alive() and self.shutdown == False


    def period(self, period):
        """ Update the polling interval to *period* seconds. The new cadence
            begins immediately.
        """

        period = float(period)
        if period <= 0:
            raise ValueError('polling period must be positive: ' + repr(period))

        self.interval = period
        self.wake()


    def run(self):

        interval = self.interval
        next = time.time() + interval

        while True:
            if self.alarm.is_set():
                self.alarm.clear()

                # The interval only changes when the alarm is set. That's our
                # cue to start an entirely new cadence.

                interval = self.interval
                next = time.time() + interval

            delay = next - time.time()
            if delay > 0:
                self.alarm.wait(delay)

            if self.shutdown == True:
                break

            if self.alarm.is_set():
                continue

            # Honor the requested cadence regardless of how long the method
            # takes; the next wakeup is incremented solely by the interval.

            next += interval

            method = self.reference()

            if method is None:
                # The original object is gone. No further calls are possible.
                break

            try:
                result = method()
            except Exception:
                logger.warning('poller %s: call failed', self.name, exc_info=True)
                continue
            finally:
                del method

            if result is False:
                break

        self.shutdown = True


    def stop(self):
        self.shutdown = True
        self.wake()


    def wake(self):
        self.alarm.set()


# end of class Poller


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
