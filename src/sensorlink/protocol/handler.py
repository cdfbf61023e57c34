""" Message handlers. A handler declares the path it responds to; the
    :class:`dispatch.Dispatcher` invokes it for every inbound message on
    that path.
"""

from . import paths


class MessageHandler:
    """ Base class for all message handlers. Subclasses set :attr:`path` and
        override :func:`handle_message`. Handlers are invoked on whatever
        thread delivers the message; a handler touching state confined to
        another thread must hand the work off itself.
    """

    path = None

    def handle_message(self, message):
        raise NotImplementedError('handle_message() must be implemented by a subclass')


# end of class MessageHandler



class SinglePathMessageHandler(MessageHandler):
    """ A handler for exactly one *path*, which must be part of the path
        vocabulary. If a *callback* is provided it is invoked with each
        message; otherwise a subclass is expected to override
        :func:`handle_message`.
    """

    def __init__(self, path, callback=None):

        self.path = paths.lookup(path)

        if callback is None or callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        self.callback = callback


    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, self.path.name)


    def handle_message(self, message):

        if self.callback is None:
            raise NotImplementedError('no callback provided for ' + repr(self))

        self.callback(message)


# end of class SinglePathMessageHandler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
