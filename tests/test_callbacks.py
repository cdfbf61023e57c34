import sensorlink

from sensorlink.callbacks import Callbacks


class Referenced:

    def __init__(self):
        self.calls = list()

    def a_method(self, *args):
        self.calls.append(args)


def test_persistent_object_method():
    """ This is the reason the local weak reference wrapper exists, and why
        weakref.WeakMethod exists: the standard weakref.ref() reference cannot
        refer to a bound method, as they immediately lose scope and are
        deallocated.
    """

    thing = Referenced()

    reference = sensorlink.callbacks.ref(thing.a_method)
    assert callable(reference)

    dereferenced = reference()
    assert dereferenced is not None
    assert callable(dereferenced)


def test_removed_object_method():
    thing = Referenced()

    reference = sensorlink.callbacks.ref(thing.a_method)
    del thing

    assert reference() is None


def test_propagate():

    callbacks = Callbacks('unit test')
    thing = Referenced()

    callbacks.register(thing.a_method)
    callbacks.register(thing.a_method)
    assert len(callbacks) == 1

    callbacks.propagate('watch1', True)
    assert thing.calls == [('watch1', True)]

    callbacks.unregister(thing.a_method)
    assert bool(callbacks) == False

    callbacks.propagate('watch1', False)
    assert thing.calls == [('watch1', True)]

    # Unregistering something never registered is a no-op.

    callbacks.unregister(thing.a_method)


def test_registration_does_not_keep_alive():

    callbacks = Callbacks('unit test')
    thing = Referenced()

    callbacks.register(thing.a_method)
    del thing

    # The dead reference is pruned the next time the callbacks are invoked.

    callbacks.propagate('watch1', True)
    assert len(callbacks) == 0


def test_failing_callback():

    callbacks = Callbacks('unit test')
    calls = list()

    def explode(value):
        calls.append('explode')
        raise RuntimeError('callback failure')

    def record(value):
        calls.append(value)

    callbacks.register(explode)
    callbacks.register(record)

    callbacks.propagate('value')
    assert calls == ['explode', 'value']


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
