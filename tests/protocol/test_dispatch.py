import threading
import pytest
import sensorlink

from sensorlink.protocol import Dispatcher, Message, Path, SinglePathMessageHandler


class Recorder:

    def __init__(self, path, name=None, log=None):
        self.path = sensorlink.protocol.paths.lookup(path)
        self.name = name
        self.log = log
        self.messages = list()

    def handle_message(self, message):
        self.messages.append(message)
        if self.log is not None:
            self.log.append(self.name)


def test_exact_path():

    dispatcher = Dispatcher()

    status = Recorder(Path.SET_STATUS)
    response = Recorder(Path.SENSOR_DATA_REQUEST_RESPONSE)

    dispatcher.register(status)
    dispatcher.register(response)

    dispatcher.dispatch(Message(Path.SENSOR_DATA_REQUEST_RESPONSE, b'{}', 'watch1'))
    dispatcher.dispatch(Message(Path.SET_STATUS, b'ok', 'watch1'))

    assert len(response.messages) == 1
    assert len(status.messages) == 1

    assert response.messages[0].path == '/sensor_data_request_response'
    assert status.messages[0].path == '/set_status'
    assert status.messages[0].data == b'ok'


def test_no_prefix_matching():

    dispatcher = Dispatcher()
    request = Recorder(Path.SENSOR_DATA_REQUEST)
    dispatcher.register(request)

    # '/sensor_data_request' is a prefix of the response path; it must not
    # pick up responses.

    invoked = dispatcher.dispatch(Message(Path.SENSOR_DATA_REQUEST_RESPONSE, b'', 'watch1'))

    assert invoked == 0
    assert request.messages == []


def test_unknown_path():

    dispatcher = Dispatcher()
    status = Recorder(Path.SET_STATUS)
    dispatcher.register(status)

    invoked = dispatcher.dispatch(Message('/set_status/extra', b'', 'watch1'))
    assert invoked == 0
    assert status.messages == []

    # Member names are accepted when registering, never on the wire.

    for alias in ('SET_STATUS', b'SET_STATUS', 'set_status', '/SET_STATUS'):
        invoked = dispatcher.dispatch(Message(alias, b'x', 'watch1'))
        assert invoked == 0

    assert status.messages == []

    with pytest.raises(ValueError):
        SinglePathMessageHandler('/not_a_path')

    class Bogus:
        path = '/bogus'

        def handle_message(self, message):
            pass

    with pytest.raises(ValueError):
        dispatcher.register(Bogus())


def test_registration_order():

    dispatcher = Dispatcher()
    log = list()

    for name in ('first', 'second', 'third'):
        dispatcher.register(Recorder(Path.CLOSING, name, log))

    dispatcher.dispatch(Message(Path.CLOSING, b'label', 'watch1'))

    assert log == ['first', 'second', 'third']


def test_idempotent_registration():

    dispatcher = Dispatcher()
    closing = Recorder(Path.CLOSING)

    dispatcher.register(closing)
    dispatcher.register(closing)
    assert len(dispatcher) == 1
    assert closing in dispatcher

    dispatcher.dispatch(Message(Path.CLOSING, b'', 'watch1'))
    assert len(closing.messages) == 1

    dispatcher.unregister(closing)
    dispatcher.unregister(closing)
    assert len(dispatcher) == 0
    assert closing not in dispatcher

    dispatcher.dispatch(Message(Path.CLOSING, b'', 'watch1'))
    assert len(closing.messages) == 1


def test_failing_handler():

    dispatcher = Dispatcher()
    log = list()

    def explode(message):
        log.append('explode')
        raise RuntimeError('handler failure')

    dispatcher.register(SinglePathMessageHandler(Path.GET_STATUS, explode))
    dispatcher.register(Recorder(Path.GET_STATUS, 'after', log))

    invoked = dispatcher.dispatch(Message(Path.GET_STATUS, b'', 'watch1'))

    assert invoked == 2
    assert log == ['explode', 'after']


def test_handlers_snapshot():

    dispatcher = Dispatcher()
    first = Recorder(Path.SET_STATUS)
    second = Recorder(Path.SET_STATUS)

    dispatcher.register(first)
    dispatcher.register(second)

    assert dispatcher.handlers(Path.SET_STATUS) == (first, second)
    assert dispatcher.handlers('/set_status') == (first, second)
    assert dispatcher.handlers('CLOSING') == ()


def test_register_during_dispatch():
    """ Registration and removal are expected to happen while other threads
        are dispatching. Neither side should raise.
    """

    dispatcher = Dispatcher()
    status = Recorder(Path.SET_STATUS)
    dispatcher.register(status)

    stop = threading.Event()
    errors = list()

    def churn():
        while stop.is_set() == False:
            extra = Recorder(Path.SET_STATUS)
            try:
                dispatcher.register(extra)
                dispatcher.unregister(extra)
            except Exception as e:
                errors.append(e)

    thread = threading.Thread(target=churn)
    thread.daemon = True
    thread.start()

    for count in range(2000):
        dispatcher.dispatch(Message(Path.SET_STATUS, b'', 'watch1'))

    stop.set()
    thread.join(2)

    assert errors == []
    assert len(status.messages) == 2000


def test_dispatcher_as_receiver(exchange, recorder, wait_for):

    dispatcher = Dispatcher()
    status = Recorder(Path.SET_STATUS)
    dispatcher.register(status)

    receiving = sensorlink.transport.LocalTransport(exchange, 'phone', dispatcher)
    receiving.open()

    sending = recorder('watch1')
    sending.send(Path.SET_STATUS, b'battery 80%', 'phone')

    assert wait_for(lambda: len(status.messages) == 1)

    message = status.messages[0]
    assert sensorlink.protocol.source_node_id(message) == 'watch1'
    assert sensorlink.protocol.data_as_string(message) == 'battery 80%'

    receiving.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
