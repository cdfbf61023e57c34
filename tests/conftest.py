import time
import pytest
import sensorlink


@pytest.fixture
def settings():
    """ Settings suitable for unit tests: fast streaming, and no background
        reachability probing unless a test asks for it.
    """

    return sensorlink.config.Settings(
        device_label='unit test',
        worker_count=2,
        handoff_timeout=0.5,
        stream_period=0.05,
        batch_capacity=50,
        reachability_period=0,
        reachability_timeout=1.0,
    )


@pytest.fixture
def peers():

    directory = sensorlink.PeerDirectory()
    directory.add(sensorlink.Peer('phone', 'Pixel'))
    directory.add(sensorlink.Peer('watch1', 'Watch One'))
    directory.add(sensorlink.Peer('watch2', 'Watch Two'))
    return directory


@pytest.fixture
def exchange():
    return sensorlink.transport.Exchange()


@pytest.fixture
def hub(exchange, peers, settings):

    transport = sensorlink.transport.LocalTransport(exchange, 'phone')
    hub = sensorlink.Hub(transport, peers, settings)
    hub.start()

    yield hub

    hub.close()


@pytest.fixture
def recorder(exchange):
    """ Return a factory for peers that do nothing but record every message
        they receive.
    """

    created = list()

    def attach(node_id):
        transport = sensorlink.transport.LocalTransport(exchange, node_id)
        transport.received = list()
        transport.receiver = transport.received.append
        transport.open()
        created.append(transport)
        return transport

    yield attach

    for transport in created:
        transport.close()


@pytest.fixture
def wait_for():
    """ Return a function that polls a *condition* until it returns True, or
        until *timeout* seconds have elapsed. The final result of the
        condition is returned.
    """

    def wait(condition, timeout=2):
        expiration = time.time() + timeout
        while time.time() < expiration:
            if condition():
                return True
            time.sleep(0.01)
        return condition()

    return wait


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
