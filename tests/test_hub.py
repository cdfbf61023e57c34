""" Exercise a hub against live remote peers, all attached to the same
    in-process exchange.
"""

import threading
import pytest
import sensorlink

from sensorlink.aggregate import make_key
from sensorlink.data import Reading, SensorDataRequest
from sensorlink.protocol import Path


class Sampler:
    """ Produce one reading per sensor every time it is asked. """

    def __init__(self):
        self.timestamp = 0
        self.lock = threading.Lock()

    def __call__(self, sensor):
        self.lock.acquire()
        self.timestamp += 1
        timestamp = self.timestamp
        self.lock.release()

        return [Reading(timestamp, [float(sensor.type)])]


@pytest.fixture
def remote(exchange, settings):
    """ Return a factory for started :class:`sensorlink.Remote` peers. """

    created = list()

    def start(node_id):
        transport = sensorlink.transport.LocalTransport(exchange, node_id)
        remote = sensorlink.Remote(transport, Sampler(), settings)
        remote.start()
        created.append(remote)
        return remote

    yield start

    for remote in created:
        remote.close()


def headings(hub):
    return sorted((card.peer_id, card.heading) for card in hub.cards())


def requests_in(received):

    requests = list()

    for message in received:
        if message.path == Path.SENSOR_DATA_REQUEST.value:
            requests.append(SensorDataRequest.from_json(message.data))

    return requests


def test_select_creates_card(hub, remote, wait_for):

    watch = remote('watch1')

    request = hub.select_sensors('watch1', ['HEART_RATE'])
    assert request.active
    assert request.source_node_id == 'phone'

    assert wait_for(lambda: headings(hub) == [('watch1', 'HEART_RATE')])
    assert watch.streaming() == ('phone',)

    card = hub.card(make_key('watch1', 'HEART_RATE'))
    assert card.sub_heading == 'Watch One'
    assert len(card.batch) >= 1

    # Data keeps accumulating into the same card.

    count = len(card.batch)
    assert wait_for(lambda: len(hub.card(card.key).batch) > count)
    assert len(hub.cards()) == 1


def test_replace_selection(hub, remote, wait_for):

    remote('watch1')

    hub.select_sensors('watch1', ['HEART_RATE'])
    assert wait_for(lambda: headings(hub) == [('watch1', 'HEART_RATE')])

    # The old card goes away as part of the selection, not later.

    hub.select_sensors('watch1', ['ACCELEROMETER'])
    assert ('watch1', 'HEART_RATE') not in headings(hub)

    assert hub.is_sensor_wanted('watch1', 'HEART_RATE') == False
    assert hub.is_sensor_wanted('watch1', 'ACCELEROMETER') == True

    assert wait_for(lambda: headings(hub) == [('watch1', 'ACCELEROMETER')])

    # Heart rate data still in flight when the selection changed must not
    # bring the card back.

    hub.flush()
    assert headings(hub) == [('watch1', 'ACCELEROMETER')]


def test_multiple_peers(hub, remote, wait_for):

    remote('watch1')
    remote('watch2')

    hub.select_sensors('watch1', ['HEART_RATE', 'LIGHT'])
    hub.select_sensors('watch2', ['HEART_RATE'])

    expected = [('watch1', 'HEART_RATE'), ('watch1', 'LIGHT'), ('watch2', 'HEART_RATE')]
    assert wait_for(lambda: headings(hub) == expected)

    cards = dict((card.key, card) for card in hub.cards())
    assert cards[make_key('watch2', 'HEART_RATE')].sub_heading == 'Watch Two'


def test_stop_requesting(hub, remote, wait_for):

    watch = remote('watch1')

    hub.select_sensors('watch1', ['LIGHT'])
    assert wait_for(lambda: headings(hub) == [('watch1', 'LIGHT')])
    assert watch.streaming() == ('phone',)
    assert hub.is_requesting()

    assert hub.stop_requesting() == True
    assert hub.stop_requesting() == False
    assert hub.is_requesting() == False
    assert hub.is_requesting('watch1', 'LIGHT') == False

    assert wait_for(lambda: watch.streaming() == ())

    # The card is stale, not gone, until it is evicted.

    assert len(hub.cards()) == 1
    assert hub.evict_unwanted() == [make_key('watch1', 'LIGHT')]
    assert hub.cards() == []


def test_stop_sends_once(hub, recorder, exchange):

    watch1 = recorder('watch1')
    watch2 = recorder('watch2')

    hub.select_sensors('watch1', ['LIGHT'])
    hub.select_sensors('watch2', ['HEART_RATE'])
    exchange.flush()

    # Every selection re-sends every tracked request.

    assert len(requests_in(watch1.received)) == 2
    assert len(requests_in(watch2.received)) == 1

    del watch1.received[:]
    del watch2.received[:]

    hub.stop()
    exchange.flush()

    for watch in (watch1, watch2):
        requests = requests_in(watch.received)
        assert len(requests) == 1
        assert requests[0].active == False
        assert requests[0].source_node_id == 'phone'

        closing = [message for message in watch.received if message.path == Path.CLOSING.value]
        assert len(closing) == 1
        assert closing[0].data == b'unit test'

    # Stopping again sends nothing.

    del watch1.received[:]
    hub.stop()
    exchange.flush()
    assert watch1.received == []


def test_restart_resends(hub, recorder, exchange):

    watch = recorder('watch1')

    hub.select_sensors('watch1', ['LIGHT'])
    hub.stop()
    exchange.flush()
    del watch.received[:]

    # Stopped requests are still tracked; starting again tells the peer
    # once more that the request has ended.

    hub.start()
    exchange.flush()

    requests = requests_in(watch.received)
    assert len(requests) == 1
    assert requests[0].active == False


def test_unreachable_peer(hub, recorder, exchange):

    watch1 = recorder('watch1')
    watch2 = recorder('watch2')
    exchange.set_reachable('watch2', False)

    hub.select_sensors('watch2', ['LIGHT'])
    hub.select_sensors('watch1', ['LIGHT'])
    exchange.flush()

    # A failed send to one peer does not prevent sending to the others.

    assert len(requests_in(watch1.received)) == 1
    assert watch2.received == []


def test_data_changed(hub, recorder, wait_for):

    watch = recorder('watch1')
    changes = list()
    received = list()

    def changed(peer_id, batch):
        changes.append((peer_id, batch.source, len(batch)))
        received.append(batch)

    hub.data_changed.register(changed)
    hub.select_sensors('watch1', ['LIGHT'])

    batch = sensorlink.data.DataBatch('LIGHT', [Reading(1, [10.0]), Reading(2, [11.0])])
    unwanted = sensorlink.data.DataBatch('PRESSURE', [Reading(1, [1000.0])])
    response = sensorlink.data.DataRequestResponse('watch1', [unwanted, batch])

    watch.send(Path.SENSOR_DATA_REQUEST_RESPONSE, response.to_json(), 'phone')

    assert wait_for(lambda: len(changes) == 1)
    hub.flush()

    assert changes == [('watch1', 'LIGHT', 2)]
    assert headings(hub) == [('watch1', 'LIGHT')]

    # The batch handed to callbacks belongs to them; the card is separate.

    received[0].add(Reading(3, [12.0]))
    assert len(hub.cards()[0].batch) == 2


def test_malformed_response(hub, recorder, wait_for):

    watch = recorder('watch1')
    hub.select_sensors('watch1', ['LIGHT'])

    watch.send(Path.SENSOR_DATA_REQUEST_RESPONSE, b'not json at all', 'phone')

    batch = sensorlink.data.DataBatch('LIGHT', [Reading(1, [10.0])])
    response = sensorlink.data.DataRequestResponse('watch1', [batch])
    watch.send(Path.SENSOR_DATA_REQUEST_RESPONSE, response.to_json(), 'phone')

    assert wait_for(lambda: headings(hub) == [('watch1', 'LIGHT')])


def test_status(hub, remote, wait_for):

    remote('watch1')

    assert hub.status('watch1') is None
    assert hub.reachability.is_reachable('watch1') == False

    hub.request_status()

    assert wait_for(lambda: hub.status('watch1') is not None)

    status = sensorlink.json.loads(hub.status('watch1'))
    assert status['deviceLabel'] == 'unit test'
    assert status['streaming'] == []

    assert hub.reachability.is_reachable('watch1')


def test_closing_peer(hub, remote, wait_for):

    watch = remote('watch1')
    changes = list()

    def changed(node_id, reachable):
        changes.append((node_id, reachable))

    hub.reachability.changed.register(changed)

    hub.request_status()
    assert wait_for(lambda: hub.reachability.is_reachable('watch1'))

    watch.stop()

    assert wait_for(lambda: hub.reachability.is_reachable('watch1') == False)
    assert changes == [('watch1', True), ('watch1', False)]


def test_hub_closing_stops_streams(hub, remote, wait_for):

    watch = remote('watch1')

    hub.select_sensors('watch1', ['LIGHT'])
    assert wait_for(lambda: watch.streaming() == ('phone',))

    hub.stop()

    assert wait_for(lambda: watch.streaming() == ())


def test_reachability_probe(exchange, peers, settings, remote, wait_for):
    """ A hub with a reachability period probes its peers on its own. """

    settings = sensorlink.config.Settings(settings, reachability_period=0.05, reachability_timeout=10)

    transport = sensorlink.transport.LocalTransport(exchange, 'phone')
    hub = sensorlink.Hub(transport, peers, settings)
    hub.start()

    try:
        remote('watch2')
        assert wait_for(lambda: hub.reachability.is_reachable('watch2'))
    finally:
        hub.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
