import time


def _wait_for(sio_client, name, timeout=3.0, namespace='/ws'):
    """Collect packets until one named ``name`` arrives; events are pushed from a background task."""
    deadline = time.time() + timeout
    seen = []
    while time.time() < deadline:
        time.sleep(0.1)
        seen.extend(sio_client.get_received(namespace))
        if any(pkt['name'] == name for pkt in seen):
            break
    return seen


def test_connect_sends_snapshot(sio_client, grid):
    assert sio_client.is_connected('/ws')
    received = sio_client.get_received('/ws')
    snapshots = [pkt for pkt in received if pkt['name'] == 'snapshot']
    assert len(snapshots) == 1
    payload = snapshots[0]['args'][0]
    assert len(payload['blocks']) == 100
    assert payload['endTime'] == grid.timer.get_end_time()


def test_claim_is_broadcast_to_every_observer(flask_app, sio_client, grid):
    from blockgame import socketio as _sio
    other = _sio.test_client(flask_app, namespace='/ws')
    sio_client.get_received('/ws')
    other.get_received('/ws')

    ack = sio_client.emit('claim', {'blockId': 7, 'owner': 'A', 'color': '#FF0000'},
                          namespace='/ws', callback=True)
    assert ack['ok'] is True
    assert ack['block']['owner'] == 'A'

    for observer in (sio_client, other):
        events = _wait_for(observer, 'block_changed')
        changed = [e['args'][0] for e in events if e['name'] == 'block_changed']
        assert changed == [ack['block']]

    assert grid.store.get_by_id(7).color == '#FF0000'
    other.disconnect(namespace='/ws')


def test_claim_on_missing_block_reports_error_to_caller(flask_app, sio_client):
    from blockgame import socketio as _sio
    other = _sio.test_client(flask_app, namespace='/ws')
    sio_client.get_received('/ws')
    other.get_received('/ws')

    ack = sio_client.emit('claim', {'blockId': 99999, 'owner': 'A', 'color': '#FF0000'},
                          namespace='/ws', callback=True)
    assert ack['ok'] is False

    received = sio_client.get_received('/ws')
    errors = [e for e in received if e['name'] == 'error']
    assert errors and errors[0]['args'][0]['blockId'] == 99999

    time.sleep(0.3)
    assert not any(e['name'] == 'block_changed' for e in sio_client.get_received('/ws'))
    assert not any(e['name'] in ('block_changed', 'error') for e in other.get_received('/ws'))
    other.disconnect(namespace='/ws')


def test_claim_with_malformed_payload_is_rejected(sio_client, grid):
    for payload in ([7, 'A', '#FF0000'], 'block 7', 7, None):
        sio_client.get_received('/ws')
        ack = sio_client.emit('claim', payload, namespace='/ws', callback=True)
        assert ack['ok'] is False

        errors = [e for e in sio_client.get_received('/ws') if e['name'] == 'error']
        assert len(errors) == 1
        assert errors[0]['args'][0]['blockId'] is None

    assert grid.store.get_by_id(7).owner is None
    # the connection is still usable afterwards
    ack = sio_client.emit('claim', {'blockId': 7, 'owner': 'A', 'color': '#FF0000'},
                          namespace='/ws', callback=True)
    assert ack['ok'] is True


def test_http_reset_is_pushed_as_round_reset(sio_client, client, grid):
    sio_client.get_received('/ws')
    assert client.post('/api/blocks/reset').status_code == 204

    events = _wait_for(sio_client, 'round_reset')
    resets = [e['args'][0] for e in events if e['name'] == 'round_reset']
    assert resets == [{'endTime': grid.timer.get_end_time()}]


def test_disconnect_releases_subscription(flask_app, grid):
    from blockgame import socketio as _sio
    observer = _sio.test_client(flask_app, namespace='/ws')
    assert grid.hub.subscriber_count == 1
    observer.disconnect(namespace='/ws')
    assert grid.hub.subscriber_count == 0


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)
