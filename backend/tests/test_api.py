from blockgame.services.grid import StoreUnavailable, now_ms


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_get_all_blocks(client):
    res = client.get('/api/blocks')
    assert res.status_code == 200
    blocks = res.get_json()
    assert len(blocks) == 100
    assert all(b['owner'] is None and b['color'] is None for b in blocks)
    assert (blocks[0]['row'], blocks[0]['col']) == (0, 0)
    assert (blocks[0]['rowNum'], blocks[0]['colNum']) == (0, 0)
    assert (blocks[-1]['row'], blocks[-1]['col']) == (9, 9)


def test_get_block_and_missing_block(client, grid):
    grid.claims.claim(23, 'A', '#FF0000')
    res = client.get('/api/blocks/23')
    assert res.status_code == 200
    block = res.get_json()
    assert (block['row'], block['col'], block['owner'], block['color']) == (2, 2, 'A', '#FF0000')

    res = client.get('/api/blocks/99999')
    assert res.status_code == 404
    assert 'error' in res.get_json()


def test_round_time_is_integer_epoch_ms(client, grid):
    res = client.get('/api/blocks/round-time')
    assert res.status_code == 200
    end_time = res.get_json()
    assert isinstance(end_time, int)
    assert end_time == grid.timer.get_end_time()


def test_reset_clears_board_and_restarts_round(client, grid):
    grid.claims.claim(1, 'A', '#FF0000')
    grid.claims.claim(2, 'B', '#00FF00')
    before = now_ms()

    res = client.post('/api/blocks/reset')
    after = now_ms()

    assert res.status_code == 204
    assert res.data == b''
    blocks = client.get('/api/blocks').get_json()
    assert all(b['owner'] is None and b['color'] is None for b in blocks)
    end_time = client.get('/api/blocks/round-time').get_json()
    assert before + 30000 <= end_time <= after + 30000 + 1
    assert grid.timer.generation == 1


def test_register_user_cycles_colors(client):
    first = client.post('/api/users/register').get_json()
    second = client.post('/api/users/register').get_json()
    assert first['id'].startswith('User-')
    assert first['color'] == '#6C63FF'
    assert second['color'] == '#4CAF50'


def test_store_outage_is_a_server_error(client, grid, monkeypatch):
    def unavailable():
        raise StoreUnavailable()

    monkeypatch.setattr(grid.store, 'get_all', unavailable)
    res = client.get('/api/blocks')
    assert res.status_code == 503
    assert res.get_json()['error'] == 'Block store unavailable'
    # the server keeps serving other requests
    assert client.get('/api/blocks/round-time').status_code == 200
