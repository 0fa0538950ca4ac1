def _issue(client, name=None):
    body = {'name': name} if name is not None else {}
    res = client.post('/session/ticket', json=body)
    assert res.status_code == 200
    return res.get_json()['ticketId']


def _draw_until_complete(client, numbers):
    drawn = []
    while not set(numbers).issubset(drawn):
        res = client.get('/session/draw').get_json()
        assert 'number' in res
        drawn = res['drawn']
    return drawn


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_issue_ticket_and_fetch(client):
    ticket_id = _issue(client, 'Alice')
    assert 10000 <= ticket_id <= 99999

    res = client.get(f'/session/ticket/{ticket_id}')
    assert res.status_code == 200
    ticket = res.get_json()
    assert ticket['id'] == ticket_id
    assert ticket['name'] == 'Alice'
    assert ticket['ready'] is False
    assert ticket['winner'] is False
    assert len(ticket['numbers']) == 15
    assert len(set(ticket['numbers'])) == 15
    assert all(1 <= n <= 75 for n in ticket['numbers'])


def test_issue_ticket_default_name(client):
    ticket_id = _issue(client)
    ticket = client.get(f'/session/ticket/{ticket_id}').get_json()
    assert ticket['name'] == f'Player {ticket_id}'


def test_unknown_ticket_is_404(client):
    res = client.get('/session/ticket/12345')
    assert res.status_code == 404
    assert 'error' in res.get_json()
    assert client.post('/session/ready/12345').status_code == 404
    assert client.post('/session/bingo/12345', json={'marked': []}).status_code == 404
    assert client.get('/session/ticket/abc').status_code == 404


def test_bulk_rejects_bad_input(client):
    assert client.post('/session/tickets/bulk', json={'names': []}).status_code == 400
    assert client.post('/session/tickets/bulk', json={'names': 'Alice'}).status_code == 400
    assert client.post('/session/tickets/bulk', json={}).status_code == 400
    res = client.post('/session/tickets/bulk', json={'names': ['  ', '']})
    assert res.status_code == 400
    assert 'error' in res.get_json()


def test_bulk_replaces_tickets_and_skips_blank_names(client):
    old_id = _issue(client, 'Solo')
    res = client.post('/session/tickets/bulk', json={'names': [' Ann ', '', 'Ben']})
    assert res.status_code == 200
    issued = res.get_json()
    assert [t['name'] for t in issued] == ['Ann', 'Ben']
    assert len({t['ticketId'] for t in issued}) == 2

    state = client.get('/session/state').get_json()
    assert state['expectedPlayerCount'] == 3
    assert {p['id'] for p in state['players']} == {t['ticketId'] for t in issued}
    if old_id not in {t['ticketId'] for t in issued}:
        assert client.get(f'/session/ticket/{old_id}').status_code == 404


def test_readiness_gate_blocks_start(client):
    issued = client.post('/session/tickets/bulk', json={'names': ['A', 'B', 'C']}).get_json()
    ids = [t['ticketId'] for t in issued]

    assert client.post(f'/session/ready/{ids[0]}').get_json() == {'ok': True, 'allReady': False}
    assert client.post(f'/session/ready/{ids[1]}').get_json() == {'ok': True, 'allReady': False}
    assert client.post('/session/start').get_json() == {'ok': False, 'reason': 'not_all_ready'}

    assert client.post(f'/session/ready/{ids[2]}').get_json() == {'ok': True, 'allReady': True}
    assert client.post('/session/start').get_json() == {'ok': True}


def test_start_without_expectation_is_allowed(client):
    ticket_id = _issue(client)
    # Readiness never reported without a declared player count
    assert client.post(f'/session/ready/{ticket_id}').get_json()['allReady'] is False
    assert client.post('/session/start').get_json() == {'ok': True}


def test_draw_requires_running(client):
    assert client.get('/session/draw').get_json() == {'ok': False}
    client.post('/session/start')
    res = client.get('/session/draw').get_json()
    assert 1 <= res['number'] <= 75
    assert res['drawn'] == [res['number']]
    assert res['players'] == []
    assert client.post('/session/stop').get_json() == {'ok': True}
    assert client.get('/session/draw').get_json() == {'ok': False}


def test_draw_exhausts_pool(client):
    client.post('/session/start')
    seen = []
    for _ in range(75):
        res = client.get('/session/draw').get_json()
        seen.append(res['number'])
    assert sorted(seen) == list(range(1, 76))
    assert res['drawn'] == seen
    # Last draw moved the session back to idle
    assert client.get('/session/draw').get_json() == {'ok': False}
    assert client.post('/session/start').get_json() == {'ok': True}
    assert client.get('/session/draw').get_json() == {'done': True}


def test_bingo_ignores_client_marks(client):
    ticket_id = _issue(client)
    ticket = client.get(f'/session/ticket/{ticket_id}').get_json()
    res = client.post(f'/session/bingo/{ticket_id}', json={'marked': ticket['numbers']})
    assert res.get_json() == {'winner': False}
    assert client.get(f'/session/ticket/{ticket_id}').get_json()['winner'] is False


def test_non_object_json_body(client):
    res = client.post('/session/tickets/bulk', json=['A', 'B'])
    assert res.status_code == 400
    assert 'error' in res.get_json()

    res = client.post('/session/ticket', json=['x'])
    assert res.status_code == 200
    ticket_id = res.get_json()['ticketId']
    assert client.get(f'/session/ticket/{ticket_id}').get_json()['name'] == f'Player {ticket_id}'

    res = client.post(f'/session/bingo/{ticket_id}', json=[1, 2])
    assert res.status_code == 200
    assert res.get_json() == {'winner': False}


class _RepeatingIdRng:
    def __init__(self, ticket_id):
        self.ticket_id = ticket_id

    def randint(self, a, b):
        return self.ticket_id


def test_ticket_ids_exhausted_is_409(flask_app, client):
    ticket_id = _issue(client)
    flask_app.extensions['bingo_session'].tickets._rng = _RepeatingIdRng(ticket_id)
    res = client.post('/session/ticket', json={})
    assert res.status_code == 409
    assert 'error' in res.get_json()


def test_full_game_flow(client):
    issued = client.post('/session/tickets/bulk', json={'names': ['A', 'B']}).get_json()
    ids = [t['ticketId'] for t in issued]
    assert client.post(f'/session/ready/{ids[0]}').get_json()['allReady'] is False
    assert client.post(f'/session/ready/{ids[1]}').get_json()['allReady'] is True
    assert client.post('/session/start').get_json() == {'ok': True}

    ticket = client.get(f'/session/ticket/{ids[0]}').get_json()
    _draw_until_complete(client, ticket['numbers'])

    res = client.post(f'/session/bingo/{ids[0]}', json={'marked': []})
    assert res.get_json() == {'winner': True}

    state = client.get('/session/state').get_json()
    assert state['gameOver'] is True
    assert state['status'] == 'over'
    winner = next(p for p in state['players'] if p['id'] == ids[0])
    assert winner['winner'] is True
    assert winner['hits'] == 15
    assert winner['progressPercent'] == 100

    assert client.get('/session/draw').get_json() == {'ok': False}
    assert client.post('/session/start').get_json() == {'ok': False, 'gameOver': True}


def test_reset_keeps_players(client):
    issued = client.post('/session/tickets/bulk', json={'names': ['A', 'B']}).get_json()
    ids = [t['ticketId'] for t in issued]
    for ticket_id in ids:
        client.post(f'/session/ready/{ticket_id}')
    client.post('/session/start')
    ticket = client.get(f'/session/ticket/{ids[0]}').get_json()
    _draw_until_complete(client, ticket['numbers'])
    assert client.post(f'/session/bingo/{ids[0]}').get_json() == {'winner': True}

    assert client.post('/session/reset').get_json() == {'ok': True}
    state = client.get('/session/state').get_json()
    assert state['drawn'] == []
    assert state['gameOver'] is False
    assert state['status'] == 'idle'
    assert state['expectedPlayerCount'] == 2
    assert [(p['id'], p['name']) for p in state['players']] == [(t['ticketId'], t['name']) for t in issued]
    assert all(p['ready'] is False and p['winner'] is False for p in state['players'])
    after = client.get(f'/session/ticket/{ids[0]}').get_json()
    assert after['numbers'] == ticket['numbers']


def test_newgame_clears_tickets(client):
    issued = client.post('/session/tickets/bulk', json={'names': ['A', 'B']}).get_json()
    assert client.post('/session/newgame').get_json() == {'ok': True}
    for t in issued:
        assert client.get(f"/session/ticket/{t['ticketId']}").status_code == 404
    state = client.get('/session/state').get_json()
    assert state['players'] == []
    assert state['expectedPlayerCount'] == 0
    assert state['drawn'] == []


def test_simulate_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['simulate', '--players', '2', '--seed', '7'])
    assert result.exit_code == 0
    assert 'Winner after' in result.output
