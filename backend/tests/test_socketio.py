from conftest import payloads


def _host_session(make_sio_client, game_type=None):
    host = make_sio_client()
    host.emit('create-session', {'gameType': game_type} if game_type else None)
    created = payloads(host.get_received(), 'session-created')
    assert len(created) == 1
    session_id = created[0]['sessionId']
    host.emit('host-attach', {'sessionId': session_id})
    return host, session_id


def _join(make_sio_client, session_id, name):
    player = make_sio_client()
    player.emit('join-session', {'sessionId': session_id, 'player': {'name': name}})
    return player


def test_create_session_announces_join_link(make_sio_client):
    host = make_sio_client()
    host.emit('create-session')
    created = payloads(host.get_received(), 'session-created')[0]
    assert created['joinUrl'] == f"http://games.test/join.html?session={created['sessionId']}"
    assert created['qrCode'].startswith('data:image/png;base64,')


def test_join_broadcasts_roster_to_room(make_sio_client):
    host, session_id = _host_session(make_sio_client)
    ann = _join(make_sio_client, session_id, 'Ann')
    joined = payloads(host.get_received(), 'player-joined')
    assert joined[-1]['player']['name'] == 'Ann'
    assert [p['name'] for p in joined[-1]['players']] == ['Ann']

    ann.get_received()
    _join(make_sio_client, session_id, 'Bo')
    seen_by_ann = payloads(ann.get_received(), 'player-joined')
    assert [p['name'] for p in seen_by_ann[-1]['players']] == ['Ann', 'Bo']


def test_trivia_round(make_sio_client, client):
    host, session_id = _host_session(make_sio_client)
    ann = _join(make_sio_client, session_id, 'Ann')
    bo = _join(make_sio_client, session_id, 'Bo')

    host.emit('start-game', {'sessionId': session_id, 'gameType': 'trivia'})
    started = payloads(ann.get_received(), 'game-started')
    assert started[-1]['gameType'] == 'trivia'
    assert started[-1]['gameState']['currentQuestionIndex'] == 0
    bo.get_received()
    host.get_received()

    ann.emit('submit-answer', {'sessionId': session_id, 'answer': 'Paris'})
    bo.emit('submit-answer', {'sessionId': session_id, 'answer': 'London'})
    results = payloads(host.get_received(), 'answer-result')
    assert [(r['playerName'], r['isCorrect']) for r in results] == [('Ann', True), ('Bo', False)]
    assert all(r['correctAnswer'] == 'Paris' for r in results)

    state = client.get(f'/api/sessions/{session_id}').get_json()
    assert {p['name']: p['score'] for p in state['players']} == {'Ann': 1, 'Bo': 0}

    host.emit('advance-question', {'sessionId': session_id})
    nxt = payloads(bo.get_received(), 'next-question')
    assert nxt[-1]['questionIndex'] == 1
    assert nxt[-1]['question']['text'] == 'What is 2 + 2?'


def test_trivia_runs_to_final_scores(make_sio_client):
    host, session_id = _host_session(make_sio_client, 'trivia')
    ann = _join(make_sio_client, session_id, 'Ann')
    host.emit('start-game', {'sessionId': session_id})
    ann.emit('submit-answer', {'sessionId': session_id, 'answer': 'Paris'})
    for _ in range(5):
        host.emit('advance-question', session_id)
    received = ann.get_received()
    assert len(payloads(received, 'next-question')) == 4
    assert payloads(received, 'game-ended') == [{'players': [{'name': 'Ann', 'score': 1}]}]


def test_player_cannot_drive_the_game(make_sio_client, client):
    host, session_id = _host_session(make_sio_client)
    ann = _join(make_sio_client, session_id, 'Ann')

    ann.emit('start-game', {'sessionId': session_id, 'gameType': 'trivia'})
    assert payloads(host.get_received(), 'game-started') == []

    host.emit('start-game', {'sessionId': session_id, 'gameType': 'trivia'})
    host.get_received()
    ann.get_received()

    ann.emit('advance-question', {'sessionId': session_id})
    assert payloads(host.get_received(), 'next-question') == []
    assert payloads(ann.get_received(), 'error') == []
    state = client.get(f'/api/sessions/{session_id}').get_json()
    assert state['gameState']['currentQuestionIndex'] == 0


def test_bingo_round(make_sio_client, client):
    host, session_id = _host_session(make_sio_client)
    ann = _join(make_sio_client, session_id, 'Ann')
    bo = _join(make_sio_client, session_id, 'Bo')
    host.emit('start-game', {'sessionId': session_id, 'gameType': 'bingo'})
    started = payloads(ann.get_received(), 'game-started')[-1]
    assert started['gameState'] == {'calledNumbers': [], 'patterns': ['single-line', '4-corners', 'full-card']}
    bo.get_received()
    host.get_received()

    host.emit('call-number', {'sessionId': session_id})
    called = payloads(ann.get_received(), 'number-called')[-1]
    assert called['calledNumbers'] == [called['number']]
    assert 1 <= called['number'] <= 75

    state = client.get(f'/api/sessions/{session_id}').get_json()
    ann_state = next(p for p in state['players'] if p['name'] == 'Ann')
    top_row = [cell['value'] for cell in ann_state['bingoCard'][0]]
    for number in top_row:
        ann.emit('mark-number', {'sessionId': session_id, 'number': number})
    marked = payloads(ann.get_received(), 'number-marked')
    assert [m['number'] for m in marked] == top_row
    # Marks are private to the player
    assert payloads(bo.get_received(), 'number-marked') == []

    ann.emit('claim-pattern', {'sessionId': session_id, 'pattern': '4-corners'})
    assert payloads(ann.get_received(), 'invalid-bingo') == [{'pattern': '4-corners'}]
    assert payloads(host.get_received(), 'invalid-bingo') == []

    ann.emit('claim-pattern', {'sessionId': session_id, 'pattern': 'single-line'})
    winner = payloads(bo.get_received(), 'bingo-winner')
    assert winner[-1]['playerName'] == 'Ann'
    assert winner[-1]['pattern'] == 'single-line'


def test_player_cannot_call_numbers(make_sio_client, client):
    host, session_id = _host_session(make_sio_client, 'bingo')
    ann = _join(make_sio_client, session_id, 'Ann')
    host.emit('start-game', session_id)
    host.get_received()

    ann.emit('call-number', {'sessionId': session_id})
    assert payloads(host.get_received(), 'number-called') == []
    state = client.get(f'/api/sessions/{session_id}').get_json()
    assert state['gameState']['calledNumbers'] == []


def test_error_notices_for_bad_requests(make_sio_client):
    host, session_id = _host_session(make_sio_client)
    stranger = make_sio_client()

    stranger.emit('join-session', {'sessionId': 'bad-id', 'player': {'name': 'X'}})
    stranger.emit('join-session', {'sessionId': 'abcd1234', 'player': {'name': 'X'}})
    stranger.emit('join-session', {'sessionId': session_id, 'player': {'name': '   '}})
    messages = [p['message'] for p in payloads(stranger.get_received(), 'error')]
    assert messages == ['Invalid session ID', 'Session not found', 'Invalid player name']
    assert payloads(host.get_received(), 'player-joined') == []


def test_malformed_payloads_are_rejected(make_sio_client):
    host, session_id = _host_session(make_sio_client, 'bingo')
    host.emit('start-game', {'sessionId': session_id})
    host.get_received()

    host.emit('mark-number', {'sessionId': session_id, 'number': 'seven'})
    host.emit('mark-number', {'sessionId': session_id, 'number': 99})
    host.emit('submit-answer', {'answer': 'Paris'})
    errors = [p['message'] for p in payloads(host.get_received(), 'error')]
    assert len(errors) == 3
    assert errors[0].startswith('Invalid mark-number payload')
    assert 'sessionId' in errors[2]


def test_host_attach_to_unknown_session_is_silent(make_sio_client):
    host = make_sio_client()
    host.get_received()
    host.emit('host-attach', {'sessionId': 'abcd1234'})
    assert host.get_received() == []


def test_disconnect_broadcasts_player_left(make_sio_client, client):
    host, session_id = _host_session(make_sio_client)
    ann = _join(make_sio_client, session_id, 'Ann')
    _join(make_sio_client, session_id, 'Bo')
    host.get_received()

    ann.disconnect()
    left = payloads(host.get_received(), 'player-left')
    assert left[-1]['playerName'] == 'Ann'
    assert [p['name'] for p in left[-1]['players']] == ['Bo']
    assert client.get(f'/api/sessions/{session_id}').get_json()['playerCount'] == 1


def test_late_joiner_gets_bingo_card(make_sio_client, client):
    host, session_id = _host_session(make_sio_client, 'bingo')
    host.emit('start-game', session_id)
    late = _join(make_sio_client, session_id, 'Late')
    joined = payloads(host.get_received(), 'player-joined')[-1]
    assert joined['player']['bingoCard'][2][2] == {'value': 'FREE', 'marked': True}
    late.emit('mark-number', {'sessionId': session_id, 'number': 1})
    assert payloads(late.get_received(), 'number-marked') == [{'number': 1}]
