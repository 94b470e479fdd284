def _join(client, game_id, name):
    res = client.post('/api/games/join', json={'game_id': game_id, 'player_name': name})
    assert res.status_code == 201
    return res.get_json()['player']


def test_create_game(client):
    res = client.post('/api/games')
    assert res.status_code == 201
    data = res.get_json()
    assert data['current_round'] == 1
    assert data['is_complete'] is False
    assert data['secret_word']
    assert data['admin_secret_word']


def test_join_and_state(client):
    game = client.post('/api/games').get_json()
    res = client.post('/api/games/join', json={'game_id': game['id'], 'player_name': 'Alice'})
    assert res.status_code == 201
    body = res.get_json()
    assert body['player']['name'] == 'Alice'
    assert body['player']['score'] == 0
    assert any(p['name'] == 'Alice' for p in body['game']['players'])

    state = client.get(f"/api/games/{game['id']}").get_json()
    assert state['id'] == game['id']
    assert 'admin_secret_word' not in state
    assert state['round']['round_number'] == 1


def test_join_validation_and_missing_game(client):
    assert client.post('/api/games/join', json={'player_name': 'Alice'}).status_code == 400
    res = client.post('/api/games/join', json={'game_id': 'Atlantis', 'player_name': 'Alice'})
    assert res.status_code == 404
    assert res.get_json()['code'] == 'not_found'
    res = client.post('/api/games/join', json={'game_id': ['Atlantis'], 'player_name': 'Alice'})
    assert res.status_code == 400
    res = client.post('/api/games/join', json={'game_id': 'Atlantis', 'player_name': {'first': 'Alice'}})
    assert res.status_code == 400


def test_admin_routes_require_admin_login(client):
    game = client.post('/api/games').get_json()
    res = client.post(f"/api/games/{game['id']}/answer", json={'round': 1, 'correct_answer': 'cake'})
    assert res.status_code == 401
    res = client.post('/api/admin/login', json={'admin_secret_word': 'wrong'})
    assert res.status_code == 401


def test_admin_login_for_one_game_does_not_unlock_another(client, admin_game):
    other = client.post('/api/games').get_json()
    res = client.post(f"/api/games/{other['id']}/advance")
    assert res.status_code == 401


def test_guess_answer_override_and_winners_flow(client, admin_game):
    gid = admin_game['id']
    alice = _join(client, gid, 'Alice')
    bob = _join(client, gid, 'Bob')
    cara = _join(client, gid, 'Cara')

    assert client.post(f'/api/games/{gid}/guess', json={'player_id': alice['id'], 'round': 1, 'guess': 'statue'}).status_code == 201
    assert client.post(f'/api/games/{gid}/guess', json={'player_id': bob['id'], 'round': 1, 'guess': 'Liberty'}).status_code == 201

    # advancing before the answer is in is rejected
    res = client.post(f'/api/games/{gid}/advance')
    assert res.status_code == 409
    assert res.get_json()['code'] == 'round_not_complete'

    res = client.post(f'/api/games/{gid}/answer', json={'round': 1, 'correct_answer': 'Statue of Liberty'})
    assert res.status_code == 200
    players = {p['id']: p for p in res.get_json()['players']}
    assert players[alice['id']]['score'] == 1
    assert players[bob['id']]['score'] == 1
    assert players[cara['id']]['score'] == 0

    # second answer for the same round is rejected
    res = client.post(f'/api/games/{gid}/answer', json={'round': 1, 'correct_answer': 'Eiffel Tower'})
    assert res.status_code == 409
    assert res.get_json()['code'] == 'round_already_complete'

    # late guesses are rejected
    res = client.post(f'/api/games/{gid}/guess', json={'player_id': cara['id'], 'round': 1, 'guess': 'statue'})
    assert res.status_code == 409
    assert res.get_json()['code'] == 'round_closed'

    # admin credits Cara, who never guessed, then takes Bob's point away twice
    res = client.post(f'/api/games/{gid}/override', json={'player_id': cara['id'], 'round': 1, 'is_correct': True})
    assert res.status_code == 200
    assert res.get_json()['guess']['guess'] == '(No guess submitted)'
    for _ in range(2):
        res = client.post(f'/api/games/{gid}/override', json={'player_id': bob['id'], 'round': 1, 'is_correct': False})
        assert res.status_code == 200
    players = {p['id']: p for p in res.get_json()['players']}
    assert players[bob['id']]['score'] == 0
    assert players[cara['id']]['score'] == 1

    res = client.post(f'/api/games/{gid}/advance')
    assert res.status_code == 200
    assert res.get_json()['current_round'] == 2
    assert res.get_json()['round']['complete'] is False

    stats = client.get(f'/api/games/{gid}/rounds/1/stats').get_json()
    assert stats == {
        'total': 3,
        'submitted': 3,
        'correct': 2,
        'accuracy': 67,
        'round': stats['round'],
    }
    assert stats['round']['correct_answer'] == 'Statue of Liberty'

    # Alice and Cara tie at 1: one is POTUS, the other the only Vice-POTUS
    winners = client.post(f'/api/games/{gid}/winners').get_json()
    tied = {alice['id'], cara['id']}
    assert winners['potus']['id'] in tied
    assert [p['id'] for p in winners['vice_potus']] == list(tied - {winners['potus']['id']})

    state = client.get(f'/api/games/{gid}').get_json()
    assert state['is_complete'] is True
    potus = [p['id'] for p in state['players'] if p['is_potus']]
    assert potus == [winners['potus']['id']]


def test_guess_validation(client, admin_game):
    gid = admin_game['id']
    alice = _join(client, gid, 'Alice')
    assert client.post(f'/api/games/{gid}/guess', json={'player_id': alice['id'], 'round': 1, 'guess': '  '}).status_code == 400
    assert client.post(f'/api/games/{gid}/guess', json={'player_id': str(alice['id']), 'round': 1, 'guess': 'x'}).status_code == 400
    res = client.post(f'/api/games/{gid}/override', json={'player_id': alice['id'], 'round': 1, 'is_correct': 'yes'})
    assert res.status_code == 400


def test_add_player_as_admin(client, admin_game):
    res = client.post(f"/api/games/{admin_game['id']}/players", json={'name': 'Dolley', 'photo_url': '/img/d.png'})
    assert res.status_code == 201
    assert res.get_json()['photo_url'] == '/img/d.png'


def test_user_accounts(client):
    res = client.post('/api/register', json={'username': 'host', 'password': 'pw'})
    assert res.status_code == 201
    assert client.get('/api/user').get_json()['username'] == 'host'
    assert client.post('/api/register', json={'username': 'host', 'password': 'pw'}).status_code == 400

    assert client.post('/api/logout').status_code == 200
    assert client.get('/api/user').status_code == 401
    assert client.post('/api/login', json={'username': 'host', 'password': 'nope'}).status_code == 401
    assert client.post('/api/login', json={'username': 'host', 'password': 'pw'}).status_code == 200


def test_placeholder_redirect(client):
    res = client.get('/api/placeholder/Abe%20Lincoln')
    assert res.status_code == 302
    assert res.headers['Location'] == 'https://avatars.test/?name=Abe%20Lincoln'


def test_completed_game_is_frozen(client, admin_game):
    gid = admin_game['id']
    alice = _join(client, gid, 'Alice')
    client.post(f'/api/games/{gid}/guess', json={'player_id': alice['id'], 'round': 1, 'guess': 'cake'})
    client.post(f'/api/games/{gid}/answer', json={'round': 1, 'correct_answer': 'cake'})
    winners = client.post(f'/api/games/{gid}/winners').get_json()
    assert winners['potus']['id'] == alice['id']

    for path, body in [
        ('override', {'player_id': alice['id'], 'round': 1, 'is_correct': False}),
        ('answer', {'round': 1, 'correct_answer': 'pie'}),
        ('advance', None),
        ('guess', {'player_id': alice['id'], 'round': 1, 'guess': 'pie'}),
    ]:
        res = client.post(f'/api/games/{gid}/{path}', json=body)
        assert res.status_code == 409, path
        assert res.get_json()['code'] == 'game_complete'

    state = client.get(f'/api/games/{gid}').get_json()
    assert state['players'][0]['score'] == 1
    assert state['players'][0]['is_potus'] is True
    assert client.post(f'/api/games/{gid}/winners').get_json() == winners


def test_update_player_photo(client, admin_game):
    gid = admin_game['id']
    alice = _join(client, gid, 'Alice')
    url = f"/api/games/{gid}/players/{alice['id']}"

    res = client.patch(url, json={'photo_url': '/img/alice.png'})
    assert res.status_code == 200
    assert res.get_json()['photo_url'] == '/img/alice.png'
    assert client.patch(url, json={}).status_code == 400

    client.post('/api/admin/logout')
    assert client.patch(url, json={'name': 'Al', 'secret_word': 'wrong'}).status_code == 401
    res = client.patch(url, json={'name': 'Al', 'secret_word': alice['secret_word']})
    assert res.status_code == 200
    assert res.get_json()['name'] == 'Al'
    assert res.get_json()['photo_url'] == '/img/alice.png'
