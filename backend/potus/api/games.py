from flask import Blueprint, jsonify, request, current_app
from potus.main import admin_required, is_game_admin


games = Blueprint('games', __name__)


def _engine():
    return current_app.extensions['game_engine']


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _text(value):
    """Stripped string, or '' for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ''


def _winners_payload(winners):
    return {
        'potus': winners.potus.to_dict() if winners.potus else None,
        'vice_potus': [p.to_dict() for p in winners.vice_potus],
    }


@games.route('', methods=['POST'])
def create_game():
    game = _engine().create_game()
    return jsonify(game.to_dict(include_admin_secret=True)), 201


@games.route('/<string:game_id>', methods=['GET'])
def get_game_state(game_id):
    return jsonify(_engine().game_state(game_id))


@games.route('/join', methods=['POST'])
def join_game():
    data = request.get_json(silent=True) or {}
    game_id = _text(data.get('game_id'))
    name = _text(data.get('player_name'))
    if not all([game_id, name]):
        return jsonify({'error': 'Game ID and player name are required'}), 400

    engine = _engine()
    player = engine.join_game(game_id, name, _text(data.get('photo_url')) or None)
    payload = player.to_dict()
    payload['secret_word'] = player.secret_word
    return jsonify({'player': payload, 'game': engine.game_state(game_id)}), 201


@games.route('/<string:game_id>/players', methods=['POST'])
@admin_required
def add_player(game_id):
    data = request.get_json(silent=True) or {}
    name = _text(data.get('name'))
    if not name:
        return jsonify({'error': 'Player name is required'}), 400
    player = _engine().add_player(game_id, name, _text(data.get('photo_url')) or None)
    payload = player.to_dict()
    payload['secret_word'] = player.secret_word
    return jsonify(payload), 201


@games.route('/<string:game_id>/players/<int:player_id>', methods=['PATCH'])
def update_player(game_id, player_id):
    """Rename a player or change their photo.

    Allowed for the game's admin, or for the player presenting their own
    secret word.
    """
    data = request.get_json(silent=True) or {}
    name = _text(data.get('name'))
    photo_url = _text(data.get('photo_url'))
    if not (name or photo_url):
        return jsonify({'error': 'name or photo_url is required'}), 400

    engine = _engine()
    if not is_game_admin(game_id):
        player = engine.storage.get_player(player_id)
        secret_word = data.get('secret_word')
        if not player or player.game_id != game_id or player.secret_word != secret_word:
            return jsonify({'error': 'Admin login or the player secret word is required'}), 401

    player = engine.update_player(game_id, player_id, name=name, photo_url=photo_url)
    return jsonify(player.to_dict())


@games.route('/<string:game_id>/guess', methods=['POST'])
def submit_guess(game_id):
    data = request.get_json(silent=True) or {}
    player_id = data.get('player_id')
    round_number = data.get('round')
    text = _text(data.get('guess'))
    if not (_is_int(player_id) and _is_int(round_number)) or not text:
        return jsonify({'error': 'player_id, round and guess are required'}), 400

    guess = _engine().submit_guess(game_id, player_id, round_number, text)
    return jsonify(guess.to_dict()), 201


@games.route('/<string:game_id>/answer', methods=['POST'])
@admin_required
def submit_answer(game_id):
    data = request.get_json(silent=True) or {}
    round_number = data.get('round')
    answer = _text(data.get('correct_answer'))
    if not _is_int(round_number) or not answer:
        return jsonify({'error': 'round and correct_answer are required'}), 400

    engine = _engine()
    engine.submit_answer(game_id, round_number, answer)
    return jsonify(engine.game_state(game_id))


@games.route('/<string:game_id>/override', methods=['POST'])
@admin_required
def override_verdict(game_id):
    data = request.get_json(silent=True) or {}
    player_id = data.get('player_id')
    round_number = data.get('round')
    is_correct = data.get('is_correct')
    if not (_is_int(player_id) and _is_int(round_number)) or not isinstance(is_correct, bool):
        return jsonify({'error': 'player_id, round and is_correct are required'}), 400

    engine = _engine()
    guess = engine.override_verdict(game_id, player_id, round_number, is_correct)
    payload = engine.game_state(game_id)
    payload['guess'] = guess.to_dict()
    return jsonify(payload)


@games.route('/<string:game_id>/advance', methods=['POST'])
@admin_required
def advance_round(game_id):
    engine = _engine()
    engine.advance_round(game_id)
    return jsonify(engine.game_state(game_id))


@games.route('/<string:game_id>/winners', methods=['POST'])
@admin_required
def resolve_winners(game_id):
    return jsonify(_winners_payload(_engine().resolve_winners(game_id)))


@games.route('/<string:game_id>/rounds/<int:round_number>/stats', methods=['GET'])
def round_stats(game_id, round_number):
    return jsonify(_engine().round_summary(game_id, round_number))
