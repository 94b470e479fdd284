from functools import wraps
from urllib.parse import quote

from flask import Blueprint, request, jsonify, session, redirect, current_app
from flask_login import login_user, logout_user, login_required, current_user
from potus import db
from potus.models import User

main = Blueprint('main', __name__)

ADMIN_SESSION_KEY = 'admin_game_ids'


def is_game_admin(game_id):
    return game_id in session.get(ADMIN_SESSION_KEY, [])


def admin_required(f):
    """Route guard for game admin actions; expects a ``game_id`` view arg."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_game_admin(kwargs.get('game_id')):
            return jsonify({'error': 'Admin login required for this game'}), 401
        return f(*args, **kwargs)
    return decorated_function


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the POTUS game server!'})


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not all([username, password]):
        return jsonify({'error': 'Missing username or password'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user)

    return jsonify(user.to_dict()), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify(user.to_dict())
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/user')
@login_required
def get_user():
    return jsonify(current_user.to_dict())


@main.route('/admin/login', methods=['POST'])
def admin_login():
    data = request.get_json(silent=True) or {}
    admin_secret_word = data.get('admin_secret_word')
    if not admin_secret_word:
        return jsonify({'error': 'Admin secret word is required'}), 400

    engine = current_app.extensions['game_engine']
    game = engine.storage.find_game_by_admin_secret(admin_secret_word)
    if not game:
        return jsonify({'error': 'Invalid admin secret word'}), 401

    granted = set(session.get(ADMIN_SESSION_KEY, []))
    granted.add(game.id)
    session[ADMIN_SESSION_KEY] = sorted(granted)
    current_app.logger.info(f"[admin_login] game={game.id}")

    payload = engine.game_state(game.id)
    payload['admin_secret_word'] = game.admin_secret_word
    return jsonify({'game': payload, 'is_admin': True})


@main.route('/admin/logout', methods=['POST'])
def admin_logout():
    session.pop(ADMIN_SESSION_KEY, None)
    return jsonify({'message': 'Logged out of all games.'})


@main.route('/placeholder/<string:name>')
def placeholder(name):
    template = current_app.config.get('PLACEHOLDER_AVATAR_URL')
    return redirect(template.format(name=quote(name)))
