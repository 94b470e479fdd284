from potus import db, bcrypt
from flask_login import UserMixin
import json
import random
import string

US_STATES = [
    'Alabama', 'Alaska', 'Arizona', 'Arkansas', 'California', 'Colorado',
    'Connecticut', 'Delaware', 'Florida', 'Georgia', 'Hawaii', 'Idaho',
    'Illinois', 'Indiana', 'Iowa', 'Kansas', 'Kentucky', 'Louisiana', 'Maine',
    'Maryland', 'Massachusetts', 'Michigan', 'Minnesota', 'Mississippi',
    'Missouri', 'Montana', 'Nebraska', 'Nevada', 'New Hampshire', 'New Jersey',
    'New Mexico', 'New York', 'North Carolina', 'North Dakota', 'Ohio',
    'Oklahoma', 'Oregon', 'Pennsylvania', 'Rhode Island', 'South Carolina',
    'South Dakota', 'Tennessee', 'Texas', 'Utah', 'Vermont', 'Virginia',
    'Washington', 'West Virginia', 'Wisconsin', 'Wyoming',
]

PLAYER_WORDS = ['freedom', 'liberty', 'justice', 'equality', 'independence', 'unity']
ADMIN_WORDS = ['constitution', 'democracy', 'administration', 'government', 'presidential', 'executive']

NO_GUESS_TEXT = '(No guess submitted)'


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


def generate_game_id():
    """Pick an unused US state name; suffix digits once all are taken."""
    candidates = US_STATES[:]
    random.shuffle(candidates)
    for name in candidates:
        if not db.session.get(Game, name):
            return name
    while True:
        game_id = f"{random.choice(US_STATES)}-{''.join(random.choices(string.digits, k=3))}"
        if not db.session.get(Game, game_id):
            return game_id


def generate_secret_word(admin=False):
    """Generate a unique, memorable secret word for a game or player."""
    words = ADMIN_WORDS if admin else PLAYER_WORDS
    column = Game.admin_secret_word if admin else Player.secret_word
    model = Game if admin else Player
    while True:
        word = f"{random.choice(words)}-{''.join(random.choices(string.digits, k=4))}"
        if not model.query.filter(column == word).first():
            return word


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(64), primary_key=True)
    secret_word = db.Column(db.String(64), nullable=False, index=True)
    admin_secret_word = db.Column(db.String(64), nullable=False, unique=True, index=True)
    current_round = db.Column(db.Integer, nullable=False, default=1)
    is_complete = db.Column(db.Boolean, nullable=False, default=False)
    # Winner resolution is persisted once so a random tie-break stays stable
    potus_id = db.Column(db.Integer, nullable=True)
    vice_potus_ids = db.Column(db.Text, nullable=True)  # JSON-encoded list of player ids
    players = db.relationship('Player', back_populates='game', order_by='Player.id')
    rounds = db.relationship('Round', back_populates='game', order_by='Round.round_number')

    def __init__(self, **kwargs):
        super(Game, self).__init__(**kwargs)
        if not self.id:
            self.id = generate_game_id()
        if not self.secret_word:
            self.secret_word = generate_secret_word()
        if not self.admin_secret_word:
            self.admin_secret_word = generate_secret_word(admin=True)
        if self.current_round is None:
            self.current_round = 1
        if self.is_complete is None:
            self.is_complete = False

    @property
    def winners_resolved(self):
        return self.potus_id is not None

    def vice_potus_id_list(self):
        return json.loads(self.vice_potus_ids) if self.vice_potus_ids else []

    def to_dict(self, include_admin_secret=False):
        data = {
            'id': self.id,
            'secret_word': self.secret_word,
            'current_round': self.current_round,
            'is_complete': self.is_complete,
        }
        if include_admin_secret:
            data['admin_secret_word'] = self.admin_secret_word
        return data


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    photo_url = db.Column(db.Text, nullable=False)
    score = db.Column(db.Integer, nullable=False, default=0)
    game_id = db.Column(db.String(64), db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    secret_word = db.Column(db.String(64), nullable=False, index=True)
    game = db.relationship('Game', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'photo_url': self.photo_url,
            'score': self.score,
            'game_id': self.game_id,
        }


class Round(db.Model):
    __tablename__ = 'round'
    __table_args__ = (db.UniqueConstraint('game_id', 'round_number', name='uq_round_game_number'),)
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(64), db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    correct_answer = db.Column(db.Text, nullable=True)
    complete = db.Column(db.Boolean, nullable=False, default=False)
    game = db.relationship('Game', back_populates='rounds')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'round_number': self.round_number,
            'correct_answer': self.correct_answer,
            'complete': self.complete,
        }


class Guess(db.Model):
    __tablename__ = 'guess'
    __table_args__ = (
        db.UniqueConstraint('player_id', 'game_id', 'round_number', name='uq_guess_player_round'),
    )
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    game_id = db.Column(db.String(64), db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    round_number = db.Column(db.Integer, nullable=False)
    guess = db.Column(db.Text, nullable=False)
    # None until the round is judged
    is_correct = db.Column(db.Boolean, nullable=True)

    player = db.relationship('Player', foreign_keys=[player_id])

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'game_id': self.game_id,
            'round': self.round_number,
            'guess': self.guess,
            'is_correct': self.is_correct,
        }
