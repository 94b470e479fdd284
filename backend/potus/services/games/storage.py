"""SQLAlchemy-backed storage used by the game engine.

Methods stage changes on the session and flush; nothing commits except
``transaction()``, so an engine operation is all-or-nothing.
"""
from contextlib import contextmanager
from typing import List, Optional

from flask import current_app

from potus import db
from potus.models import Game, Player, Round, Guess, generate_secret_word


class SqlStorage:

    @contextmanager
    def transaction(self):
        """Commit on success; roll back and re-raise on any exception."""
        try:
            yield
            db.session.commit()
        except Exception as exc:
            current_app.logger.debug(f"[rollback] {type(exc).__name__}: {exc}")
            db.session.rollback()
            raise

    # ---- games ----

    def create_game(self, game_id: Optional[str] = None) -> Game:
        game = Game(id=game_id) if game_id else Game()
        db.session.add(game)
        db.session.flush()
        return game

    def get_game(self, game_id: str, lock: bool = False) -> Optional[Game]:
        query = Game.query.filter_by(id=game_id)
        if lock:
            query = query.with_for_update(nowait=False)
        return query.first()

    def game_exists(self, game_id: str) -> bool:
        # Column query, so no Game instance lands in the identity map
        return db.session.query(Game.id).filter_by(id=game_id).first() is not None

    def find_game_by_admin_secret(self, admin_secret_word: str) -> Optional[Game]:
        return Game.query.filter_by(admin_secret_word=admin_secret_word).first()

    def update_game(self, game_id: str, **fields) -> Optional[Game]:
        game = db.session.get(Game, game_id)
        if not game:
            return None
        for key, value in fields.items():
            setattr(game, key, value)
        db.session.flush()
        return game

    # ---- rounds ----

    def get_round(self, game_id: str, number: int, lock: bool = False) -> Optional[Round]:
        query = Round.query.filter_by(game_id=game_id, round_number=number)
        if lock:
            query = query.with_for_update(nowait=False)
        return query.first()

    def create_round(self, game_id: str, number: int) -> Round:
        round_ = Round(game_id=game_id, round_number=number, correct_answer=None, complete=False)
        db.session.add(round_)
        db.session.flush()
        return round_

    def set_round_answer_and_complete(self, game_id: str, number: int, answer: str) -> Optional[Round]:
        round_ = self.get_round(game_id, number)
        if not round_:
            return None
        round_.correct_answer = answer
        round_.complete = True
        db.session.flush()
        return round_

    # ---- players ----

    def create_player(self, game_id: str, name: str, photo_url: str) -> Player:
        player = Player(
            game_id=game_id,
            name=name,
            photo_url=photo_url,
            score=0,
            secret_word=generate_secret_word(),
        )
        db.session.add(player)
        db.session.flush()
        return player

    def get_player(self, player_id: int) -> Optional[Player]:
        return db.session.get(Player, player_id)

    def update_player(self, player_id: int, **fields) -> Optional[Player]:
        player = db.session.get(Player, player_id)
        if not player:
            return None
        for key in ('name', 'photo_url'):
            if key in fields:
                setattr(player, key, fields[key])
        db.session.flush()
        return player

    def list_players_by_game(self, game_id: str) -> List[Player]:
        return Player.query.filter_by(game_id=game_id).order_by(Player.id).all()

    def adjust_player_score(self, player_id: int, delta: int) -> Optional[Player]:
        # Relative update in SQL so concurrent deltas commute
        updated = Player.query.filter_by(id=player_id).update(
            {Player.score: Player.score + delta}, synchronize_session=False
        )
        if not updated:
            return None
        player = db.session.get(Player, player_id)
        db.session.refresh(player)
        return player

    # ---- guesses ----

    def get_guess(self, player_id: int, game_id: str, round_number: int, lock: bool = False) -> Optional[Guess]:
        query = Guess.query.filter_by(player_id=player_id, game_id=game_id, round_number=round_number)
        if lock:
            query = query.with_for_update(nowait=False)
        return query.first()

    def list_guesses(self, game_id: str, round_number: int) -> List[Guess]:
        return Guess.query.filter_by(game_id=game_id, round_number=round_number).order_by(Guess.id).all()

    def create_guess(self, player_id: int, game_id: str, round_number: int, text: str,
                     is_correct: Optional[bool] = None) -> Guess:
        guess = Guess(
            player_id=player_id,
            game_id=game_id,
            round_number=round_number,
            guess=text,
            is_correct=is_correct,
        )
        db.session.add(guess)
        db.session.flush()
        return guess

    def upsert_guess(self, player_id: int, game_id: str, round_number: int, text: str) -> Guess:
        guess = self.get_guess(player_id, game_id, round_number, lock=True)
        if guess:
            guess.guess = text
            db.session.flush()
            return guess
        return self.create_guess(player_id, game_id, round_number, text)

    def set_guess_verdict(self, guess_id: int, verdict: bool) -> Optional[Guess]:
        guess = db.session.get(Guess, guess_id)
        if not guess:
            return None
        guess.is_correct = verdict
        db.session.flush()
        return guess
