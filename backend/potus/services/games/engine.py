import json
import random
import threading
from typing import Dict, Optional
from urllib.parse import quote

from flask import current_app

from potus.models import NO_GUESS_TEXT
from .errors import GameCompleteError, NotFoundError
from .rounds import (
    all_players_submitted,
    ensure_accepting_guesses,
    ensure_answerable,
    ensure_complete,
    next_round_number,
    round_stats,
)
from .scoring import ScoreLedger, score_round
from .storage import SqlStorage
from .winners import Winners, resolve_winners


class GameCoordinator:
    """Sequences engine operations against storage, one game at a time.

    Each mutating operation holds the game's in-process lock and runs in a
    single storage transaction, so precondition checks and the writes that
    follow them are atomic and a rejected call leaves nothing behind.
    """

    def __init__(self, storage=None, rng=None):
        self.storage = storage or SqlStorage()
        self.ledger = ScoreLedger(self.storage)
        self.rng = rng or random.Random()
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _game_lock(self, game_id: str) -> threading.RLock:
        # Locks exist only for stored games; games are never deleted
        if not isinstance(game_id, str) or not self.storage.game_exists(game_id):
            raise NotFoundError('Game', game_id)
        with self._registry_lock:
            return self._locks.setdefault(game_id, threading.RLock())

    def _require_game(self, game_id: str, lock: bool = False, playing: bool = False):
        """Load a game; with ``playing`` a completed game is rejected."""
        game = self.storage.get_game(game_id, lock=lock)
        if not game:
            raise NotFoundError('Game', game_id)
        if playing and game.is_complete:
            raise GameCompleteError(game_id)
        return game

    def _require_player(self, game_id: str, player_id: int):
        player = self.storage.get_player(player_id)
        if not player or player.game_id != game_id:
            raise NotFoundError('Player', player_id)
        return player

    def _require_round(self, game_id: str, round_number: int):
        round_ = self.storage.get_round(game_id, round_number, lock=True)
        if not round_:
            raise NotFoundError('Round', round_number)
        return round_

    # ---- game lifecycle ----

    def create_game(self, game_id: Optional[str] = None):
        with self.storage.transaction():
            game = self.storage.create_game(game_id)
            self.storage.create_round(game.id, 1)
        current_app.logger.info(f"[create] game={game.id}")
        return game

    def join_game(self, game_id: str, name: str, photo_url: Optional[str] = None):
        """Join by display name; a case-insensitive name match rejoins."""
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id)
            for player in self.storage.list_players_by_game(game_id):
                if player.name.lower() == name.lower():
                    current_app.logger.info(f"[join] game={game_id} player={player.id} rejoined")
                    return player
            player = self.storage.create_player(game_id, name, photo_url or self._placeholder_photo(name))
        current_app.logger.info(f"[join] game={game_id} player={player.id} name={name!r}")
        return player

    def add_player(self, game_id: str, name: str, photo_url: Optional[str] = None):
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id)
            player = self.storage.create_player(game_id, name, photo_url or self._placeholder_photo(name))
        current_app.logger.info(f"[add_player] game={game_id} player={player.id}")
        return player

    def update_player(self, game_id: str, player_id: int, name: Optional[str] = None,
                      photo_url: Optional[str] = None):
        """Change display name or photo. Scores only move through the ledger."""
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id)
            self._require_player(game_id, player_id)
            fields = {k: v for k, v in (('name', name), ('photo_url', photo_url)) if v}
            player = self.storage.update_player(player_id, **fields)
        current_app.logger.info(f"[update_player] game={game_id} player={player_id} fields={sorted(fields)}")
        return player

    @staticmethod
    def _placeholder_photo(name: str) -> str:
        return f"/api/placeholder/{quote(name)}"

    # ---- rounds ----

    def submit_guess(self, game_id: str, player_id: int, round_number: int, text: str):
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id, playing=True)
            self._require_player(game_id, player_id)
            round_ = self._require_round(game_id, round_number)
            ensure_accepting_guesses(round_)
            guess = self.storage.upsert_guess(player_id, game_id, round_number, text)
        current_app.logger.info(f"[guess] game={game_id} round={round_number} player={player_id}")
        return guess

    def submit_answer(self, game_id: str, round_number: int, answer: str):
        """Set the round's answer, then judge and score every guess.

        The round is only committed as complete together with all score
        increments from judging.
        """
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id, playing=True)
            round_ = self._require_round(game_id, round_number)
            ensure_answerable(round_)
            round_ = self.storage.set_round_answer_and_complete(game_id, round_number, answer)
            guesses = self.storage.list_guesses(game_id, round_number)
            awarded = score_round(self.ledger, round_, guesses)
        current_app.logger.info(
            f"[answer] game={game_id} round={round_number} guesses={len(guesses)} correct={awarded}"
        )
        return round_

    def override_verdict(self, game_id: str, player_id: int, round_number: int, is_correct: bool):
        with self._game_lock(game_id), self.storage.transaction():
            self._require_game(game_id, playing=True)
            self._require_player(game_id, player_id)
            round_ = self._require_round(game_id, round_number)
            ensure_complete(round_)
            guess = self.storage.get_guess(player_id, game_id, round_number, lock=True)
            if not guess:
                guess = self.storage.create_guess(player_id, game_id, round_number, NO_GUESS_TEXT, is_correct=False)
            delta = self.ledger.record_verdict(guess, is_correct)
        current_app.logger.info(
            f"[override] game={game_id} round={round_number} player={player_id} correct={is_correct} delta={delta}"
        )
        return guess

    def advance_round(self, game_id: str):
        with self._game_lock(game_id), self.storage.transaction():
            game = self._require_game(game_id, lock=True, playing=True)
            current = self._require_round(game_id, game.current_round)
            number = next_round_number(current)
            round_ = self.storage.create_round(game_id, number)
            self.storage.update_game(game_id, current_round=number)
        current_app.logger.info(f"[advance] game={game_id} round {number - 1} -> {number}")
        return round_

    # ---- results ----

    def resolve_winners(self, game_id: str) -> Winners:
        """Elect winners once, mark the game complete and keep the result.

        Later calls return the stored titles so a random tie-break does not
        change between readers.
        """
        with self._game_lock(game_id), self.storage.transaction():
            game = self._require_game(game_id, lock=True)
            players = self.storage.list_players_by_game(game_id)
            if game.winners_resolved:
                return self._stored_winners(game, players)
            winners = resolve_winners(players, self.rng)
            self.storage.update_game(
                game_id,
                is_complete=True,
                potus_id=winners.potus.id if winners.potus else None,
                vice_potus_ids=json.dumps([p.id for p in winners.vice_potus]),
            )
        current_app.logger.info(
            f"[winners] game={game_id} potus={winners.potus.id if winners.potus else None} "
            f"vice={[p.id for p in winners.vice_potus]}"
        )
        return winners

    @staticmethod
    def _stored_winners(game, players) -> Winners:
        by_id = {p.id: p for p in players}
        return Winners(by_id.get(game.potus_id), [by_id[i] for i in game.vice_potus_id_list() if i in by_id])

    def game_state(self, game_id: str) -> dict:
        """Snapshot of a game for clients; the admin secret is left out."""
        game = self._require_game(game_id)
        players = self.storage.list_players_by_game(game_id)
        current = self.storage.get_round(game_id, game.current_round)
        guesses = {g.player_id: g for g in self.storage.list_guesses(game_id, game.current_round)}
        vice_ids = set(game.vice_potus_id_list())

        players_payload = []
        for player in players:
            data = player.to_dict()
            guess = guesses.get(player.id)
            data['current_guess'] = guess.to_dict() if guess else None
            data['is_potus'] = game.potus_id == player.id
            data['is_vice_potus'] = player.id in vice_ids
            players_payload.append(data)

        payload = game.to_dict()
        payload['players'] = players_payload
        payload['round'] = current.to_dict() if current else None
        payload['round_stats'] = round_stats(guesses.values(), len(players))
        payload['all_submitted'] = all_players_submitted([p.id for p in players], guesses.values())
        return payload

    def round_summary(self, game_id: str, round_number: int) -> dict:
        self._require_game(game_id)
        round_ = self.storage.get_round(game_id, round_number)
        if not round_:
            raise NotFoundError('Round', round_number)
        players = self.storage.list_players_by_game(game_id)
        guesses = self.storage.list_guesses(game_id, round_number)
        summary = round_stats(guesses, len(players))
        summary['round'] = round_.to_dict()
        return summary
