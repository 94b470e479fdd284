"""Rejections raised by the game engine.

Every error is detected before any mutation, so callers can surface it
without worrying about partial state. ``code`` is stable and meant for
clients; ``status_code`` is what the HTTP layer responds with.
"""


class GameError(Exception):
    code = 'game_error'
    status_code = 400


class NotFoundError(GameError):
    code = 'not_found'
    status_code = 404

    def __init__(self, kind, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class GameCompleteError(GameError):
    """Game already has its winners; scores and rounds are frozen."""
    code = 'game_complete'
    status_code = 409

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} is complete")


class RoundClosedError(GameError):
    """Guess submitted against a round whose answer is already in."""
    code = 'round_closed'
    status_code = 409

    def __init__(self, game_id, round_number):
        self.game_id = game_id
        self.round_number = round_number
        super().__init__(f"Round {round_number} of game {game_id} is closed to guesses")


class RoundAlreadyCompleteError(GameError):
    code = 'round_already_complete'
    status_code = 409

    def __init__(self, game_id, round_number):
        self.game_id = game_id
        self.round_number = round_number
        super().__init__(f"Round {round_number} of game {game_id} already has an answer")


class RoundNotCompleteError(GameError):
    """Override or advance attempted while the round is still open."""
    code = 'round_not_complete'
    status_code = 409

    def __init__(self, game_id, round_number):
        self.game_id = game_id
        self.round_number = round_number
        super().__init__(f"Round {round_number} of game {game_id} is not complete yet")
