"""Round lifecycle: a round is Open until its answer arrives, then Complete.

There is no way back from Complete. These helpers only inspect a round
and raise when an operation is not legal in its current state; storage
changes are left to the caller.
"""
from enum import Enum
from typing import Iterable

from .errors import RoundAlreadyCompleteError, RoundClosedError, RoundNotCompleteError


class RoundState(str, Enum):
    OPEN = 'open'
    COMPLETE = 'complete'


def round_state(round_) -> RoundState:
    return RoundState.COMPLETE if round_.complete else RoundState.OPEN


def ensure_accepting_guesses(round_) -> None:
    if round_state(round_) is not RoundState.OPEN:
        raise RoundClosedError(round_.game_id, round_.round_number)


def ensure_answerable(round_) -> None:
    if round_state(round_) is not RoundState.OPEN:
        raise RoundAlreadyCompleteError(round_.game_id, round_.round_number)


def ensure_complete(round_) -> None:
    """Overrides and advancing both need the round's answer to be in."""
    if round_state(round_) is not RoundState.COMPLETE:
        raise RoundNotCompleteError(round_.game_id, round_.round_number)


def next_round_number(round_) -> int:
    ensure_complete(round_)
    return round_.round_number + 1


def round_stats(guesses: Iterable, total_players: int) -> dict:
    """Submission and accuracy counts for one round's guesses."""
    guesses = list(guesses)
    submitted = len(guesses)
    correct = sum(1 for g in guesses if g.is_correct)
    accuracy = int(correct / submitted * 100 + 0.5) if submitted else 0
    return {
        'total': total_players,
        'submitted': submitted,
        'correct': correct,
        'accuracy': accuracy,
    }


def all_players_submitted(player_ids: Iterable[int], guesses: Iterable) -> bool:
    guessed = {g.player_id for g in guesses}
    return all(pid in guessed for pid in player_ids)
