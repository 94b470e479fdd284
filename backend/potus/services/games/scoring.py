from typing import Optional

from .matching import is_close_enough_match


def verdict_delta(was_correct: Optional[bool], is_correct: bool) -> int:
    """Score change implied by moving a guess from one verdict to another.

    An unjudged guess (None) counts as incorrect.
    """
    was_correct = bool(was_correct)
    if was_correct == is_correct:
        return 0
    return 1 if is_correct else -1


class ScoreLedger:
    """Applies verdicts to guesses and the matching deltas to player scores.

    Scores only ever move through ``record_verdict``, which compares the
    stored verdict with the new one. Recording the same verdict twice is a
    no-op, so neither re-judging nor repeated overrides can double count.
    """

    def __init__(self, storage):
        self.storage = storage

    def record_verdict(self, guess, is_correct: bool) -> int:
        delta = verdict_delta(guess.is_correct, is_correct)
        if guess.is_correct is None or bool(guess.is_correct) != is_correct:
            self.storage.set_guess_verdict(guess.id, is_correct)
        if delta:
            self.storage.adjust_player_score(guess.player_id, delta)
        return delta


def score_round(ledger: ScoreLedger, round_, guesses) -> int:
    """Judge every guess of a completed round against its answer.

    Returns the total score delta applied, which equals the number of
    guesses newly found correct.
    """
    total = 0
    for guess in guesses:
        total += ledger.record_verdict(guess, is_close_enough_match(round_.correct_answer, guess.guess))
    return total
