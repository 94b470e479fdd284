import random
from collections import namedtuple
from typing import Sequence

Winners = namedtuple('Winners', ['potus', 'vice_potus'])


def resolve_winners(players: Sequence, rng=None) -> Winners:
    """Elect POTUS and Vice-POTUS from current scores.

    A unique top scorer wins outright and every other player with a
    positive score becomes Vice-POTUS. When several players share the top
    score, one of them is drawn from ``rng`` as POTUS and only the other
    tied players become Vice-POTUS.
    """
    if not players:
        return Winners(None, [])
    rng = rng or random

    ranked = sorted(players, key=lambda p: p.score, reverse=True)
    highest_score = ranked[0].score
    tied_at_top = [p for p in ranked if p.score == highest_score]

    if len(tied_at_top) == 1:
        potus = tied_at_top[0]
        return Winners(potus, [p for p in ranked[1:] if p.score > 0])

    potus = tied_at_top[rng.randrange(len(tied_at_top))]
    return Winners(potus, [p for p in tied_at_top if p is not potus])
