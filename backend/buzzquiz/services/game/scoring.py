import math
from typing import List, Optional

from buzzquiz.models import Player

MAX_BUZZ_POINTS = 1000
MIN_BUZZ_POINTS = 100
DECAY_WINDOW_MS = 30000
HARD_MODE_PENALTY = 500

MIN_ROUNDS = 1
MAX_ROUNDS = 30


def buzz_points(elapsed_ms: float) -> int:
    """Points locked in by a buzz ``elapsed_ms`` after the round started.

    1000 at 0s, linear decay to 100 at 30s, then floored at 100.
    Halves round up.
    """
    elapsed_ms = max(0.0, float(elapsed_ms))
    decayed = MAX_BUZZ_POINTS - (elapsed_ms / DECAY_WINDOW_MS) * (MAX_BUZZ_POINTS - MIN_BUZZ_POINTS)
    return max(MIN_BUZZ_POINTS, int(math.floor(decayed + 0.5)))


def apply_penalty(player: Player) -> int:
    """Deduct the hard-mode penalty, never below zero. Returns points removed."""
    before = player.score
    player.score = max(0, player.score - HARD_MODE_PENALTY)
    return before - player.score


def clamp_rounds(value, default: int) -> int:
    if isinstance(value, bool):
        value = None
    try:
        rounds = int(value)
    except OverflowError:
        # +/- infinity from a JSON payload
        rounds = MAX_ROUNDS if value > 0 else MIN_ROUNDS
    except (TypeError, ValueError):
        rounds = default
    return max(MIN_ROUNDS, min(MAX_ROUNDS, rounds))


def last_place(scoreboard: List[dict]) -> Optional[str]:
    """Name of the lowest scorer on a sorted scoreboard, or None with <2 players."""
    if len(scoreboard) < 2:
        return None
    return scoreboard[-1]['name']
