from typing import Tuple

COMPLETE_POINTS = 5
SKIP_PENALTY = 3

OUTCOMES = ('completed', 'skipped')


def apply_outcome(score: int, outcome: str) -> Tuple[int, int]:
    """Apply a challenge outcome to a running score.

    Returns ``(new_score, delta)``. Completing adds a fixed bonus; skipping
    subtracts the penalty but never below zero, so ``delta`` is the change
    that was actually applied (a skip at score 2 yields ``-2``).
    """
    if outcome == 'completed':
        return score + COMPLETE_POINTS, COMPLETE_POINTS
    if outcome == 'skipped':
        new_score = max(0, score - SKIP_PENALTY)
        return new_score, new_score - score
    raise ValueError(f'Unknown outcome {outcome!r}')
