from .errors import EmptyQuestionPool, InvalidTransition
from .scoring import COMPLETE_POINTS, SKIP_PENALTY, apply_outcome
from .session import Player, Resolution, Stage, TruthOrDareSession, localized_content

__all__ = [
    'COMPLETE_POINTS',
    'SKIP_PENALTY',
    'EmptyQuestionPool',
    'InvalidTransition',
    'Player',
    'Resolution',
    'Stage',
    'TruthOrDareSession',
    'apply_outcome',
    'localized_content',
]
