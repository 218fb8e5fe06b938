"""Truth-or-dare play session.

One session is driven by one browser: pick a mode, say how many players,
name them, then alternate between drawing a challenge for the current player
and resolving it. The session itself is never stored in the database; the
HTTP layer keeps ``to_dict()`` in the signed session cookie and rebuilds the
machine on each request with ``from_dict()``.
"""

import random
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Callable, List, Optional

from partygames.models import GAME_MODES, QUESTION_TYPES
from partygames.storage import PersistenceFailure, ScoreDraft
from .errors import EmptyQuestionPool, InvalidTransition
from .scoring import OUTCOMES, apply_outcome

GAME_TYPE = 'truth_or_dare'
SECONDARY_LOCALE = 'en'


class Stage(str, Enum):
    SELECTING_MODE = 'selecting_mode'
    SELECTING_PLAYER_COUNT = 'selecting_player_count'
    ADDING_PLAYERS = 'adding_players'
    AWAITING_CHOICE = 'awaiting_choice'
    CHALLENGE_SHOWN = 'challenge_shown'


@dataclass
class Player:
    name: str
    identity_id: Optional[int] = None
    score: int = 0

    def to_dict(self):
        return asdict(self)


@dataclass
class Resolution:
    player: Player
    outcome: str
    delta: int
    entry: Optional[object] = None
    notice: Optional[str] = None


def localized_content(question, locale: str) -> str:
    """English text when asked for and available, German otherwise."""
    if locale == SECONDARY_LOCALE and question.content_en:
        return question.content_en
    return question.content


class TruthOrDareSession:
    def __init__(self, question_bank, score_ledger=None, rng: Optional[random.Random] = None):
        self.question_bank = question_bank
        self.score_ledger = score_ledger
        self.rng = rng or random.Random()
        self.stage = Stage.SELECTING_MODE
        self.mode: Optional[str] = None
        self.target_count: Optional[int] = None
        self.players: List[Player] = []
        self.turn = 0
        self.challenge: Optional[dict] = None

    @property
    def current_player(self) -> Optional[Player]:
        if self.stage in (Stage.AWAITING_CHOICE, Stage.CHALLENGE_SHOWN):
            return self.players[self.turn]
        return None

    def _require(self, operation, *stages):
        if self.stage not in stages:
            raise InvalidTransition(operation, self.stage.value)

    def select_mode(self, mode: str) -> None:
        self._require('select_mode', Stage.SELECTING_MODE)
        if mode not in GAME_MODES:
            raise ValueError(f'Unknown mode {mode!r}')
        self.mode = mode
        self.stage = Stage.SELECTING_PLAYER_COUNT

    def set_player_count(self, n: int) -> None:
        self._require('set_player_count', Stage.SELECTING_PLAYER_COUNT, Stage.ADDING_PLAYERS)
        if n <= 0:
            raise ValueError('Player count must be positive')
        self.target_count = n
        self.players = []
        self.turn = 0
        self.stage = Stage.ADDING_PLAYERS

    def add_player(self, name: str, identity_id: Optional[int] = None) -> Optional[Player]:
        """Append a player; blank or already-taken names are ignored."""
        self._require('add_player', Stage.ADDING_PLAYERS)
        name = (name or '').strip()
        if not name or any(p.name == name for p in self.players):
            return None
        player = Player(name=name, identity_id=identity_id)
        self.players.append(player)
        if len(self.players) == self.target_count:
            self.turn = 0
            self.stage = Stage.AWAITING_CHOICE
        return player

    def request_challenge(self, type: str, locale: str) -> dict:
        self._require('request_challenge', Stage.AWAITING_CHOICE)
        if type not in QUESTION_TYPES:
            raise ValueError(f'Unknown challenge type {type!r}')
        eligible = list(self.question_bank.list_eligible(type, self.mode))
        if not eligible:
            raise EmptyQuestionPool(type, self.mode)
        question = self.rng.choice(eligible)
        self.challenge = {
            'question_id': question.id,
            'type': type,
            'content': localized_content(question, locale),
        }
        self.stage = Stage.CHALLENGE_SHOWN
        return self.challenge

    def resolve_challenge(self, outcome: str,
                          identity_accessor: Optional[Callable[[], Optional[int]]] = None) -> Resolution:
        """Score the shown challenge and pass the turn on.

        ``identity_accessor`` returns the id of the signed-in user, or None.
        A linked player's score change is written to the ledger only when
        the delta is non-zero; if nobody (or somebody else) is signed in the
        entry is kept but not linked to the account.
        """
        self._require('resolve_challenge', Stage.CHALLENGE_SHOWN)
        if outcome not in OUTCOMES:
            raise ValueError(f'Unknown outcome {outcome!r}')
        player = self.players[self.turn]
        player.score, delta = apply_outcome(player.score, outcome)
        self.challenge = None
        self.turn = (self.turn + 1) % len(self.players)
        self.stage = Stage.AWAITING_CHOICE

        resolution = Resolution(player=player, outcome=outcome, delta=delta)
        if player.identity_id is None or delta == 0 or self.score_ledger is None:
            return resolution

        current_identity = identity_accessor() if identity_accessor else None
        draft = ScoreDraft(
            player_name=player.name,
            points=delta,
            game_type=GAME_TYPE,
            user_id=player.identity_id if current_identity == player.identity_id else None,
        )
        try:
            resolution.entry = self.score_ledger.append(draft)
        except PersistenceFailure as exc:
            resolution.notice = f'Score could not be saved: {exc}'
        return resolution

    def to_dict(self):
        current = self.current_player
        return {
            'stage': self.stage.value,
            'mode': self.mode,
            'target_count': self.target_count,
            'players': [p.to_dict() for p in self.players],
            'turn': self.turn,
            'current_player': current.name if current else None,
            'challenge': self.challenge,
        }

    @classmethod
    def from_dict(cls, data, question_bank, score_ledger=None, rng=None):
        session = cls(question_bank, score_ledger=score_ledger, rng=rng)
        if not data:
            return session
        session.stage = Stage(data['stage'])
        session.mode = data.get('mode')
        session.target_count = data.get('target_count')
        session.players = [Player(**{k: p[k] for k in ('name', 'identity_id', 'score')}) for p in data.get('players', [])]
        session.turn = data.get('turn', 0)
        session.challenge = data.get('challenge')
        return session
