"""Question bank and score ledger storage.

Two backings share one interface: the in-memory one used by domain tests and
the Flask-SQLAlchemy one the app factory installs by default. The active
backing lives on the Flask app (see ``get_storage``), never in module state.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from itertools import count
from typing import Dict, List, Optional, Protocol, Sequence

from flask import current_app
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from partygames import db
from partygames.models import Question, Score


class PersistenceFailure(Exception):
    """The backing store could not complete a read or write."""


class QuestionNotFound(LookupError):
    pass


@dataclass
class QuestionRecord:
    id: int
    type: str
    mode: str
    content: str
    content_en: Optional[str] = None
    active: bool = True

    def to_dict(self):
        return asdict(self)


@dataclass
class ScoreDraft:
    """A score entry that has not been appended yet."""
    player_name: str
    points: int
    game_type: str
    user_id: Optional[int] = None


@dataclass
class ScoreRecord:
    id: int
    player_name: str
    points: int
    game_type: str
    user_id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        data = asdict(self)
        data['created_at'] = self.created_at.isoformat()
        return data


@dataclass
class LeaderboardRow:
    player_name: str
    user_id: Optional[int]
    points: int
    entries: int

    def to_dict(self):
        return asdict(self)


class QuestionBank(Protocol):
    def list_eligible(self, type: str, mode: str) -> Sequence: ...
    def list_all(self) -> Sequence: ...
    def create(self, type: str, mode: str, content: str, content_en: Optional[str] = None): ...
    def update(self, question_id: int, **changes): ...
    def deactivate(self, question_id: int) -> None: ...


class ScoreLedger(Protocol):
    def append(self, entry: ScoreDraft): ...
    def leaderboard(self, limit: int) -> List[LeaderboardRow]: ...
    def total_for_identity(self, user_id: int) -> int: ...


QUESTION_FIELDS = ('type', 'mode', 'content', 'content_en', 'active')


class MemoryQuestionBank:
    def __init__(self, questions=None):
        self._questions: Dict[int, QuestionRecord] = {}
        self._ids = count(1)
        for q in questions or []:
            self.create(**q)

    def list_eligible(self, type, mode):
        return [q for q in self._questions.values() if q.active and q.type == type and q.mode == mode]

    def list_all(self):
        return list(self._questions.values())

    def create(self, type, mode, content, content_en=None, active=True):
        record = QuestionRecord(id=next(self._ids), type=type, mode=mode,
                                content=content, content_en=content_en, active=active)
        self._questions[record.id] = record
        return record

    def update(self, question_id, **changes):
        record = self._questions.get(question_id)
        if record is None:
            raise QuestionNotFound(question_id)
        for key, value in changes.items():
            if key in QUESTION_FIELDS:
                setattr(record, key, value)
        return record

    def deactivate(self, question_id):
        self.update(question_id, active=False)


class MemoryScoreLedger:
    def __init__(self):
        self.entries: List[ScoreRecord] = []
        self._ids = count(1)

    def append(self, entry):
        record = ScoreRecord(id=next(self._ids), player_name=entry.player_name, points=entry.points,
                             game_type=entry.game_type, user_id=entry.user_id)
        self.entries.append(record)
        return record

    def leaderboard(self, limit):
        groups: Dict[tuple, dict] = {}
        for e in self.entries:
            key = ('user', e.user_id) if e.user_id is not None else ('name', e.player_name)
            group = groups.setdefault(key, {'names': [], 'points': 0, 'entries': 0, 'first_id': e.id})
            group['names'].append(e.player_name)
            group['points'] += e.points
            group['entries'] += 1
        ranked = sorted(groups.items(), key=lambda kv: (-kv[1]['points'], kv[1]['first_id']))
        return [
            LeaderboardRow(player_name=max(g['names']), user_id=key[1] if key[0] == 'user' else None,
                           points=g['points'], entries=g['entries'])
            for key, g in ranked[:limit]
        ]

    def total_for_identity(self, user_id):
        return sum(e.points for e in self.entries if e.user_id == user_id)


class SqlQuestionBank:
    def list_eligible(self, type, mode):
        return Question.query.filter_by(type=type, mode=mode, active=True).all()

    def list_all(self):
        return Question.query.order_by(Question.id).all()

    def create(self, type, mode, content, content_en=None, active=True):
        question = Question(type=type, mode=mode, content=content, content_en=content_en, active=active)
        db.session.add(question)
        self._commit()
        return question

    def update(self, question_id, **changes):
        question = db.session.get(Question, question_id)
        if question is None:
            raise QuestionNotFound(question_id)
        for key, value in changes.items():
            if key in QUESTION_FIELDS:
                setattr(question, key, value)
        db.session.add(question)
        self._commit()
        return question

    def deactivate(self, question_id):
        self.update(question_id, active=False)

    @staticmethod
    def _commit():
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceFailure(str(exc)) from exc


class SqlScoreLedger:
    def append(self, entry):
        score = Score(player_name=entry.player_name, points=entry.points,
                      game_type=entry.game_type, user_id=entry.user_id)
        try:
            db.session.add(score)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceFailure(str(exc)) from exc
        return score

    def leaderboard(self, limit):
        # Linked entries group per user, the rest per player name
        name_key = case((Score.user_id.is_(None), Score.player_name), else_='')
        total = func.sum(Score.points).label('total_points')
        first_id = func.min(Score.id).label('first_id')
        rows = (
            db.session.query(
                Score.user_id,
                func.max(Score.player_name).label('player_name'),
                total,
                func.count(Score.id).label('entries'),
                first_id,
            )
            .group_by(Score.user_id, name_key)
            .order_by(total.desc(), first_id.asc())
            .limit(limit)
            .all()
        )
        return [
            LeaderboardRow(player_name=r.player_name, user_id=r.user_id, points=int(r.total_points), entries=r.entries)
            for r in rows
        ]

    def total_for_identity(self, user_id):
        total = (
            db.session.query(func.coalesce(func.sum(Score.points), 0))
            .filter(Score.user_id == user_id)
            .scalar()
        )
        return int(total or 0)


@dataclass
class Storage:
    question_bank: QuestionBank
    score_ledger: ScoreLedger


def get_storage() -> Storage:
    return current_app.extensions['partygames.storage']
