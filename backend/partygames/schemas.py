"""Request body schemas.

Every JSON body is run through ``parse`` before a route touches the domain,
so handlers only ever see a validated model or a list of errors.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

QuestionType = Literal['truth', 'dare']
GameMode = Literal['kids', 'normal', 'spicy']

M = TypeVar('M', bound=BaseModel)

# Fits the 32-bit points column on every backing
MAX_POINTS = 2**31 - 1


@dataclass
class Parsed(Generic[M]):
    ok: bool
    value: Optional[M] = None
    errors: List[dict] = field(default_factory=list)


def parse(model: Type[M], payload) -> Parsed[M]:
    if payload is None:
        payload = {}
    try:
        return Parsed(ok=True, value=model.model_validate(payload))
    except ValidationError as exc:
        errors = [
            {'field': '.'.join(str(p) for p in err['loc']), 'message': err['msg']}
            for err in exc.errors()
        ]
        return Parsed(ok=False, errors=errors)


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore', str_strip_whitespace=True)


class RegisterBody(_Body):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    email: EmailStr
    bio: Optional[str] = None


class LoginBody(_Body):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserUpdateBody(_Body):
    username: Optional[str] = Field(default=None, min_length=1, max_length=64)
    password: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = Field(default=None, alias='profileImage')

    @field_validator('username', 'password', 'email')
    @classmethod
    def required_when_given(cls, value):
        # Only bio and profile image can be cleared with null
        if value is None:
            raise ValueError('must not be null')
        return value


class ResetPasswordBody(_Body):
    email: str = ''


class QuestionBody(_Body):
    type: QuestionType
    mode: GameMode
    content: str = Field(min_length=1)
    content_en: Optional[str] = Field(default=None, alias='contentEn')
    active: bool = True


class QuestionUpdateBody(_Body):
    type: Optional[QuestionType] = None
    mode: Optional[GameMode] = None
    content: Optional[str] = None
    content_en: Optional[str] = Field(default=None, alias='contentEn')
    active: Optional[bool] = None

    @field_validator('content')
    @classmethod
    def content_not_blank(cls, value):
        if not value:
            raise ValueError('must not be blank')
        return value

    @field_validator('type', 'mode', 'active')
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError('must not be null')
        return value


class ScoreBody(_Body):
    player_name: str = Field(alias='playerName', min_length=1, max_length=64)
    points: int = Field(ge=-MAX_POINTS, le=MAX_POINTS)
    identity_id: Optional[int] = Field(default=None, alias='identityId')
    game_type: str = Field(alias='gameType', min_length=1, max_length=32)


class ModeBody(_Body):
    mode: GameMode


class PlayerCountBody(_Body):
    count: int = Field(gt=0, le=50)


class AddPlayerBody(_Body):
    name: str = Field(max_length=64)
    link_identity: bool = Field(default=False, alias='linkIdentity')


class ChallengeBody(_Body):
    type: QuestionType


class ResolveBody(_Body):
    outcome: Literal['completed', 'skipped']


def validation_error(parsed: Parsed, message='Invalid request data'):
    """400 response for a failed ``parse``."""
    from flask import jsonify
    return jsonify({'error': message, 'details': parsed.errors}), 400
