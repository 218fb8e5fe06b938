from datetime import datetime, timezone
from partygames import db, bcrypt
from flask_login import UserMixin

QUESTION_TYPES = ('truth', 'dare')
GAME_MODES = ('kids', 'normal', 'spicy')


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    profile_image = db.Column(db.String(255), nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    scores = db.relationship('Score', back_populates='user', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'bio': self.bio,
            'profile_image': self.profile_image,
            'is_admin': self.is_admin,
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(16), nullable=False, index=True)  # truth, dare
    mode = db.Column(db.String(16), nullable=False, index=True)  # kids, normal, spicy
    content = db.Column(db.Text, nullable=False)
    content_en = db.Column(db.Text, nullable=True)
    # Soft-delete marker: inactive questions are never drawn
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'mode': self.mode,
            'content': self.content,
            'content_en': self.content_en,
            'active': self.active,
        }


class Score(db.Model):
    """One ledger entry. Rows are only ever inserted."""
    __tablename__ = 'score'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, index=True)
    player_name = db.Column(db.String(64), nullable=False)
    points = db.Column(db.Integer, nullable=False)
    game_type = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    user = db.relationship('User', back_populates='scores')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'player_name': self.player_name,
            'points': self.points,
            'game_type': self.game_type,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
