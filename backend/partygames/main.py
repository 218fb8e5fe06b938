import os
import random
import time

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from werkzeug.utils import secure_filename

from partygames import db
from partygames.models import User
from partygames.schemas import (
    LoginBody, RegisterBody, ResetPasswordBody, UserUpdateBody, parse, validation_error,
)
from partygames.storage import get_storage

main = Blueprint('main', __name__)

ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/png', 'image/gif'}


def _user_payload(user):
    data = user.to_dict()
    data['total_score'] = get_storage().score_ledger.total_for_identity(user.id)
    return data


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the party games server!'})


@main.route('/register', methods=['POST'])
def register():
    parsed = parse(RegisterBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid registration data')
    body = parsed.value
    if User.query.filter_by(username=body.username).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=body.username, email=body.email, bio=body.bio)
    user.set_password(body.password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info(f"[register] user={user.id} username={user.username}")
    return jsonify(_user_payload(user)), 201


@main.route('/login', methods=['POST'])
def login():
    parsed = parse(LoginBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Missing username or password')
    user = User.query.filter_by(username=parsed.value.username).first()
    if user and user.check_password(parsed.value.password):
        login_user(user, remember=True)
        return jsonify(_user_payload(user))
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/user', methods=['GET'])
@login_required
def get_user():
    return jsonify(_user_payload(current_user))


@main.route('/user', methods=['PATCH'])
@login_required
def update_user():
    payload = request.get_json(silent=True) or {}
    parsed = parse(UserUpdateBody, payload)
    if not parsed.ok:
        return validation_error(parsed, 'Invalid user data')

    user = current_user._get_current_object()
    changes = parsed.value.model_dump(exclude_unset=True)
    username = changes.get('username')
    if username and username != user.username and User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400
    password = changes.pop('password', None)
    if password:
        user.set_password(password)
    if changes or password:
        for key, value in changes.items():
            setattr(user, key, value)
        db.session.add(user)
        db.session.commit()
    return jsonify(_user_payload(user))


@main.route('/reset-password', methods=['POST'])
def reset_password():
    parsed = parse(ResetPasswordBody, request.get_json(silent=True))
    email = parsed.value.email if parsed.ok else ''
    # Same answer whether or not the address exists
    current_app.logger.info(f"[password-reset] requested for email={email!r}")
    return jsonify({
        'message': 'If an account with this email exists, you will receive instructions to reset your password.'
    })


@main.route('/upload-profile-image', methods=['POST'])
@login_required
def upload_profile_image():
    image = request.files.get('image')
    if image is None or not image.filename:
        return jsonify({'error': 'No image provided'}), 400
    if image.mimetype not in ALLOWED_IMAGE_TYPES:
        return jsonify({'error': 'Only JPEG, PNG or GIF images are allowed'}), 400

    _, ext = os.path.splitext(secure_filename(image.filename))
    filename = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext.lower()}"
    folder = os.path.join(current_app.config['UPLOAD_FOLDER'], 'profile-images')
    os.makedirs(folder, exist_ok=True)
    image.save(os.path.join(folder, filename))
    current_app.logger.info(f"[avatar-upload] user={current_user.id} file={filename}")
    return jsonify({'imageUrl': f'/uploads/profile-images/{filename}'})
