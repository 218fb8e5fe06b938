from functools import wraps

from flask import jsonify
from flask_login import current_user


def admin_required(view):
    """Reject anonymous callers with 401 and non-admins with 403."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Not authenticated'}), 401
        if not current_user.is_admin:
            return jsonify({'error': 'Admin access required'}), 403
        return view(*args, **kwargs)
    return wrapped


def current_identity():
    """Id of the signed-in user, or None for anonymous requests."""
    if current_user.is_authenticated:
        return current_user.id
    return None
