from flask_socketio import join_room, leave_room, emit
from partygames import socketio

LEADERBOARD_ROOM = 'leaderboard'
NAMESPACE = '/ws'


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_leaderboard(data=None):
    join_room(LEADERBOARD_ROOM)
    emit('joined', {'room': LEADERBOARD_ROOM})


def handle_leave_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('left', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def notify_leaderboard() -> None:
    """Tell leaderboard viewers that a score entry was appended."""
    socketio.emit('leaderboard_update', {}, to=LEADERBOARD_ROOM, namespace=NAMESPACE)


def register_socketio_handlers(testing: bool = False) -> None:
    """Wire the leaderboard events onto the '/ws' namespace.

    With ``testing`` set the same handlers also answer on '/', where the
    Flask-SocketIO test client connects before switching namespaces.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('join_leaderboard', handle_join_leaderboard, namespace=ns)
        socketio.on_event('leave_leaderboard', handle_leave_leaderboard, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
