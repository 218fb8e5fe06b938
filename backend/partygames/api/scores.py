from flask import Blueprint, jsonify, request, current_app

from partygames.api import current_identity
from partygames.models import User
from partygames.schemas import ScoreBody, parse, validation_error
from partygames.socketio_events import notify_leaderboard
from partygames.storage import PersistenceFailure, ScoreDraft, get_storage

scores = Blueprint('scores', __name__)

MAX_LEADERBOARD_LIMIT = 100


@scores.route('', methods=['POST'])
def append_score():
    """Append one ledger entry.

    An ``identityId`` is only honoured when it is the signed-in user; anything
    else is stored as a plain player-name entry.
    """
    parsed = parse(ScoreBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid score data')
    body = parsed.value

    user_id = None
    if body.identity_id is not None:
        if body.identity_id == current_identity():
            user_id = body.identity_id
        else:
            current_app.logger.info(
                f"[score-unlinked] player={body.player_name} identity={body.identity_id} not signed in"
            )

    draft = ScoreDraft(player_name=body.player_name, points=body.points, game_type=body.game_type, user_id=user_id)
    try:
        entry = get_storage().score_ledger.append(draft)
    except PersistenceFailure as exc:
        current_app.logger.error(f"[persistence-failure] score append player={body.player_name}: {exc}")
        return jsonify({'error': 'Failed to save score'}), 503

    current_app.logger.info(f"[score-append] player={entry.player_name} points={entry.points} game={entry.game_type}")
    notify_leaderboard()
    return jsonify(entry.to_dict()), 201


@scores.route('', methods=['GET'])
def leaderboard():
    raw_limit = request.args.get('limit')
    if raw_limit is None:
        limit = current_app.config.get('LEADERBOARD_LIMIT', 10)
    else:
        try:
            limit = int(raw_limit)
        except ValueError:
            return jsonify({'error': 'limit must be a positive integer'}), 400
    if limit <= 0:
        return jsonify({'error': 'limit must be a positive integer'}), 400
    limit = min(limit, MAX_LEADERBOARD_LIMIT)

    rows = get_storage().score_ledger.leaderboard(limit)
    user_ids = {r.user_id for r in rows if r.user_id is not None}
    usernames = {}
    if user_ids:
        usernames = {u.id: u.username for u in User.query.filter(User.id.in_(user_ids)).all()}

    payload = []
    for row in rows:
        data = row.to_dict()
        data['username'] = usernames.get(row.user_id)
        payload.append(data)
    return jsonify(payload)
