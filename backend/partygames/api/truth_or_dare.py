from flask import Blueprint, jsonify, request, session, current_app

from partygames.api import current_identity
from partygames.schemas import (
    AddPlayerBody, ChallengeBody, ModeBody, PlayerCountBody, ResolveBody, parse, validation_error,
)
from partygames.services.truth_or_dare import EmptyQuestionPool, InvalidTransition, TruthOrDareSession
from partygames.socketio_events import notify_leaderboard
from partygames.storage import get_storage

truth_or_dare = Blueprint('truth_or_dare', __name__)

SESSION_KEY = 'truth_or_dare'
SUPPORTED_LOCALES = ('de', 'en')


def _load_session() -> TruthOrDareSession:
    storage = get_storage()
    return TruthOrDareSession.from_dict(session.get(SESSION_KEY), storage.question_bank, storage.score_ledger)


def _save_session(machine: TruthOrDareSession) -> dict:
    state = machine.to_dict()
    session[SESSION_KEY] = state
    return state


def _locale() -> str:
    lang = request.args.get('lang')
    if lang in SUPPORTED_LOCALES:
        return lang
    return request.accept_languages.best_match(SUPPORTED_LOCALES) or current_app.config.get('DEFAULT_LOCALE', 'de')


@truth_or_dare.errorhandler(InvalidTransition)
def invalid_transition(exc):
    return jsonify({'error': str(exc), 'stage': exc.stage}), 409


@truth_or_dare.route('', methods=['GET'])
def get_state():
    return jsonify(_load_session().to_dict())


@truth_or_dare.route('', methods=['DELETE'])
def reset():
    session.pop(SESSION_KEY, None)
    return jsonify(TruthOrDareSession(get_storage().question_bank).to_dict())


@truth_or_dare.route('/mode', methods=['POST'])
def select_mode():
    parsed = parse(ModeBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid mode')
    machine = _load_session()
    machine.select_mode(parsed.value.mode)
    return jsonify(_save_session(machine))


@truth_or_dare.route('/player-count', methods=['POST'])
def set_player_count():
    parsed = parse(PlayerCountBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid player count')
    machine = _load_session()
    machine.set_player_count(parsed.value.count)
    return jsonify(_save_session(machine))


@truth_or_dare.route('/players', methods=['POST'])
def add_player():
    parsed = parse(AddPlayerBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid player')
    body = parsed.value
    machine = _load_session()

    identity_id = current_identity() if body.link_identity else None
    player = machine.add_player(body.name, identity_id=identity_id)
    if player is None:
        return jsonify({'error': 'Player name must be non-blank and unique'}), 400

    state = _save_session(machine)
    response = {'session': state, 'player': player.to_dict()}
    if body.link_identity and identity_id is None:
        response['notice'] = 'Not signed in; scores for this player will not be linked to an account'
    return jsonify(response), 201


@truth_or_dare.route('/challenge', methods=['POST'])
def request_challenge():
    parsed = parse(ChallengeBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid challenge type')
    machine = _load_session()
    try:
        challenge = machine.request_challenge(parsed.value.type, _locale())
    except EmptyQuestionPool as exc:
        current_app.logger.info(f"[question-pool-empty] type={exc.type} mode={exc.mode}")
        return jsonify({'error': 'empty_question_pool', 'message': str(exc)}), 404
    state = _save_session(machine)
    return jsonify({'session': state, 'challenge': challenge})


@truth_or_dare.route('/resolve', methods=['POST'])
def resolve_challenge():
    parsed = parse(ResolveBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid outcome')
    machine = _load_session()
    resolution = machine.resolve_challenge(parsed.value.outcome, identity_accessor=current_identity)
    state = _save_session(machine)

    if resolution.notice:
        current_app.logger.error(f"[persistence-failure] player={resolution.player.name}: {resolution.notice}")
    if resolution.entry is not None:
        current_app.logger.info(
            f"[score-append] player={resolution.player.name} points={resolution.delta} game=truth_or_dare"
        )
        notify_leaderboard()

    return jsonify({
        'session': state,
        'player': resolution.player.to_dict(),
        'outcome': resolution.outcome,
        'delta': resolution.delta,
        'score_entry': resolution.entry.to_dict() if resolution.entry is not None else None,
        'notice': resolution.notice,
    })
