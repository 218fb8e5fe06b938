from flask import Blueprint, jsonify, request, current_app

from partygames.api import admin_required
from partygames.models import GAME_MODES, QUESTION_TYPES
from partygames.schemas import QuestionBody, QuestionUpdateBody, parse, validation_error
from partygames.storage import PersistenceFailure, QuestionNotFound, get_storage

questions = Blueprint('questions', __name__)


@questions.route('/<string:type>/<string:mode>', methods=['GET'])
def list_eligible(type, mode):
    """Active questions for one type and mode. Unknown values are a 400, not an empty list."""
    if type not in QUESTION_TYPES or mode not in GAME_MODES:
        return jsonify({'error': 'Invalid type or mode'}), 400
    bank = get_storage().question_bank
    return jsonify([q.to_dict() for q in bank.list_eligible(type, mode)])


@questions.route('', methods=['GET'])
@admin_required
def list_all():
    bank = get_storage().question_bank
    return jsonify([q.to_dict() for q in bank.list_all()])


@questions.route('', methods=['POST'])
@admin_required
def create_question():
    parsed = parse(QuestionBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid question data')
    try:
        question = get_storage().question_bank.create(**parsed.value.model_dump())
    except PersistenceFailure as exc:
        current_app.logger.error(f"[persistence-failure] create question: {exc}")
        return jsonify({'error': 'Failed to save question'}), 500
    current_app.logger.info(f"[question-create] id={question.id} type={question.type} mode={question.mode}")
    return jsonify(question.to_dict()), 201


@questions.route('/<int:question_id>', methods=['PATCH'])
@admin_required
def update_question(question_id):
    parsed = parse(QuestionUpdateBody, request.get_json(silent=True))
    if not parsed.ok:
        return validation_error(parsed, 'Invalid question data')
    changes = parsed.value.model_dump(exclude_unset=True)
    try:
        question = get_storage().question_bank.update(question_id, **changes)
    except QuestionNotFound:
        return jsonify({'error': 'Question not found'}), 404
    except PersistenceFailure as exc:
        current_app.logger.error(f"[persistence-failure] update question={question_id}: {exc}")
        return jsonify({'error': 'Failed to save question'}), 500
    return jsonify(question.to_dict())


@questions.route('/<int:question_id>', methods=['DELETE'])
@admin_required
def delete_question(question_id):
    """Soft delete: the row stays, it just stops being drawn."""
    try:
        get_storage().question_bank.deactivate(question_id)
    except QuestionNotFound:
        return jsonify({'error': 'Question not found'}), 404
    except PersistenceFailure as exc:
        current_app.logger.error(f"[persistence-failure] deactivate question={question_id}: {exc}")
        return jsonify({'error': 'Failed to delete question'}), 500
    current_app.logger.info(f"[question-deactivate] id={question_id}")
    return '', 204
