from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from qrgames import get_lobby_manager
from qrgames.events import CreateSessionPayload, InboundEvent, describe_validation_error
from qrgames.exceptions import LobbyError
from qrgames.qr import join_info
from qrgames.validation import validate_session_id

sessions = Blueprint('sessions', __name__)


@sessions.route('/create', methods=['POST'])
def create_session():
    """
    Creates a new empty session and returns its join link and QR code.
    """
    data = request.get_json(silent=True) or {}
    try:
        payload = CreateSessionPayload.model_validate(data)
        session = get_lobby_manager().create_session(payload.game_type)
    except ValidationError as exc:
        return jsonify({'error': describe_validation_error(InboundEvent.CREATE_SESSION, exc)}), 400
    except LobbyError as exc:
        return jsonify({'error': exc.message}), 400
    current_app.logger.info(f"[http-create] session={session.id}")
    return jsonify(join_info(session.id)), 201


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    """
    Returns the public state of a session.
    """
    if not validate_session_id(session_id):
        return jsonify({'error': 'Invalid session ID format'}), 400

    session = get_lobby_manager().get_session(session_id)
    if session is None:
        return jsonify({'error': 'Session not found'}), 404

    state = session.to_dict()
    return jsonify({
        'id': state['id'],
        'players': state['players'],
        'playerCount': len(state['players']),
        'gameType': state['gameType'],
        'gameState': state['gameState'],
    })
