from flask import Blueprint, jsonify

from qrgames import get_lobby_manager

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the QR Games server!'})

@main.route('/health')
def health():
    manager = get_lobby_manager()
    return jsonify({'status': 'ok', 'storage': manager.store.name})
