from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Buzzer quiz server is running.'})


@main.route('/api/session')
def session_state():
    """Read-only view of the live game, for debugging and health checks."""
    session = current_app.extensions['game_session']
    return jsonify(session.to_dict())
