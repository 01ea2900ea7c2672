from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    origins = [o.strip() for o in (raw or '*').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One game per process; owned by the app so tests get a fresh one per app
    from buzzquiz.broadcaster import SocketIOBroadcaster
    from buzzquiz.network import server_address
    from buzzquiz.services.game.scheduler import AnswerTimer
    from buzzquiz.services.game.session import GameSession
    flask_app.extensions['game_session'] = GameSession(
        broadcaster=SocketIOBroadcaster(socketio),
        answer_timer=AnswerTimer(socketio),
        answer_timeout_sec=flask_app.config.get('ANSWER_TIMEOUT_SEC', 15),
        max_name_length=flask_app.config.get('MAX_NAME_LENGTH', 20),
        default_total_rounds=flask_app.config.get('DEFAULT_TOTAL_ROUNDS', 10),
        server_address=server_address(flask_app.config),
    )

    from buzzquiz.routes import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from buzzquiz.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('serve')
    @click.option('--host', default='0.0.0.0', show_default=True, help='Interface to bind.')
    @click.option('--port', default=None, type=int, help='Port (defaults to PORT config).')
    @click.option('--debug/--no-debug', default=False)
    def serve_command(host, port, debug):
        """Runs the buzzer server for the LAN."""
        port = port or flask_app.config.get('PORT', 3000)
        session = flask_app.extensions['game_session']
        click.echo(f"Buzzer server on http://localhost:{port} (players: {session.server_address})")
        socketio.run(flask_app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
