from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from qrgames.events import OutboundEvent

socketio = SocketIO(async_mode=None)


def get_lobby_manager():
    """The LobbyManager bound to the current app."""
    return current_app.extensions['lobby_manager']


def create_app(config_class=Config, store=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if allowed_origins == ['*']:
        allowed_origins = '*'
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from qrgames.services.games import default_engines
    from qrgames.services.games.questions import load_question_bank
    from qrgames.services.lobby import LobbyManager
    from qrgames.store import create_store

    if store is None:
        store = create_store(flask_app.config)
    flask_app.logger.info(f"[startup] storage={store.name}")
    questions = load_question_bank(flask_app.config.get('QUESTION_BANK_PATH'))
    manager = LobbyManager(store, default_engines(questions))
    flask_app.extensions['lobby_manager'] = manager

    # Import and register blueprints here
    from qrgames.main import main
    flask_app.register_blueprint(main)

    from qrgames.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    # Register Socket.IO event handlers against this app's manager
    from qrgames.socketio_events import register_socketio_handlers
    register_socketio_handlers(manager)

    from qrgames.services.expiry import start_expiry_sweeper
    start_expiry_sweeper(flask_app, manager)

    @click.command('sessions-list')
    def sessions_list_command():
        """Lists live sessions with their player counts."""
        def _show(session, session_id):
            click.echo(
                f"{session_id}  players={len(session.players)}  "
                f"game={session.game_type or '-'}  created={session.created_at.isoformat()}"
            )
        manager.store.for_each(_show)

    @click.command('sessions-purge')
    @click.option('--max-age', type=click.IntRange(min=0), default=None,
                  help='Delete sessions older than this many seconds.')
    def sessions_purge_command(max_age):
        """Deletes sessions older than --max-age (defaults to SESSION_MAX_AGE_SEC)."""
        if max_age is None:
            max_age = int(flask_app.config.get('SESSION_MAX_AGE_SEC', 0))
            if max_age <= 0:
                raise click.UsageError('pass --max-age or set SESSION_MAX_AGE_SEC')
        purged = manager.purge_expired_sessions(max_age)
        for session_id in purged:
            socketio.emit(OutboundEvent.SESSION_ENDED, {'sessionId': session_id}, to=session_id)
        click.echo(f"Purged {len(purged)} session(s).")

    flask_app.cli.add_command(sessions_list_command)
    flask_app.cli.add_command(sessions_purge_command)

    return flask_app
