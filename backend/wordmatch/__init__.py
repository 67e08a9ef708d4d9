from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

SESSION_KEY = 'wordmatch.session'
CONNECTIONS_KEY = 'wordmatch.connections'


def get_session():
    """The GameSession bound to the running app."""
    return current_app.extensions[SESSION_KEY]


def get_connections():
    return current_app.extensions[CONNECTIONS_KEY]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One room per process: the session and the socket roles live on the app
    from wordmatch.state import GameSession
    from wordmatch.broadcast import ConnectionRegistry
    flask_app.extensions[SESSION_KEY] = GameSession(
        name_max_length=int(flask_app.config.get('NAME_MAX_LENGTH', 24)),
        affix_min_length=int(flask_app.config.get('AFFIX_MIN_LENGTH', 4)),
    )
    flask_app.extensions[CONNECTIONS_KEY] = ConnectionRegistry()

    from wordmatch.main import main
    flask_app.register_blueprint(main)

    from wordmatch.api.host import host
    flask_app.register_blueprint(host, url_prefix='/api/host')

    from wordmatch.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    return flask_app
