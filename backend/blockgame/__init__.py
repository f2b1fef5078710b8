from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Grid services live on the app so every handler shares one store, hub and timer
    from blockgame.services.grid import EXTENSION_KEY, build_grid_services
    from blockgame.services.users import UserRegistry
    grid = build_grid_services(flask_app.config, logger=flask_app.logger)
    flask_app.extensions[EXTENSION_KEY] = grid
    flask_app.extensions['blockgame.users'] = UserRegistry(flask_app.config.get('USER_COLORS'))

    from blockgame.main import main
    flask_app.register_blueprint(main)

    from blockgame.api.blocks import blocks
    flask_app.register_blueprint(blocks, url_prefix='/api/blocks')

    from blockgame.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from blockgame.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the block table."""
        with flask_app.app_context():
            if flask_app.config.get('GRID_STORE', 'sql') == 'sql':
                db.drop_all()
                db.create_all()
            else:
                grid.store.clear_all()
            _seed_grid(flask_app, grid.store)
            print('Database has been reset and seeded!')

    @click.command('init-grid')
    def init_grid_command():
        """Creates the grid if the block table is empty."""
        with flask_app.app_context():
            created = _seed_grid(flask_app, grid.store)
            print('Grid created.' if created else 'Grid already exists.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(init_grid_command)

    return flask_app


def _seed_grid(flask_app, store) -> bool:
    rows = int(flask_app.config.get('GRID_ROWS', 10))
    cols = int(flask_app.config.get('GRID_COLS', 10))
    created = store.initialize(rows, cols)
    if created:
        flask_app.logger.info(f"[grid-init] created {rows}x{cols} grid ({rows * cols} blocks)")
    return created


def start_server(flask_app):
    """Create the schema, seed the grid and start the round watcher.

    Only the server entry point calls this, so CLI commands such as
    ``flask db upgrade`` never touch the schema or spawn a watcher.
    Returns the watcher's stop event, or None when the watcher is disabled.
    """
    from blockgame.services.grid import get_grid, start_round_watcher
    with flask_app.app_context():
        grid = get_grid()
        if flask_app.config.get('GRID_STORE', 'sql') == 'sql':
            db.create_all()
        _seed_grid(flask_app, grid.store)
    stop = start_round_watcher(flask_app, grid.timer, flask_app.config.get('ROUND_CHECK_INTERVAL_SEC', 1.0))
    flask_app.extensions['blockgame.round_watcher'] = stop
    return stop
