from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    origins = flask_app.config.get('CORS_ORIGINS', Config.CORS_ORIGINS)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from hvz.main import main
    flask_app.register_blueprint(main)

    from hvz.api.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Players and infections hang off a game; maps are addressed on their own
    from hvz.api.games import games
    from hvz.api.players import players
    from hvz.api.maps import maps
    flask_app.register_blueprint(games, url_prefix='/api/games')
    flask_app.register_blueprint(players, url_prefix='/api/games/<int:game_id>')
    flask_app.register_blueprint(maps, url_prefix='/api/maps')

    from hvz.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from hvz.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    @click.option('--demo/--no-demo', default=True, help='Also create a demo game with a map and a safezone.')
    def db_reset_command(demo):
        """Drop and recreate every table, then seed an administrator and players."""
        from datetime import timedelta
        from hvz.services import maps as map_service
        from hvz.services.games import lifecycle
        from hvz.services.games.scheduler import utcnow

        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            seeded = {}
            for name in ['admin', 'human1', 'human2']:
                user = User(username=name)
                user.set_password('password')
                db.session.add(user)
                seeded[name] = user
            db.session.commit()

            if demo:
                now = utcnow()
                game = lifecycle.create_game('Demo game', seeded['admin'].id, now, now + timedelta(days=1),
                                             description='Seeded by db-reset')
                game_map = map_service.create_map(game.id, name='Quad', latitude=0.0, longitude=0.0, radius=500)
                map_service.create_point('safezone', game_map.id, title='Library', latitude=0.0, longitude=0.0,
                                         radius=25, human_visible=True, begin_time=now,
                                         end_time=now + timedelta(days=1))
                click.echo(f'Seeded demo game {game.id}')

            click.echo('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
