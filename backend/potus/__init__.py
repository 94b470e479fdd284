from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    # One engine per app so per-game locks are shared by all requests
    from potus.services.games.engine import GameCoordinator
    flask_app.extensions['game_engine'] = GameCoordinator()

    from potus.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from potus.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from potus.services.games.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        flask_app.logger.warning(f"[rejected] code={exc.code} {exc}")
        return jsonify({'error': str(exc), 'code': exc.code}), exc.status_code

    # Flask-Login user loader
    from potus.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with a demo game."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            host = User(username='host')
            host.set_password('password')
            db.session.add(host)
            db.session.commit()

            engine = flask_app.extensions['game_engine']
            game = engine.create_game()
            for name in ['Abe', 'Teddy', 'Franklin']:
                engine.add_player(game.id, name)
            print(f"Database has been reset! Demo game {game.id} "
                  f"(join word: {game.secret_word}, admin word: {game.admin_secret_word})")

    flask_app.cli.add_command(db_reset_command)

    return flask_app
