from flask import Flask, jsonify, send_from_directory
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

def create_app(config_class=Config, storage=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Question bank and score ledger backing; SQL unless the caller injects one
    from partygames.storage import Storage, SqlQuestionBank, SqlScoreLedger
    if storage is None:
        storage = Storage(question_bank=SqlQuestionBank(), score_ledger=SqlScoreLedger())
    flask_app.extensions['partygames.storage'] = storage

    from partygames.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from partygames.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api/questions')

    from partygames.api.scores import scores
    flask_app.register_blueprint(scores, url_prefix='/api/scores')

    from partygames.api.truth_or_dare import truth_or_dare
    flask_app.register_blueprint(truth_or_dare, url_prefix='/api/truth-or-dare')

    from partygames.api.dice import dice
    flask_app.register_blueprint(dice, url_prefix='/api/dice')

    from partygames.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from partygames.models import User, Question

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not authenticated'}), 401

    @flask_app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(flask_app.config['UPLOAD_FOLDER'], filename)

    @flask_app.errorhandler(413)
    def too_large(_exc):
        return jsonify({'error': 'Upload exceeds the size limit'}), 413

    @click.command('seed-questions')
    def seed_questions_command():
        """Adds the built-in truth-or-dare questions to an empty bank."""
        from partygames.seeds import seed_questions
        with flask_app.app_context():
            added = seed_questions()
            print(f'Seeded {added} questions.')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from partygames.seeds import seed_questions
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users; the first one administers the question bank
            users = ['testuser1', 'testuser2', 'testuser3']
            for i, u in enumerate(users):
                user = User(username=u, email=f'{u}@example.com', is_admin=(i == 0))
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            seed_questions()
            print(f'Database has been reset and seeded ({Question.query.count()} questions)!')

    flask_app.cli.add_command(seed_questions_command)
    flask_app.cli.add_command(db_reset_command)

    return flask_app
