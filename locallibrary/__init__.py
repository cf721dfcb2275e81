from flask import Flask, redirect, render_template, url_for
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect, CSRFError
from sqlalchemy import event
from sqlalchemy.engine import Engine
import logging
import os
import sqlite3

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

CATALOG_PREFIX = '/catalog'


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE RESTRICT unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def create_app(config_name=None, test_config=None):
    from locallibrary.config import config

    app = Flask(__name__)

    # Configuration
    config_name = config_name or os.environ.get('FLASK_CONFIG', 'default')
    app.config.from_object(config[config_name])
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('locallibrary').setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    # Import models
    from locallibrary.models import Author, Book, BookInstance, Genre

    # Register blueprints
    from locallibrary.routes.catalog import catalog_bp
    from locallibrary.routes.genre import genre_bp
    from locallibrary.routes.bookinstance import bookinstance_bp

    app.register_blueprint(catalog_bp, url_prefix=CATALOG_PREFIX)
    app.register_blueprint(genre_bp, url_prefix=CATALOG_PREFIX)
    app.register_blueprint(bookinstance_bp, url_prefix=CATALOG_PREFIX)

    @app.route('/')
    def index():
        return redirect(url_for('catalog.index'))

    register_error_handlers(app)

    # Create tables
    if not app.config.get('USE_AWS'):
        with app.app_context():
            db.create_all()

    app.logger.info('LocalLibrary started (backend: %s)',
                    'dynamodb' if app.config.get('USE_AWS') else 'sql')
    return app


def register_error_handlers(app):
    """Shared error pages for every blueprint"""

    @app.errorhandler(404)
    def not_found(error):
        app.logger.info('Not found: %s', error.description)
        return render_template('errors/error.html', title='Not Found',
                               status=404, message=error.description), 404

    @app.errorhandler(CSRFError)
    def csrf_error(error):
        app.logger.warning('CSRF validation failed: %s', error.description)
        return render_template('errors/error.html', title='Bad Request',
                               status=400, message=error.description), 400

    @app.errorhandler(500)
    def internal_error(error):
        if not app.config.get('USE_AWS'):
            db.session.rollback()
        # Flask has already logged the original exception
        return render_template('errors/error.html', title='Server Error',
                               status=500, message='Something went wrong.'), 500
