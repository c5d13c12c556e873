"""Flask application factory."""

import os

import click
from flask import Flask

from .config import config
from .extensions import db, migrate, login_manager, bcrypt, csrf, mail


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    from .utils.logging import configure_logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    bcrypt.init_app(app)
    csrf.init_app(app)
    mail.init_app(app)

    # Create upload directories
    for dir_name in ('categories', 'food-items'):
        os.makedirs(os.path.join(app.config['UPLOAD_FOLDER'], dir_name), exist_ok=True)

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    from .errors import Unauthorized, register_error_handlers
    register_error_handlers(app)

    # User loader for Flask-Login
    from .models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthorized()

    @app.cli.command('purge-otp-codes')
    def purge_otp_codes():
        """Delete used and expired one-time codes."""
        from .services.otp import cleanup_expired
        click.echo(f'Removed {cleanup_expired()} one-time codes.')

    return app
