"""
Application Factory
Creates and configures the Flask application
"""
from flask import Flask

from olpm.config import get_config
from olpm.extensions import db, cors
from olpm.utils.logging_config import configure_logging


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from olpm.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    logger = configure_logging(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # Error handlers
    from olpm.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from olpm.routes import tests_bp, health_bp

    # Test routes (prefixed with /api/tests)
    app.register_blueprint(tests_bp, url_prefix='/api/tests')

    # Health routes (no prefix)
    app.register_blueprint(health_bp)

    # Create database tables
    with app.app_context():
        from olpm import models  # noqa: F401
        db.create_all()
        logger.info('Database tables created/verified')

    return app
