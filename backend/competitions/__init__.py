"""Flask application factory and initialization."""
import logging

from flask import Flask, jsonify
from backend.competitions.config import Config
from backend.competitions.extensions import init_extensions
from backend.competitions import db

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    init_extensions(app)

    if app.config.get('MONGO_CHECK_ON_STARTUP', True):
        with app.app_context():
            if not db.ensure_indexes():
                logger.warning('Could not ensure DB indexes at startup')

    @app.route('/api/health')
    def health_check():
        """Health check endpoint with database connectivity."""
        response = {
            "status": "ok",
            "service": "competition-registrations"
        }
        db_health = db.health_check()
        response["database"] = db_health
        if db_health.get('status') != 'healthy':
            response["status"] = "degraded"

        return jsonify(response)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register Flask blueprints with the application.

    Args:
        app: Flask application instance
    """
    # Import blueprints here to avoid circular imports
    from backend.competitions.blueprints.registrations.routes import registrations_bp

    app.register_blueprint(registrations_bp)
