"""Flask extensions initialization (PyMongo, Mail, Limiter, JWT)."""
from flask_mail import Mail
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_jwt_extended import JWTManager

from . import db

# Initialize Flask extensions
mail = Mail()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    headers_enabled=True,
)
jwt = JWTManager()


def init_extensions(app):
    """Initialize Flask extensions with app context.

    Args:
        app: Flask application instance
    """
    mail.init_app(app)
    limiter.init_app(app)
    jwt.init_app(app)

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        from flask import jsonify
        return jsonify({"error": "unauthorized", "message": reason}), 401

    db.init_app(app)
