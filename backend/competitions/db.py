"""Database connection and utility functions for MongoDB.

Provides a MongoDB client scoped to the Flask application context, a
health check for the `/api/health` endpoint, and index management for the
registration collections.
"""

from __future__ import annotations

import logging
from typing import Optional
from pymongo import ASCENDING, MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
from flask import current_app, g

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client instance.

    Returns:
        MongoClient: Configured MongoDB client instance

    Raises:
        DatabaseError: If connection cannot be established
    """
    if 'mongo_client' not in g:
        try:
            mongo_uri = current_app.config['MONGO_URI']
            g.mongo_client = MongoClient(
                mongo_uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                socketTimeoutMS=20000,
                maxPoolSize=50,
                retryWrites=True
            )
            g.mongo_client.admin.command('ping')
            logger.info("MongoDB connection established successfully")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise DatabaseError(f"Database connection failed: {e}")

    return g.mongo_client


def get_db():
    """Get database instance for the current application.

    Raises:
        DatabaseError: If database connection fails
    """
    client = get_mongo_client()
    db_name = current_app.config['MONGO_DB']
    return client[db_name]


def close_db(error: Optional[BaseException] = None) -> None:
    """Close database connection if it exists."""
    mongo_client = g.pop('mongo_client', None)

    if mongo_client is not None:
        mongo_client.close()
        if error:
            logger.warning(f"Database connection closed due to error: {error}")
        else:
            logger.debug("Database connection closed successfully")


def init_app(app) -> None:
    """Register teardown and, unless disabled, verify connectivity at startup.

    Args:
        app: Flask application instance
    """
    app.teardown_appcontext(close_db)

    if not app.config.get('MONGO_CHECK_ON_STARTUP', True):
        logger.debug("Skipping MongoDB startup check")
        return

    with app.app_context():
        try:
            collections = get_db().list_collection_names()
            logger.info(f"Database initialization successful. Found {len(collections)} collections.")
        except (DatabaseError, PyMongoError) as e:
            # Allow the app to start while the database is temporarily unavailable
            logger.error(f"Database initialization failed: {e}")


def health_check() -> dict:
    """Perform database health check.

    Returns:
        dict: Health check results with status and details
    """
    try:
        client = get_mongo_client()
        client.admin.command('ping')
        server_info = client.server_info()

        return {
            'status': 'healthy',
            'database': current_app.config['MONGO_DB'],
            'server_version': server_info.get('version', 'unknown'),
            'message': 'Database connection is operational'
        }

    except (DatabaseError, PyMongoError) as e:
        return {
            'status': 'unhealthy',
            'error': str(e),
            'message': 'Database connection failed'
        }


def ensure_indexes() -> bool:
    """Ensure the indexes used by registration lookups exist.

    Returns:
        bool: True if all indexes were created/verified successfully
    """
    try:
        db = get_db()

        registrations = db.registrations
        registrations.create_index([('competition_id', ASCENDING), ('status', ASCENDING), ('created_at', ASCENDING)])
        registrations.create_index([('competition_id', ASCENDING), ('user_id', ASCENDING)])

        db.users.create_index([('email', ASCENDING)], unique=True)

        logger.info("Database indexes created/verified successfully")
        return True

    except (DatabaseError, PyMongoError) as e:
        logger.error(f"Failed to create indexes: {e}")
        return False
