"""Create the MongoDB indexes used by registration lookups.

The app also does this at startup unless MONGO_CHECK_ON_STARTUP is off;
this helper is for deployments that disable that check. Idempotent.

Usage:
    python scripts/create_indexes.py

Requires:
    MONGO_URI, MONGO_DB environment variables (loaded from .env file)
"""
import os
import sys

# Ensure repo root is on sys.path so `backend` package can be imported
repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from backend.competitions import create_app, db
from backend.competitions.config import config

app = create_app(config[os.environ.get('APP_ENV', 'default')])

with app.app_context():
    if db.ensure_indexes():
        print("[SUCCESS] Registration indexes created/verified")
    else:
        print("[ERROR] Could not create indexes (see log output)")
        sys.exit(1)
