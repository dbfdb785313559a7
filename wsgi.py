"""WSGI entrypoint for development and production (project root).

This file creates the Flask application by calling create_app() from
the `backend.competitions` package. Placing the entrypoint at the repository
root makes it straightforward to reference as `wsgi:app` from Gunicorn or
other WSGI servers.

Usage examples:
  - Development: python -m flask --app wsgi:app run --debug
  - Gunicorn:   gunicorn wsgi:app -c gunicorn.conf.py
"""
import os

from dotenv import load_dotenv
from backend.competitions import create_app
from backend.competitions.config import config

# Load environment variables from .env (if present)
load_dotenv()

app = create_app(config[os.environ.get('APP_ENV', 'default')])

if __name__ == '__main__':
    app.run(debug=True)
