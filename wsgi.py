"""
WSGI entry point for production deployment.

Usage:
    gunicorn wsgi:app -c gunicorn.conf.py
"""

from tasklane.app import app
from tasklane.db import init_db

# Ensure database tables exist on first deploy
init_db(app.config["DATABASE_PATH"])
