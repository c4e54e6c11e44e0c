"""
Gunicorn configuration for tasklane.
Usage: gunicorn wsgi:app -c gunicorn.conf.py
"""

import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WEB_CONCURRENCY", 2))
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", 4))

# Task generation waits on the model API, so leave headroom over GEMINI_TIMEOUT.
timeout = 90

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

proc_name = "tasklane"
