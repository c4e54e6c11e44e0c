"""Environment-driven settings. Read once at import."""

import os

BASE_DIR    = os.path.dirname(os.path.abspath(__file__))
DB_PATH     = os.environ.get("DATABASE_PATH", os.path.join(BASE_DIR, "tasklane.db"))
LOG_DIR     = os.environ.get("LOG_DIR", os.path.join(BASE_DIR, "logs"))
LOG_LEVEL   = os.environ.get("LOG_LEVEL", "INFO").upper()
ENV         = os.environ.get("FLASK_ENV", "development")
IS_PROD     = ENV == "production"

# ── Request limits ────────────────────────────────────────────────────────
MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 1 * 1024 * 1024))

# ── Identity provider ─────────────────────────────────────────────────────
FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID", "")

# ── Task suggestions ──────────────────────────────────────────────────────
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL   = os.environ.get("GEMINI_MODEL", "")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", 30))
GEMINI_FALLBACK_MODELS = ("gemini-1.5-flash-8b", "gemini-1.5-flash")

GENERATE_RATE_LIMIT  = int(os.environ.get("GENERATE_RATE_LIMIT", 10))   # max requests
GENERATE_RATE_WINDOW = int(os.environ.get("GENERATE_RATE_WINDOW", 60))  # per window (seconds)
