"""
tasklane HTTP API
Bearer-authenticated JSON endpoints for tasks, subtasks, categories and progress.
"""

import os
import time
import logging
from collections import defaultdict

from flask import Flask, request, jsonify, g
from werkzeug.exceptions import HTTPException

from . import categories, identity, progress, subtasks, tasks
from .auth import auth_required, current_user
from .config import (
    DB_PATH, ENV, IS_PROD, MAX_CONTENT_LENGTH,
    GENERATE_RATE_LIMIT, GENERATE_RATE_WINDOW,
)
from .db import close_db, get_db, init_db
from .errors import TasklaneError, Unauthenticated, ValidationError
from .logging_setup import setup_logging
from .suggestions import MAX_COUNT, GeminiTaskGenerator

app = Flask(__name__)
app.config.update(
    DATABASE_PATH=DB_PATH,
    MAX_CONTENT_LENGTH=MAX_CONTENT_LENGTH,
    # Injectable collaborators; built from the environment on first use when None.
    TOKEN_VERIFIER=None,
    TASK_GENERATOR=None,
)
app.teardown_appcontext(close_db)

audit_log = setup_logging(app)
app.logger.info("App starting — env=%s, db=%s", ENV, DB_PATH)

# ── Rate limiting (in-memory) ─────────────────────────────────────────────
_rate_store = defaultdict(list)  # ip:suffix -> [timestamps]

def _rate_limited(key_suffix=""):
    """Return True if the current IP is rate-limited."""
    ip = request.remote_addr or "unknown"
    key = f"{ip}:{key_suffix}"
    now = time.time()
    # drop every client whose newest hit has aged out
    for k in [k for k, ts in _rate_store.items() if not ts or now - ts[-1] >= GENERATE_RATE_WINDOW]:
        del _rate_store[k]
    if key in _rate_store:
        _rate_store[key] = [t for t in _rate_store[key] if now - t < GENERATE_RATE_WINDOW]
    if len(_rate_store.get(key, ())) >= GENERATE_RATE_LIMIT:
        app.logger.warning("Rate limit hit — ip=%s suffix=%s", ip, key_suffix)
        return True
    _rate_store[key].append(now)
    return False

# ── Request lifecycle logging & security headers ─────────────────────────
@app.before_request
def _log_request_start():
    g.request_start = time.time()

@app.after_request
def _log_and_secure(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
    if request.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store"

    duration = round((time.time() - g.get("request_start", time.time())) * 1000, 1)
    level = logging.WARNING if response.status_code >= 400 else logging.DEBUG
    user = g.get("user")
    app.logger.log(
        level,
        "%s %s %s %sms — ip=%s user=%s",
        request.method,
        request.path,
        response.status_code,
        duration,
        request.remote_addr,
        user["id"] if user is not None else "-",
    )
    return response

# ── Error handlers ────────────────────────────────────────────────────────
@app.errorhandler(TasklaneError)
def _domain_error(e):
    response = jsonify(e.to_dict())
    response.status_code = e.status_code
    if isinstance(e, Unauthenticated):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response

@app.errorhandler(404)
def _not_found(e):
    return jsonify({"error": "Not found"}), 404

@app.errorhandler(413)
def _too_large(e):
    return jsonify({"error": "Request too large"}), 413

@app.errorhandler(HTTPException)
def _http_error(e):
    return jsonify({"error": e.name}), e.code

@app.errorhandler(500)
def _server_error(e):
    # Store errors land here too; details stay in the log.
    app.logger.exception("Internal server error: %s", getattr(e, "original_exception", e))
    return jsonify({"error": "Internal server error"}), 500

# ── Request helpers ───────────────────────────────────────────────────────
def _json_body():
    d = request.get_json(silent=True)
    if not isinstance(d, dict):
        raise ValidationError({"body": "must be a JSON object"}, "Invalid request body")
    return d

# ── Tasks ─────────────────────────────────────────────────────────────────

@app.route("/api/tasks", methods=["GET"])
@auth_required
def list_tasks():
    completed, category = tasks.parse_filters(request.args)
    return jsonify(tasks.list_tasks(get_db(), current_user(), completed, category))

@app.route("/api/tasks", methods=["POST"])
@auth_required
def create_task():
    task = tasks.create_task(get_db(), current_user(), _json_body())
    return jsonify(task), 201

@app.route("/api/tasks/<int:tid>", methods=["GET"])
@auth_required
def get_task(tid):
    return jsonify(tasks.get_task(get_db(), current_user(), tid))

@app.route("/api/tasks/<int:tid>", methods=["PUT"])
@auth_required
def update_task(tid):
    return jsonify(tasks.update_task(get_db(), current_user(), tid, _json_body()))

@app.route("/api/tasks/<int:tid>", methods=["DELETE"])
@auth_required
def delete_task(tid):
    tasks.delete_task(get_db(), current_user(), tid)
    return jsonify({"success": True})

# ── Subtasks ──────────────────────────────────────────────────────────────

@app.route("/api/tasks/<int:tid>/subtasks", methods=["GET"])
@auth_required
def list_subtasks(tid):
    return jsonify(subtasks.list_subtasks(get_db(), current_user(), tid))

@app.route("/api/tasks/<int:tid>/subtasks", methods=["POST"])
@auth_required
def create_subtask(tid):
    subtask = subtasks.create_subtask(get_db(), current_user(), tid, _json_body())
    return jsonify(subtask), 201

@app.route("/api/tasks/<int:tid>/subtasks/<int:sid>", methods=["GET"])
@auth_required
def get_subtask(tid, sid):
    return jsonify(subtasks.get_subtask(get_db(), current_user(), tid, sid))

@app.route("/api/tasks/<int:tid>/subtasks/<int:sid>", methods=["PUT"])
@auth_required
def update_subtask(tid, sid):
    return jsonify(subtasks.update_subtask(get_db(), current_user(), tid, sid, _json_body()))

@app.route("/api/tasks/<int:tid>/subtasks/<int:sid>", methods=["DELETE"])
@auth_required
def delete_subtask(tid, sid):
    subtasks.delete_subtask(get_db(), current_user(), tid, sid)
    return jsonify({"success": True})

# ── Categories ────────────────────────────────────────────────────────────

@app.route("/api/categories", methods=["GET"])
@auth_required
def list_categories():
    return jsonify(categories.list_names(get_db(), current_user()))

@app.route("/api/categories/used", methods=["GET"])
@auth_required
def list_used_categories():
    return jsonify(categories.list_used_category_values(get_db(), current_user()))

@app.route("/api/categories/filters", methods=["GET"])
@auth_required
def list_filter_categories():
    return jsonify(categories.list_filter_values(get_db(), current_user()))

@app.route("/api/categories", methods=["POST"])
@auth_required
def create_category():
    created = categories.create_category(get_db(), current_user(), _json_body().get("name"))
    return jsonify({"success": True}), 201 if created else 200

# ── Progress ──────────────────────────────────────────────────────────────

@app.route("/api/progress", methods=["GET"])
@auth_required
def get_progress():
    completed, category = tasks.parse_filters(request.args)
    return jsonify(progress.compute(get_db(), current_user(), completed, category))

# ── Profile ───────────────────────────────────────────────────────────────

@app.route("/api/users/profile", methods=["GET"])
@auth_required
def get_profile():
    return jsonify(identity.profile(current_user()))

@app.route("/api/users/profile", methods=["POST"])
@auth_required
def set_profile_name():
    user = current_user()
    updated = identity.set_display_name(get_db(), user, _json_body().get("name"))
    if updated["display_name"] != user["display_name"]:
        audit_log.info("PROFILE name set — user=%s", user["id"])
    return jsonify(identity.profile(updated))

# ── Task suggestions ──────────────────────────────────────────────────────

def _task_generator():
    generator = app.config.get("TASK_GENERATOR")
    if generator is None:
        generator = GeminiTaskGenerator()
        app.config["TASK_GENERATOR"] = generator
    return generator

@app.route("/api/generate-tasks", methods=["POST"])
@auth_required
def generate_tasks():
    if _rate_limited("generate"):
        return jsonify({"error": "Too many requests. Try again later."}), 429
    d = _json_body()
    errors = {}
    topic = d.get("topic")
    if not isinstance(topic, str) or not topic.strip():
        errors["topic"] = "is required"
    elif len(topic) > 500:
        errors["topic"] = "must be at most 500 characters"
    count = d.get("count")
    if count is not None and (isinstance(count, bool) or not isinstance(count, int)
                              or not 0 < count <= MAX_COUNT):
        errors["count"] = f"must be an integer between 1 and {MAX_COUNT}"
    if errors:
        raise ValidationError(errors)

    suggested, model = _task_generator().generate(topic.strip(), count)
    if suggested is False:
        return jsonify({"tasks": False})
    return jsonify({"tasks": suggested, "model": model})

# ── Health Check ──────────────────────────────────────────────────────────

@app.route("/health")
def health_check():
    """Liveness/readiness probe for load balancers and orchestrators."""
    try:
        get_db().execute("SELECT 1").fetchone()
        return jsonify({"status": "healthy", "env": ENV}), 200
    except Exception as e:
        app.logger.error("Health check failed: %s", e)
        return jsonify({"status": "unhealthy"}), 503

# ── Run (development only) ────────────────────────────────────────────────

if __name__ == "__main__":
    init_db(app.config["DATABASE_PATH"])
    port = int(os.environ.get("PORT", 5000))
    debug = not IS_PROD
    app.logger.info("Starting dev server on port %d (debug=%s)", port, debug)
    app.run(debug=debug, host="0.0.0.0", port=port)
