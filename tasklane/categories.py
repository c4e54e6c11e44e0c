"""
Category registry.

Two sources of category labels exist and can disagree: rows registered in
the ``categories`` table, and free text stored on tasks. They are read
through separate operations; ``list_filter_values`` is their union.
"""

import logging
import sqlite3

from . import db as store
from .errors import ValidationError
from .validation import MAX_CATEGORY, check_text

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"


def _dedupe(names):
    seen = set()
    out = []
    for name in names:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out


def list_names(db, user):
    """Registered names, with the implicit default first."""
    rows = db.execute("SELECT name FROM categories WHERE user_id=? ORDER BY name",
                      (user["id"],)).fetchall()
    return _dedupe([DEFAULT_CATEGORY] + [r["name"] for r in rows])


def create_category(db, user, name):
    """Register ``name``. Returns False when it already existed (still a success)."""
    errors = {}
    name = check_text(errors, "name", name, MAX_CATEGORY, strip=True)
    if errors:
        raise ValidationError(errors)
    try:
        db.execute("INSERT INTO categories (user_id, name, created_at) VALUES (?,?,?)",
                   (user["id"], name, store.now_iso()))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        logger.debug("Category already registered user=%s name=%s", user["id"], name)
        return False
    return True


def list_used_category_values(db, user):
    """Distinct categories carried by the user's tasks, registered or not."""
    rows = db.execute(
        "SELECT DISTINCT category FROM tasks WHERE user_id=? AND category IS NOT NULL "
        "ORDER BY category", (user["id"],)).fetchall()
    return [r["category"] for r in rows]


def list_filter_values(db, user):
    return _dedupe(list_names(db, user) + list_used_category_values(db, user))
