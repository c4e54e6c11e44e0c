"""
Identity resolution: verified identity -> local user row.

Users are provisioned on first sight. The UNIQUE constraint on
external_subject_id settles concurrent first requests; no application lock.
"""

import logging
import sqlite3
from collections import namedtuple

from . import db as store
from .errors import Unauthenticated, ValidationError

logger = logging.getLogger(__name__)
audit_log = logging.getLogger("audit")

MAX_DISPLAY_NAME = 100

# Output of the external token verifier, trusted as-is.
VerifiedIdentity = namedtuple("VerifiedIdentity", ["subject_id", "email"], defaults=("",))


def _find_by_subject(db, subject_id):
    return db.execute("SELECT * FROM users WHERE external_subject_id=?",
                      (subject_id,)).fetchone()


def get_user(db, user_id):
    return db.execute("SELECT * FROM users WHERE id=?", (user_id,)).fetchone()


def resolve(db, identity):
    """Find-or-create the user for ``identity``. Email is never overwritten."""
    if identity is None or not identity.subject_id:
        raise Unauthenticated()

    user = _find_by_subject(db, identity.subject_id)
    if user is not None:
        return user

    try:
        db.execute(
            "INSERT INTO users (external_subject_id, email, created_at) VALUES (?,?,?)",
            (identity.subject_id, identity.email or "", store.now_iso()))
        db.commit()
        audit_log.info("PROVISION user — subject=%s email=%s",
                       identity.subject_id, identity.email)
    except sqlite3.IntegrityError:
        # Lost the race: another request inserted the same subject first.
        db.rollback()
        logger.debug("Concurrent provisioning for subject=%s; re-fetching",
                     identity.subject_id)

    user = _find_by_subject(db, identity.subject_id)
    if user is None:
        raise RuntimeError("user row missing after provisioning")
    return user


def set_display_name(db, user, name):
    """Set the display name once. Later calls leave the stored name alone."""
    name = name.strip() if isinstance(name, str) else ""
    if len(name) > MAX_DISPLAY_NAME:
        raise ValidationError({"name": f"must be at most {MAX_DISPLAY_NAME} characters"})
    if not name or user["display_name"] is not None:
        return user
    db.execute("UPDATE users SET display_name=? WHERE id=? AND display_name IS NULL",
               (name, user["id"]))
    db.commit()
    return get_user(db, user["id"])


def profile(user):
    return {
        "id": user["id"],
        "externalSubjectId": user["external_subject_id"],
        "email": user["email"],
        "displayName": user["display_name"],
        "createdAt": user["created_at"],
    }
