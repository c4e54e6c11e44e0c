"""Input checks shared by the repositories.

Each checker records a reason under the field name in ``errors`` and returns
the cleaned value, so a caller can report every bad field in one pass.
"""

from datetime import datetime

MAX_CONTENT = 255
MAX_CATEGORY = 50

# Distinguishes "key omitted" from an explicit null in partial updates.
MISSING = object()


def check_text(errors, field, val, maxlen, required=True, strip=False):
    if val is None and not required:
        return None
    if not isinstance(val, str):
        errors[field] = "must be a string"
        return None
    if strip:
        val = val.strip()
    if required and not val:
        errors[field] = "is required"
    elif len(val) > maxlen:
        errors[field] = f"must be at most {maxlen} characters"
    return val


def check_bool(errors, field, val):
    if not isinstance(val, bool):
        errors[field] = "must be a boolean"
        return None
    return val


def parse_due_date(errors, field, val):
    """Parse an ISO-8601 date or datetime; returns the normalised timestamp or None."""
    if val is None:
        return None
    if not isinstance(val, str) or not val.strip():
        errors[field] = "must be an ISO-8601 date string"
        return None
    text = val.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).isoformat()
    except ValueError:
        errors[field] = "must be an ISO-8601 date string"
        return None


def parse_bool_arg(errors, field, val):
    """Query-string boolean: true/false/1/0, case-insensitive."""
    lowered = val.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    errors[field] = "must be true or false"
    return None
