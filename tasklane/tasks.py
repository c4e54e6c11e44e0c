"""Task repository: owner-scoped CRUD and filtered listing."""

import logging

from . import db as store
from .errors import ValidationError
from .guard import authorize_task
from .validation import (
    MAX_CATEGORY, MAX_CONTENT, MISSING,
    check_bool, check_text, parse_bool_arg, parse_due_date,
)

logger = logging.getLogger(__name__)


def task_to_dict(row):
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "content": row["content"],
        "completed": bool(row["completed"]),
        "category": row["category"],
        "dueDate": row["due_date"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def parse_filters(args):
    """Turn query-string values into ``(completed, category)`` filters."""
    errors = {}
    completed = None
    category = None
    if args.get("completed") not in (None, ""):
        completed = parse_bool_arg(errors, "completed", args["completed"])
    if args.get("category", "").strip():
        category = args["category"].strip()
    if errors:
        raise ValidationError(errors)
    return completed, category


def filter_clause(user, completed=None, category=None):
    """WHERE clause shared by listing and progress so both see the same rows."""
    where = ["user_id=?"]
    params = [user["id"]]
    if completed is not None:
        where.append("completed=?")
        params.append(1 if completed else 0)
    if category is not None:
        where.append("category=?")
        params.append(category)
    return " AND ".join(where), params


def list_tasks(db, user, completed=None, category=None):
    where, params = filter_clause(user, completed, category)
    rows = db.execute(f"SELECT * FROM tasks WHERE {where} ORDER BY created_at DESC, id DESC",
                      params).fetchall()
    return [task_to_dict(r) for r in rows]


def create_task(db, user, payload):
    errors = {}
    content = check_text(errors, "content", payload.get("content"), MAX_CONTENT)
    category = check_text(errors, "category", payload.get("category"), MAX_CATEGORY,
                          required=False, strip=True)
    due_date = parse_due_date(errors, "dueDate", payload.get("dueDate"))
    if errors:
        raise ValidationError(errors)

    now = store.now_iso()
    cur = db.execute(
        "INSERT INTO tasks (user_id,content,completed,category,due_date,created_at,updated_at) "
        "VALUES (?,?,0,?,?,?,?)",
        (user["id"], content, category or None, due_date, now, now))
    db.commit()
    logger.debug("Task created id=%s user=%s", cur.lastrowid, user["id"])
    return get_task(db, user, cur.lastrowid)


def get_task(db, user, task_id):
    return task_to_dict(authorize_task(db, user, task_id))


def update_task(db, user, task_id, payload):
    """Merge only the supplied fields; ``category``/``dueDate`` null clears them."""
    authorize_task(db, user, task_id)

    errors = {}
    fields = []
    params = []

    content = payload.get("content", MISSING)
    if content is not MISSING:
        fields.append("content=?")
        params.append(check_text(errors, "content", content, MAX_CONTENT))

    completed = payload.get("completed", MISSING)
    if completed is not MISSING:
        fields.append("completed=?")
        params.append(1 if check_bool(errors, "completed", completed) else 0)

    category = payload.get("category", MISSING)
    if category is not MISSING:
        fields.append("category=?")
        params.append(check_text(errors, "category", category, MAX_CATEGORY,
                                 required=False, strip=True) or None)

    due_date = payload.get("dueDate", MISSING)
    if due_date is not MISSING:
        fields.append("due_date=?")
        params.append(parse_due_date(errors, "dueDate", due_date))

    if errors:
        raise ValidationError(errors)

    fields.append("updated_at=?")
    params.append(store.now_iso())
    params.extend([task_id, user["id"]])
    db.execute(f"UPDATE tasks SET {', '.join(fields)} WHERE id=? AND user_id=?", params)
    db.commit()
    return get_task(db, user, task_id)


def delete_task(db, user, task_id):
    """Hard delete; subtasks go with it through the foreign-key cascade."""
    authorize_task(db, user, task_id)
    db.execute("DELETE FROM tasks WHERE id=? AND user_id=?", (task_id, user["id"]))
    db.commit()
    logger.debug("Task deleted id=%s user=%s", task_id, user["id"])
