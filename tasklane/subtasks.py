"""Subtask repository. Every call goes through the parent task's ownership check."""

from . import db as store
from .errors import ValidationError
from .guard import authorize_subtask, authorize_task
from .validation import MAX_CONTENT, MISSING, check_bool, check_text


def subtask_to_dict(row):
    return {
        "id": row["id"],
        "taskId": row["task_id"],
        "content": row["content"],
        "completed": bool(row["completed"]),
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


def list_subtasks(db, user, task_id):
    task = authorize_task(db, user, task_id)
    rows = db.execute("SELECT * FROM subtasks WHERE task_id=? ORDER BY created_at, id",
                      (task["id"],)).fetchall()
    return [subtask_to_dict(r) for r in rows]


def create_subtask(db, user, task_id, payload):
    task = authorize_task(db, user, task_id)
    errors = {}
    content = check_text(errors, "content", payload.get("content"), MAX_CONTENT)
    completed = False
    if payload.get("completed") is not None:
        completed = check_bool(errors, "completed", payload["completed"])
    if errors:
        raise ValidationError(errors)

    now = store.now_iso()
    cur = db.execute(
        "INSERT INTO subtasks (task_id,content,completed,created_at,updated_at) VALUES (?,?,?,?,?)",
        (task["id"], content, 1 if completed else 0, now, now))
    db.commit()
    return get_subtask(db, user, task_id, cur.lastrowid)


def get_subtask(db, user, task_id, subtask_id):
    return subtask_to_dict(authorize_subtask(db, user, task_id, subtask_id))


def update_subtask(db, user, task_id, subtask_id, payload):
    subtask = authorize_subtask(db, user, task_id, subtask_id)
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

    if errors:
        raise ValidationError(errors)

    fields.append("updated_at=?")
    params.append(store.now_iso())
    params.extend([subtask["id"], subtask["task_id"]])
    db.execute(f"UPDATE subtasks SET {', '.join(fields)} WHERE id=? AND task_id=?", params)
    db.commit()
    return get_subtask(db, user, task_id, subtask_id)


def delete_subtask(db, user, task_id, subtask_id):
    subtask = authorize_subtask(db, user, task_id, subtask_id)
    db.execute("DELETE FROM subtasks WHERE id=? AND task_id=?",
               (subtask["id"], subtask["task_id"]))
    db.commit()
