"""
Ownership checks run before every task or subtask detail read and mutation.

Existence and ownership are one predicate, so a row owned by another user
reports NotFound exactly like a missing one.
"""

from .errors import NotFound

# SQLite INTEGER is signed 64-bit; anything outside cannot name a row.
MAX_ROW_ID = 2**63 - 1


def _check_id(row_id):
    if not isinstance(row_id, int) or not -MAX_ROW_ID - 1 <= row_id <= MAX_ROW_ID:
        raise NotFound()


def authorize_task(db, user, task_id):
    _check_id(task_id)
    task = db.execute("SELECT * FROM tasks WHERE id=? AND user_id=?",
                      (task_id, user["id"])).fetchone()
    if task is None:
        raise NotFound()
    return task


def authorize_subtask(db, user, task_id, subtask_id):
    """Ownership is transitive: the task must be the user's, the subtask the task's."""
    task = authorize_task(db, user, task_id)
    _check_id(subtask_id)
    subtask = db.execute("SELECT * FROM subtasks WHERE id=? AND task_id=?",
                         (subtask_id, task["id"])).fetchone()
    if subtask is None:
        raise NotFound()
    return subtask
