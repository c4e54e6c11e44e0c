"""Completed/total counts for the progress bar."""

from .tasks import filter_clause


def percent(completed, total):
    # half-up, not banker's rounding
    if not total:
        return 0
    return int(completed * 100 / total + 0.5)


def compute(db, user, completed=None, category=None):
    where, params = filter_clause(user, completed, category)
    row = db.execute(
        f"SELECT COUNT(*) AS total, COALESCE(SUM(completed), 0) AS done FROM tasks WHERE {where}",
        params).fetchone()
    total, done = row["total"], row["done"]
    return {"total": total, "completed": done, "progressPct": percent(done, total)}
