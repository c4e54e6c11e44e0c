# tests/test_progress.py

import pytest

from tasklane.progress import compute, percent
from tasklane.tasks import create_task, list_tasks, update_task


def _make(db, user, content, category=None, done=False):
    task = create_task(db, user, {"content": content, "category": category})
    if done:
        update_task(db, user, task["id"], {"completed": True})


def test_two_of_three(db, alice):
    _make(db, alice, "a", done=True)
    _make(db, alice, "b", done=True)
    _make(db, alice, "c")

    assert compute(db, alice) == {"total": 3, "completed": 2, "progressPct": 67}


def test_no_tasks(db, alice):
    assert compute(db, alice) == {"total": 0, "completed": 0, "progressPct": 0}


def test_other_users_tasks_do_not_count(db, alice, bob):
    _make(db, bob, "b", done=True)
    _make(db, alice, "a")
    assert compute(db, alice) == {"total": 1, "completed": 0, "progressPct": 0}


@pytest.mark.parametrize("completed, category", [
    (None, "work"), (True, None), (False, "work"), (True, "home"),
])
def test_filtered_progress_matches_filtered_list(db, alice, completed, category):
    _make(db, alice, "w1", "work", done=True)
    _make(db, alice, "w2", "work")
    _make(db, alice, "h1", "home", done=True)
    _make(db, alice, "n1")

    listed = list_tasks(db, alice, completed, category)
    result = compute(db, alice, completed, category)

    assert result["total"] == len(listed)
    assert result["completed"] == sum(t["completed"] for t in listed)


def test_percent_rounds_half_up():
    assert percent(1, 8) == 13
    assert percent(1, 3) == 33
    assert percent(5, 5) == 100
    assert percent(0, 0) == 0
