# tests/test_subtasks.py

import pytest

from tasklane.errors import NotFound, ValidationError
from tasklane.subtasks import (
    create_subtask, delete_subtask, get_subtask, list_subtasks, update_subtask,
)
from tasklane.tasks import create_task


@pytest.fixture()
def task(db, alice):
    return create_task(db, alice, {"content": "plan trip"})


def test_create_and_list_in_creation_order(db, alice, task):
    create_subtask(db, alice, task["id"], {"content": "book flights"})
    create_subtask(db, alice, task["id"], {"content": "pack", "completed": True})

    subs = list_subtasks(db, alice, task["id"])
    assert [(s["content"], s["completed"]) for s in subs] == [
        ("book flights", False),
        ("pack", True),
    ]
    assert all(s["taskId"] == task["id"] for s in subs)


def test_validation(db, alice, task):
    with pytest.raises(ValidationError) as info:
        create_subtask(db, alice, task["id"], {"content": "", "completed": "no"})
    assert set(info.value.details) == {"content", "completed"}
    assert list_subtasks(db, alice, task["id"]) == []


@pytest.mark.parametrize("content, ok", [("x" * 255, True), ("x" * 256, False)])
def test_content_length_limit_on_create(db, alice, task, content, ok):
    if ok:
        assert create_subtask(db, alice, task["id"], {"content": content})["content"] == content
    else:
        with pytest.raises(ValidationError) as info:
            create_subtask(db, alice, task["id"], {"content": content})
        assert set(info.value.details) == {"content"}
        assert list_subtasks(db, alice, task["id"]) == []


@pytest.mark.parametrize("content, ok", [("x" * 255, True), ("x" * 256, False)])
def test_content_length_limit_on_update(db, alice, task, content, ok):
    sub = create_subtask(db, alice, task["id"], {"content": "draft"})
    if ok:
        assert update_subtask(db, alice, task["id"], sub["id"], {"content": content})["content"] == content
    else:
        with pytest.raises(ValidationError) as info:
            update_subtask(db, alice, task["id"], sub["id"], {"content": content})
        assert set(info.value.details) == {"content"}
        assert get_subtask(db, alice, task["id"], sub["id"]) == sub


def test_every_operation_checks_parent_owner(db, alice, bob, task):
    sub = create_subtask(db, alice, task["id"], {"content": "mine"})

    with pytest.raises(NotFound):
        list_subtasks(db, bob, task["id"])
    with pytest.raises(NotFound):
        create_subtask(db, bob, task["id"], {"content": "intruder"})
    with pytest.raises(NotFound):
        get_subtask(db, bob, task["id"], sub["id"])
    with pytest.raises(NotFound):
        update_subtask(db, bob, task["id"], sub["id"], {"completed": True})
    with pytest.raises(NotFound):
        delete_subtask(db, bob, task["id"], sub["id"])

    assert get_subtask(db, alice, task["id"], sub["id"]) == sub


def test_partial_update(db, alice, task):
    sub = create_subtask(db, alice, task["id"], {"content": "draft"})
    done = update_subtask(db, alice, task["id"], sub["id"], {"completed": True})

    assert done["completed"] is True
    assert done["content"] == "draft"
    assert done["updatedAt"] != sub["updatedAt"]


def test_update_through_wrong_task_is_not_found(db, alice, task):
    other = create_task(db, alice, {"content": "other"})
    sub = create_subtask(db, alice, task["id"], {"content": "draft"})

    with pytest.raises(NotFound):
        update_subtask(db, alice, other["id"], sub["id"], {"content": "moved"})
    assert get_subtask(db, alice, task["id"], sub["id"])["content"] == "draft"


def test_delete(db, alice, task):
    sub = create_subtask(db, alice, task["id"], {"content": "gone soon"})
    delete_subtask(db, alice, task["id"], sub["id"])

    assert list_subtasks(db, alice, task["id"]) == []
    with pytest.raises(NotFound):
        delete_subtask(db, alice, task["id"], sub["id"])
