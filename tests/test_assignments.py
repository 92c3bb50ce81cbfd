"""Assignment relation and the cross-repository existence checks."""

import pytest

from app.errors import InvalidInput, NotFound
from app.schemas import TaskAssignment


@pytest.fixture
def task_and_user(store):
    user = store.users.create("Alice")
    task = store.tasks.create(0, "T1", "d", 100, 200, [])
    return task.id, user.id


def test_assign_stores_pair(store, task_and_user):
    task_id, user_id = task_and_user
    store.assignments.assign(task_id, user_id)

    assert store.assignments.contains(task_id, user_id)
    assert store.assignments.get(task_id, user_id) == TaskAssignment(user_id=user_id, task_id=task_id)


def test_duplicate_assignment_is_invalid_input(store, task_and_user):
    task_id, user_id = task_and_user
    other_task = store.tasks.create(0, "T2", "d", 100, 200, []).id
    store.assignments.assign(task_id, user_id)
    store.assignments.assign(other_task, user_id)
    before = list(store.assignments._records.items())

    with pytest.raises(InvalidInput, match=f"Task with id={task_id} is already assigned to user with id={user_id}"):
        store.assignments.assign(task_id, user_id)

    assert list(store.assignments._records.items()) == before
    assert len(before) == 2


@pytest.mark.parametrize("missing", ["task", "user", "both"])
def test_assign_requires_task_and_user(store, task_and_user, missing):
    task_id, user_id = task_and_user
    if missing in ("task", "both"):
        task_id = 100
    if missing in ("user", "both"):
        user_id = 200

    with pytest.raises(NotFound) as excinfo:
        store.assignments.assign(task_id, user_id)
    assert excinfo.value.message == f"Task with id={task_id} or user with id={user_id} not found"
    assert not store.assignments.contains(task_id, user_id)


def test_assign_after_task_deleted(store, task_and_user):
    task_id, user_id = task_and_user
    store.tasks.delete(task_id)
    with pytest.raises(NotFound):
        store.assignments.assign(task_id, user_id)


def test_unassign_removes_only_that_pair(store, task_and_user):
    task_id, user_id = task_and_user
    other_user = store.users.create("Bob").id
    store.assignments.assign(task_id, user_id)
    store.assignments.assign(task_id, other_user)

    store.assignments.unassign(task_id, user_id)

    assert not store.assignments.contains(task_id, user_id)
    assert store.assignments.contains(task_id, other_user)
    with pytest.raises(NotFound, match=f"Task with id={task_id} is not assigned to user with id={user_id}"):
        store.assignments.unassign(task_id, user_id)


def test_unassign_does_not_check_task_or_user(store, task_and_user):
    task_id, user_id = task_and_user
    store.assignments.assign(task_id, user_id)
    store.tasks.delete(task_id)
    store.users.delete(user_id)

    store.assignments.unassign(task_id, user_id)
    assert not store.assignments.contains(task_id, user_id)


def test_deleting_user_keeps_assignments(store, task_and_user):
    task_id, user_id = task_and_user
    store.assignments.assign(task_id, user_id)
    store.users.delete(user_id)
    assert store.assignments.contains(task_id, user_id)


def test_assignments_and_assigned_users_are_independent(store, task_and_user):
    task_id, user_id = task_and_user
    store.assignments.assign(task_id, user_id)
    assert store.tasks.get(task_id).assigned_users == []

    store.tasks.change_status(task_id, store.tasks.get(task_id).status, [user_id, 77])
    store.assignments.unassign(task_id, user_id)
    assert store.tasks.get(task_id).assigned_users == [user_id, 77]


def test_assignments_survive_restart(store, reopen, task_and_user):
    task_id, user_id = task_and_user
    store.assignments.assign(task_id, user_id)

    restarted = reopen()
    with pytest.raises(InvalidInput):
        restarted.assignments.assign(task_id, user_id)
