from datetime import date

import pytest
from pydantic import ValidationError
from sqlmodel import Session

from tasktracker.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from tasktracker.models.task import TaskPriority
from tasktracker.schemas.task import TaskCreate, TaskFilters, TaskUpdate
from tasktracker.services.statuses import StatusRegistry
from tasktracker.services.tasks import TaskRepository
from tasktracker.services.users import UserDirectory


@pytest.fixture()
def users(session: Session):
    directory = UserDirectory(session)
    return {
        "admin": directory.first_active_admin(),
        "alice": directory.create_user("Alice Example", "alice@example.com", "longpass1"),
        "bob": directory.create_user("Bob Example", "bob@example.com", "longpass1"),
    }


@pytest.fixture()
def repo(session: Session) -> TaskRepository:
    return TaskRepository(session)


def test_create_defaults_assignee_and_status(repo: TaskRepository, users, session: Session):
    task = repo.create_task(TaskCreate(title="Write draft"), users["alice"])

    assert task.assigned_to_user_id == users["alice"].id
    assert task.created_by_user_id == users["alice"].id
    assert task.status_id == StatusRegistry(session).default_status_id()
    assert task.status_name == "To Do"
    assert task.priority == TaskPriority.medium
    assert task.assigned_to_user_name == "Alice Example"


def test_non_admin_cannot_assign_to_others(repo: TaskRepository, users):
    with pytest.raises(PermissionDeniedError):
        repo.create_task(
            TaskCreate(title="Sneaky", assigned_to_user_id=users["bob"].id), users["alice"]
        )


def test_admin_assigns_to_active_users_only(repo: TaskRepository, users, session: Session):
    task = repo.create_task(
        TaskCreate(title="For Bob", assigned_to_user_id=users["bob"].id), users["admin"]
    )
    assert task.assigned_to_user_id == users["bob"].id
    assert task.created_by_user_id == users["admin"].id

    bob = users["bob"]
    bob.is_active = False
    session.add(bob)
    session.commit()

    with pytest.raises(BadRequestError):
        repo.create_task(TaskCreate(title="Again", assigned_to_user_id=bob.id), users["admin"])
    with pytest.raises(BadRequestError):
        repo.create_task(TaskCreate(title="Nobody", assigned_to_user_id=9999), users["admin"])


def test_unknown_status_is_rejected(repo: TaskRepository, users):
    with pytest.raises(BadRequestError):
        repo.create_task(TaskCreate(title="Lost", status_id=9999), users["alice"])


def test_create_without_any_status_fails(repo: TaskRepository, users, session: Session):
    registry = StatusRegistry(session)
    for status in registry.list_statuses():
        registry.delete_status(status.id)

    with pytest.raises(BadRequestError):
        repo.create_task(TaskCreate(title="Nowhere"), users["alice"])


def test_listing_is_scoped_for_non_admins(repo: TaskRepository, users):
    repo.create_task(TaskCreate(title="Alice 1"), users["alice"])
    repo.create_task(TaskCreate(title="Alice 2"), users["alice"])
    repo.create_task(TaskCreate(title="Bob 1"), users["bob"])

    # The assignee filter cannot widen a non-admin's scope
    page = repo.list_tasks(TaskFilters(assigned_to_user_id=users["bob"].id), users["alice"])
    assert page.total == 2
    assert {task.title for task in page.items} == {"Alice 1", "Alice 2"}

    everything = repo.list_tasks(TaskFilters(), users["admin"])
    assert everything.total == 3

    bobs = repo.list_tasks(TaskFilters(assigned_to_user_id=users["bob"].id), users["admin"])
    assert [task.title for task in bobs.items] == ["Bob 1"]


def test_pagination_total_ignores_paging(repo: TaskRepository, users):
    for index in range(7):
        repo.create_task(TaskCreate(title=f"Task {index}"), users["alice"])

    first = repo.list_tasks(TaskFilters(page=1, limit=5), users["alice"])
    second = repo.list_tasks(TaskFilters(page=2, limit=5), users["alice"])
    third = repo.list_tasks(TaskFilters(page=3, limit=5), users["alice"])

    assert (first.total, second.total, third.total) == (7, 7, 7)
    assert len(first.items) == 5
    assert len(second.items) == 2
    assert third.items == []
    ids = [task.id for task in first.items + second.items]
    assert len(set(ids)) == 7


def test_limit_is_clamped_and_bad_values_fall_back():
    assert TaskFilters(limit="500").limit == 50
    assert TaskFilters(limit="0").limit == 5
    assert TaskFilters(page="-3").page == 1
    assert TaskFilters(sort_by="bogus", order="sideways").sort_by.value == "createdAt"
    assert TaskFilters(priority="urgent").priority is None
    assert TaskFilters(page="²").page == 1
    assert TaskFilters(limit="²").limit == 5
    assert TaskFilters(limit="9" * 5000).limit == 5
    assert TaskFilters(limit=str(2**40)).limit == 50
    assert TaskFilters(status_id="99999999999999999999").status_id is None
    assert TaskFilters(assigned_to_user_id=2**31).assigned_to_user_id is None


def test_sorting(repo: TaskRepository, users):
    alice = users["alice"]
    repo.create_task(TaskCreate(title="b", priority="high", due_date="2026-03-01"), alice)
    repo.create_task(TaskCreate(title="a", priority="low", due_date="2026-01-01"), alice)
    repo.create_task(TaskCreate(title="c", priority="medium", due_date="2026-02-01"), alice)

    def titles(**filters):
        return [task.title for task in repo.list_tasks(TaskFilters(**filters), alice).items]

    assert titles() == ["c", "a", "b"]
    assert titles(sort_by="title", order="ASC") == ["a", "b", "c"]
    assert titles(sort_by="priority", order="DESC") == ["b", "c", "a"]
    assert titles(sort_by="dueDate", order="asc") == ["a", "c", "b"]


def test_search_and_filters(repo: TaskRepository, users, session: Session):
    alice = users["alice"]
    done_id = StatusRegistry(session).find_status_by_name("done").id
    repo.create_task(TaskCreate(title="Write report", description="Quarterly numbers"), alice)
    repo.create_task(TaskCreate(title="Call bank", description="About the REPORT"), alice)
    repo.create_task(TaskCreate(title="100% done", status_id=done_id, priority="high"), alice)

    found = repo.list_tasks(TaskFilters(search="report"), alice)
    assert {task.title for task in found.items} == {"Write report", "Call bank"}

    # LIKE wildcards in the search term are matched literally
    literal = repo.list_tasks(TaskFilters(search="100%"), alice)
    assert [task.title for task in literal.items] == ["100% done"]
    assert repo.list_tasks(TaskFilters(search="%"), alice).total == 1

    by_status = repo.list_tasks(TaskFilters(status_id=done_id), alice)
    assert [task.title for task in by_status.items] == ["100% done"]
    assert repo.list_tasks(TaskFilters(priority="high"), alice).total == 1


def test_get_task_for_distinguishes_forbidden_from_missing(repo: TaskRepository, users):
    task = repo.create_task(TaskCreate(title="Private"), users["alice"])

    assert repo.get_task_for(task.id, users["alice"]).title == "Private"
    assert repo.get_task_for(task.id, users["admin"]).title == "Private"
    with pytest.raises(PermissionDeniedError):
        repo.get_task_for(task.id, users["bob"])
    with pytest.raises(NotFoundError):
        repo.get_task_for(9999, users["alice"])


def test_partial_update_touches_only_supplied_fields(repo: TaskRepository, users):
    alice = users["alice"]
    task = repo.create_task(
        TaskCreate(title="Draft", description="Keep me", priority="high", due_date="2026-05-01"),
        alice,
    )

    updated = repo.update_task(task.id, TaskUpdate.model_validate({"title": "Final"}), alice)

    assert updated.title == "Final"
    assert updated.description == "Keep me"
    assert updated.priority == TaskPriority.high
    assert updated.due_date == date(2026, 5, 1)
    assert updated.status_id == task.status_id
    assert updated.updated_at >= task.updated_at


def test_explicit_null_clears_nullable_fields(repo: TaskRepository, users):
    alice = users["alice"]
    task = repo.create_task(
        TaskCreate(title="Draft", description="Remove me", due_date="2026-05-01"), alice
    )

    updated = repo.update_task(
        task.id, TaskUpdate.model_validate({"description": None, "dueDate": None}), alice
    )

    assert updated.description is None
    assert updated.due_date is None
    assert updated.title == "Draft"


def test_update_rules(repo: TaskRepository, users):
    alice, bob = users["alice"], users["bob"]
    task = repo.create_task(TaskCreate(title="Mine"), alice)

    with pytest.raises(BadRequestError):
        repo.update_task(task.id, TaskUpdate(), alice)
    with pytest.raises(PermissionDeniedError):
        repo.update_task(task.id, TaskUpdate(title="Hijack"), bob)
    with pytest.raises(PermissionDeniedError):
        repo.update_task(task.id, TaskUpdate(assigned_to_user_id=bob.id), alice)
    with pytest.raises(BadRequestError):
        repo.update_task(task.id, TaskUpdate(status_id=9999), alice)
    with pytest.raises(NotFoundError):
        repo.update_task(9999, TaskUpdate(title="Ghost"), alice)

    assert repo.get_task(task.id).title == "Mine"


def test_delete_task(repo: TaskRepository, users):
    alice, bob = users["alice"], users["bob"]
    task = repo.create_task(TaskCreate(title="Short lived"), alice)

    with pytest.raises(PermissionDeniedError):
        repo.delete_task(task.id, bob)

    repo.delete_task(task.id, alice)
    assert repo.get_task(task.id) is None
    with pytest.raises(NotFoundError):
        repo.delete_task(task.id, alice)


def test_search_folds_non_ascii_case(repo: TaskRepository, users):
    alice = users["alice"]
    repo.create_task(TaskCreate(title="Plan for été"), alice)
    repo.create_task(TaskCreate(title="Winter plan"), alice)

    found = repo.list_tasks(TaskFilters(search="ÉTÉ"), alice)

    assert [task.title for task in found.items] == ["Plan for été"]


def test_out_of_range_references_are_rejected():
    with pytest.raises(ValidationError):
        TaskCreate(title="Huge", status_id=99999999999999999999)
    with pytest.raises(ValidationError):
        TaskUpdate(assigned_to_user_id=2**31)
    with pytest.raises(ValidationError):
        TaskCreate(title="Odd digit", status_id="²")
