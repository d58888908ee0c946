"""TaskOrchestrator: ordering, side effects and failure isolation."""

from unittest.mock import MagicMock

import pytest

from taskhub.core.auth import CurrentUser
from taskhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from taskhub.models import AuditAction, AuditLog, Notification, Task, TaskStatus
from taskhub.services.orchestrator import TaskOrchestrator
from taskhub.services.sinks import AuditSink, NotificationSink
from taskhub.services.task_store import TaskStore

from conftest import ADMIN_ID, ALICE_ID, BOB_ID, CAROL_ID, GHOST_ID

PAYLOAD = {"title": "Plan sprint", "description": "Pick stories", "dueDate": "2030-03-01"}


@pytest.fixture
def orchestrator(db_session, users) -> TaskOrchestrator:
    hooks = [NotificationSink(db_session).on_task_event, AuditSink(db_session).on_task_event]
    return TaskOrchestrator(TaskStore(db_session), hooks=hooks)


def _audit_entries(db_session):
    return db_session.query(AuditLog).order_by(AuditLog.id).all()


def test_create_sets_creator_and_audits(orchestrator, db_session, alice) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)

    assert task.created_by == ALICE_ID
    entries = _audit_entries(db_session)
    assert [(e.action, e.task_id, e.user_id) for e in entries] == [("CREATE", task.id, ALICE_ID)]
    assert db_session.query(Notification).count() == 0


def test_create_with_assignee_notifies_exactly_once(orchestrator, db_session, alice) -> None:
    task = orchestrator.create_task(alice, {**PAYLOAD, "assignedTo": BOB_ID})

    notifications = db_session.query(Notification).all()
    assert len(notifications) == 1
    assert notifications[0].user_id == BOB_ID
    assert notifications[0].task_id == task.id
    assert "Plan sprint" in notifications[0].message


@pytest.mark.parametrize(
    "payload",
    [
        {**PAYLOAD, "title": ""},
        {**PAYLOAD, "dueDate": "someday"},
        {"title": "No description", "dueDate": "2030-03-01"},
    ],
)
def test_invalid_create_has_no_side_effects(orchestrator, db_session, alice, payload) -> None:
    with pytest.raises(ValidationError):
        orchestrator.create_task(alice, payload)
    assert db_session.query(Task).count() == 0
    assert _audit_entries(db_session) == []


def test_invalid_status_rejected_for_every_caller(orchestrator, db_session, alice, admin) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)
    for caller in (alice, admin):
        with pytest.raises(ValidationError):
            orchestrator.update_status(caller, task.id, "Done")
    assert db_session.get(Task, task.id).status == TaskStatus.PENDING.value
    assert [e.action for e in _audit_entries(db_session)] == ["CREATE"]


def test_invalid_status_is_checked_before_lookup(orchestrator, alice) -> None:
    with pytest.raises(ValidationError):
        orchestrator.update_status(alice, 999, "Done")


def test_non_owner_cannot_update_or_delete(orchestrator, db_session, alice, bob) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)

    with pytest.raises(AuthorizationError):
        orchestrator.update_status(bob, task.id, "Completed")
    with pytest.raises(AuthorizationError):
        orchestrator.update_task(bob, task.id, {"title": "Hijacked"})
    with pytest.raises(AuthorizationError):
        orchestrator.delete_task(bob, task.id)

    unchanged = db_session.get(Task, task.id)
    assert unchanged.status == TaskStatus.PENDING.value
    assert unchanged.title == "Plan sprint"
    assert [e.action for e in _audit_entries(db_session)] == ["CREATE"]


def test_owner_status_update_is_audited(orchestrator, db_session, alice) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)
    updated = orchestrator.update_status(alice, task.id, "Completed")

    assert updated.status == "Completed"
    last = _audit_entries(db_session)[-1]
    assert (last.action, last.task_id, last.user_id) == ("UPDATE", task.id, ALICE_ID)
    assert "Completed" in last.details


def test_admin_deletes_someone_elses_task(orchestrator, db_session, alice, admin) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)
    orchestrator.delete_task(admin, task.id)

    last = _audit_entries(db_session)[-1]
    assert (last.action, last.task_id, last.user_id) == ("DELETE", task.id, ADMIN_ID)
    with pytest.raises(NotFoundError):
        orchestrator.get_task(admin, task.id)


def test_missing_task_is_not_found(orchestrator, alice) -> None:
    with pytest.raises(NotFoundError):
        orchestrator.delete_task(alice, 4242)
    with pytest.raises(NotFoundError):
        orchestrator.update_status(alice, 4242, "Completed")


def test_get_task_forbidden_for_other_user(orchestrator, alice, bob) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)
    with pytest.raises(AuthorizationError):
        orchestrator.get_task(bob, task.id)


def test_reassignment_notifies_new_assignee_only(orchestrator, db_session, alice) -> None:
    task = orchestrator.create_task(alice, {**PAYLOAD, "assignedTo": BOB_ID})
    orchestrator.update_task(alice, task.id, {"title": "Plan sprint 2"})
    orchestrator.update_task(alice, task.id, {"assignedTo": CAROL_ID})

    recipients = [n.user_id for n in db_session.query(Notification).order_by(Notification.id)]
    assert recipients == [BOB_ID, CAROL_ID]


def test_update_with_nothing_to_change(orchestrator, alice) -> None:
    task = orchestrator.create_task(alice, PAYLOAD)
    with pytest.raises(ValidationError):
        orchestrator.update_task(alice, task.id, {})


def test_hooks_run_in_order_after_commit(db_session, users, alice) -> None:
    calls = []
    store = TaskStore(db_session)

    def first(event):
        # the task is already committed when hooks run
        calls.append(("first", event.action, store.get(event.task_id) is not None))

    def second(event):
        calls.append(("second", event.action, True))

    orchestrator = TaskOrchestrator(store, hooks=[first, second])
    orchestrator.create_task(alice, PAYLOAD)

    assert calls == [("first", AuditAction.CREATE, True), ("second", AuditAction.CREATE, True)]


def test_failing_hook_does_not_undo_mutation(db_session, users, alice) -> None:
    broken = MagicMock(side_effect=RuntimeError("notification backend down"))
    audit = AuditSink(db_session)
    orchestrator = TaskOrchestrator(TaskStore(db_session), hooks=[broken, audit.on_task_event])

    task = orchestrator.create_task(alice, {**PAYLOAD, "assignedTo": BOB_ID})

    broken.assert_called_once()
    assert db_session.get(Task, task.id) is not None
    assert [e.action for e in _audit_entries(db_session)] == ["CREATE"]


def test_admin_without_user_row_is_still_audited(orchestrator, db_session, alice) -> None:
    ghost_admin = CurrentUser(user_id=GHOST_ID, role="admin")
    task = orchestrator.create_task(alice, PAYLOAD)

    orchestrator.delete_task(ghost_admin, task.id)

    entries = _audit_entries(db_session)
    assert [e.action for e in entries] == ["CREATE", "DELETE"]
    assert (entries[-1].task_id, entries[-1].user_id) == (task.id, GHOST_ID)


def test_caller_without_user_row_creates_and_updates(orchestrator, db_session) -> None:
    ghost = CurrentUser(user_id=GHOST_ID, role="normal")

    task = orchestrator.create_task(ghost, {**PAYLOAD, "assignedTo": BOB_ID})
    orchestrator.update_status(ghost, task.id, "Completed")

    loaded = orchestrator.get_task(ghost, task.id)
    assert loaded.created_by == GHOST_ID
    assert loaded.creator is None
    assert loaded.assignee.email == "bob@example.com"
    assert [e.action for e in _audit_entries(db_session)] == ["CREATE", "UPDATE"]
    assert db_session.query(Notification).filter_by(user_id=BOB_ID).count() == 1
