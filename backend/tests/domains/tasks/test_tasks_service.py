"""Tests for TasksService."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from app.core.errors import ErrorKind
from app.core.security import TokenPayload
from app.domains.staff.models import Staff
from app.domains.tasks.models import Task
from app.domains.tasks.schemas import TaskCreate, TaskUpdate
from app.domains.tasks.service import TasksService, completed_at_for
from app.domains.users.models import User

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def make_actor(role: str) -> TokenPayload:
    return TokenPayload(
        sub=str(uuid4()),
        exp=datetime.now(timezone.utc) + timedelta(hours=1),
        role=role,
    )


class TestCompletedAt:
    def test_set_when_completed(self):
        assert completed_at_for("Completed", NOW) == NOW

    def test_keeps_existing_completion_time(self):
        earlier = NOW - timedelta(days=2)
        assert completed_at_for("Completed", NOW, earlier) == earlier

    @pytest.mark.parametrize("status", ["Pending", "In Progress", "Cancelled"])
    def test_cleared_for_other_statuses(self, status):
        assert completed_at_for(status, NOW, NOW - timedelta(days=1)) is None


class TestTasksService:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def service(self, mock_db):
        return TasksService(mock_db)

    @pytest.fixture
    def task(self):
        return Task(
            id=uuid4(),
            title="Inspect brakes",
            description="Trailer T-104",
            assigned_to=uuid4(),
            assigned_by=uuid4(),
            status="Pending",
            priority="High",
        )

    def test_create_denied_upward_adds_nothing(self, service, mock_db):
        user_id = uuid4()
        staff = Staff(id=uuid4(), user_id=user_id)
        mock_db.query.return_value.filter.return_value.first.side_effect = [
            staff,
            User(id=user_id, role="manager"),
        ]

        result = service.create_task(
            make_actor("staff"),
            TaskCreate(title="Wash", description="Bay 2", assigned_to=staff.id),
        )

        assert result.kind == ErrorKind.FORBIDDEN
        assert "own role level or below" in result.message
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_create_for_unlinked_staff_adds_nothing(self, service, mock_db):
        unlinked = Staff(id=uuid4(), user_id=None)
        mock_db.query.return_value.filter.return_value.first.side_effect = [unlinked]

        result = service.create_task(
            make_actor("admin"),
            TaskCreate(title="Wash", description="Bay 2", assigned_to=unlinked.id),
        )

        assert result.kind == ErrorKind.FORBIDDEN
        assert result.message == "assignee not found"
        mock_db.add.assert_not_called()

    def test_create_records_assigner(self, service, mock_db):
        user_id = uuid4()
        staff = Staff(id=uuid4(), user_id=user_id)
        mock_db.query.return_value.filter.return_value.first.side_effect = [
            staff,
            User(id=user_id, role="staff"),
        ]
        actor = make_actor("manager")

        result = service.create_task(
            actor,
            TaskCreate(title="Wash", description="Bay 2", assigned_to=staff.id, status="Completed"),
        )

        assert str(result.assigned_by) == actor.sub
        assert result.assigned_to == staff.id
        assert result.completed_at is not None
        mock_db.commit.assert_called_once()

    def test_staff_cannot_update_someone_elses_task(self, service, mock_db, task):
        own_staff = Staff(id=uuid4())
        mock_db.query.return_value.filter.return_value.first.side_effect = [task, own_staff]

        result = service.update_status(make_actor("staff"), task.id, "In Progress")

        assert result.kind == ErrorKind.FORBIDDEN
        assert task.status == "Pending"

    def test_staff_updates_own_task(self, service, mock_db, task):
        own_staff = Staff(id=task.assigned_to)
        mock_db.query.return_value.filter.return_value.first.side_effect = [task, own_staff]

        result = service.update_status(make_actor("staff"), task.id, "Completed")

        assert result.status == "Completed"
        assert result.completed_at is not None

    def test_reopening_clears_completed_at(self, service, mock_db, task):
        task.status = "Completed"
        task.completed_at = NOW
        mock_db.query.return_value.filter.return_value.first.return_value = task

        result = service.update_task(make_actor("manager"), task.id, TaskUpdate(status="In Progress"))

        assert result.completed_at is None

    def test_staff_cannot_reassign(self, service, mock_db, task):
        own_staff = Staff(id=task.assigned_to)
        mock_db.query.return_value.filter.return_value.first.side_effect = [task, own_staff]

        result = service.update_task(make_actor("staff"), task.id, TaskUpdate(assigned_to=uuid4()))

        assert result.kind == ErrorKind.FORBIDDEN
        mock_db.commit.assert_not_called()

    def test_update_missing_task(self, service, mock_db):
        mock_db.query.return_value.filter.return_value.first.return_value = None

        result = service.update_task(make_actor("admin"), uuid4(), TaskUpdate(title="x"))

        assert result.kind == ErrorKind.NOT_FOUND

    @pytest.mark.parametrize("field", ["title", "description", "status", "priority", "assigned_to"])
    def test_update_rejects_null_required_field(self, service, mock_db, task, field):
        mock_db.query.return_value.filter.return_value.first.return_value = task

        result = service.update_task(make_actor("manager"), task.id, TaskUpdate.model_validate({field: None}))

        assert result.kind == ErrorKind.VALIDATION
        assert field in result.message
        assert task.status == "Pending"
        mock_db.commit.assert_not_called()

    def test_update_can_clear_due_date(self, service, mock_db, task):
        task.due_date = NOW
        mock_db.query.return_value.filter.return_value.first.return_value = task

        result = service.update_task(make_actor("manager"), task.id, TaskUpdate(due_date=None))

        assert result.due_date is None
        mock_db.commit.assert_called_once()
