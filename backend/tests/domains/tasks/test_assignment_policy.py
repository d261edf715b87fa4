"""Tests for the task assignment policy."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import UUID, uuid4

from app.core.security import TokenPayload
from app.domains.staff.models import Staff
from app.domains.tasks.policy import ASSIGN_UPWARD_DENIED, ASSIGNEE_NOT_FOUND, TaskAssignmentPolicy
from app.domains.users.models import User


def make_actor(role: str) -> TokenPayload:
    return TokenPayload(
        sub=str(uuid4()),
        exp=datetime.now(timezone.utc) + timedelta(hours=1),
        role=role,
    )


def linked_staff(role_label: str = "Driver") -> tuple[Staff, UUID]:
    user_id = uuid4()
    staff = Staff(id=uuid4(), name="Pat", role_label=role_label, user_id=user_id)
    return staff, user_id


class TestTaskAssignmentPolicy:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def policy(self, mock_db):
        return TaskAssignmentPolicy(mock_db)

    def _lookups(self, mock_db, *results):
        mock_db.query.return_value.filter.return_value.first.side_effect = list(results)

    @pytest.mark.parametrize(
        "actor_role, assignee_role, allowed",
        [
            ("manager", "staff", True),
            ("manager", "manager", True),
            ("staff", "staff", True),
            ("staff", "manager", False),
            ("manager", "admin", False),
            ("admin", "super_admin", False),
            ("super_admin", "admin", True),
        ],
    )
    def test_decision_follows_role_levels(self, policy, mock_db, actor_role, assignee_role, allowed):
        staff, user_id = linked_staff()
        self._lookups(mock_db, staff, User(id=user_id, role=assignee_role))

        decision = policy.check_assignment(make_actor(actor_role), staff.id)

        assert decision.allowed is allowed
        assert decision.reason == (None if allowed else ASSIGN_UPWARD_DENIED)

    def test_role_label_is_ignored(self, policy, mock_db):
        """A staff record labelled 'Manager' whose user is staff can be assigned by staff."""
        staff, user_id = linked_staff(role_label="Manager")
        self._lookups(mock_db, staff, User(id=user_id, role="staff"))

        decision = policy.check_assignment(make_actor("staff"), staff.id)

        assert decision.allowed

    def test_missing_staff_record(self, policy, mock_db):
        self._lookups(mock_db, None)

        decision = policy.check_assignment(make_actor("super_admin"), uuid4())

        assert not decision.allowed
        assert decision.reason == ASSIGNEE_NOT_FOUND

    def test_staff_without_linked_user(self, policy, mock_db):
        staff = Staff(id=uuid4(), name="Unlinked", role_label="Driver", user_id=None)
        self._lookups(mock_db, staff)

        decision = policy.check_assignment(make_actor("super_admin"), staff.id)

        assert decision.reason == ASSIGNEE_NOT_FOUND

    def test_linked_user_missing(self, policy, mock_db):
        staff, _ = linked_staff()
        self._lookups(mock_db, staff, None)

        decision = policy.check_assignment(make_actor("manager"), staff.id)

        assert decision.reason == ASSIGNEE_NOT_FOUND

    def test_assignee_with_unrecognized_role_is_assignable(self, policy, mock_db):
        staff, user_id = linked_staff()
        self._lookups(mock_db, staff, User(id=user_id, role="contractor"))

        assert policy.check_assignment(make_actor("staff"), staff.id).allowed
