"""Tests for the insurance endpoints."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from app.main import app
from app.core.database import get_db
from app.core.errors import ServiceError
from app.core.security import TokenPayload, verify_token
from app.domains.insurance.models import InsurancePolicy

NOW = datetime.now(timezone.utc)

STATS = {
    "total_policies": 4,
    "active_policies": 2,
    "expired_policies": 1,
    "expiring_policies": 1,
    "reminders_sent": 0,
    "reminders_due": 2,
    "pending_verification": 3,
    "verified": 1,
    "rejected": 0,
    "requires_update": 0,
}


def make_policy(**overrides) -> InsurancePolicy:
    values = dict(
        id=uuid4(),
        trailer_id=uuid4(),
        provider="Northwind Mutual",
        policy_number="NW-1001",
        policy_type="Comprehensive",
        start_date=NOW - timedelta(days=300),
        expiry_date=NOW + timedelta(days=65),
        premium=1200.0,
        premium_frequency="Annual",
        status="active",
        verification_status="pending",
        notify_before_days=30,
        notify_by_email=True,
        notify_by_sms=False,
        documents=[],
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return InsurancePolicy(**values)


@pytest.fixture
def mock_db():
    return MagicMock()


def authenticated_client(mock_db, role: str) -> TestClient:
    def override_verify_token():
        return TokenPayload(
            sub=str(uuid4()),
            exp=datetime.now(timezone.utc) + timedelta(hours=1),
            role=role,
        )

    def override_get_db():
        return mock_db

    app.dependency_overrides[verify_token] = override_verify_token
    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def manager_client(mock_db):
    yield authenticated_client(mock_db, "manager")
    app.dependency_overrides.clear()


@pytest.fixture
def staff_client(mock_db):
    yield authenticated_client(mock_db, "staff")
    app.dependency_overrides.clear()


class TestInsuranceEndpoints:
    def test_requires_authentication(self, mock_db):
        app.dependency_overrides[get_db] = lambda: mock_db
        try:
            response = TestClient(app).get("/api/v1/insurance/")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401

    def test_stats_route_is_not_a_policy_id(self, manager_client):
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            MockService.return_value.get_stats.return_value = STATS

            response = manager_client.get("/api/v1/insurance/stats")

        assert response.status_code == 200
        assert response.json()["reminders_due"] == 2

    def test_get_policy_includes_days_until_expiry(self, staff_client):
        policy = make_policy()
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            MockService.return_value.get_policy.return_value = policy

            response = staff_client.get(f"/api/v1/insurance/{policy.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["policy_number"] == "NW-1001"
        assert data["days_until_expiry"] in (65, 66)

    def test_staff_cannot_verify(self, staff_client):
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            response = staff_client.patch(f"/api/v1/insurance/{uuid4()}/verify")

            MockService.return_value.verify.assert_not_called()

        assert response.status_code == 403
        assert response.json()["detail"] == "Role 'staff' may not approve insurance"

    def test_manager_verifies(self, manager_client):
        policy = make_policy(verification_status="verified", verified_at=NOW)
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            MockService.return_value.verify.return_value = policy

            response = manager_client.patch(f"/api/v1/insurance/{policy.id}/verify")

        assert response.status_code == 200
        assert response.json()["verification_status"] == "verified"

    def test_reject_without_reason_is_422(self, manager_client):
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            MockService.return_value.reject.return_value = ServiceError.validation(
                "Rejection reason is required"
            )

            response = manager_client.patch(f"/api/v1/insurance/{uuid4()}/reject", json={})

        assert response.status_code == 422
        assert response.json()["detail"] == "Rejection reason is required"

    def test_create_rejects_derived_status(self, manager_client):
        response = manager_client.post(
            "/api/v1/insurance/",
            json={
                "trailer_id": str(uuid4()),
                "provider": "Northwind Mutual",
                "policy_number": "NW-3",
                "start_date": NOW.isoformat(),
                "expiry_date": (NOW + timedelta(days=365)).isoformat(),
                "premium": 100.0,
                "status": "expired",
            },
        )

        assert response.status_code == 422

    def test_staff_cannot_create(self, staff_client):
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            response = staff_client.post(
                "/api/v1/insurance/",
                json={
                    "trailer_id": str(uuid4()),
                    "provider": "Northwind Mutual",
                    "policy_number": "NW-4",
                    "start_date": NOW.isoformat(),
                    "expiry_date": (NOW + timedelta(days=365)).isoformat(),
                    "premium": 100.0,
                },
            )

            MockService.return_value.create_policy.assert_not_called()

        assert response.status_code == 403

    def test_missing_policy_is_404(self, staff_client):
        with patch("app.domains.insurance.router.InsuranceService") as MockService:
            MockService.return_value.get_policy.return_value = None

            response = staff_client.get(f"/api/v1/insurance/{uuid4()}")

        assert response.status_code == 404

    def test_null_required_field_is_422_not_409(self, manager_client, mock_db):
        mock_db.query.return_value.filter.return_value.first.return_value = make_policy()

        response = manager_client.put(f"/api/v1/insurance/{uuid4()}", json={"provider": None})

        assert response.status_code == 422
        assert response.json()["detail"] == "Fields cannot be null: provider"
        mock_db.commit.assert_not_called()
