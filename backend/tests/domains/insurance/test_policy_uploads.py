"""Upload-and-attach on insurance policies leaves no orphaned files behind."""
import io
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.datastructures import Headers

from app.core.config import settings
from app.core.errors import ErrorKind
from app.domains.insurance.models import InsurancePolicy
from app.domains.insurance.service import InsuranceService

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n"


def make_upload(filename: str = "certificate.pdf", content_type: str = "application/pdf"):
    return UploadFile(
        file=io.BytesIO(PDF_BYTES),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


class TestPolicyUpload:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def service(self, mock_db):
        return InsuranceService(mock_db, clock=lambda: NOW)

    @pytest.fixture
    def policy(self, mock_db):
        policy = InsurancePolicy(
            id=uuid4(),
            trailer_id=uuid4(),
            provider="Northwind Mutual",
            policy_number="NW-1001",
            start_date=NOW - timedelta(days=300),
            expiry_date=NOW + timedelta(days=90),
            premium=1200.0,
            status="active",
            verification_status="pending",
            notify_before_days=30,
            documents=[],
        )
        mock_db.query.return_value.filter.return_value.first.return_value = policy
        return policy

    def test_successful_upload_keeps_file(self, service, mock_db, policy, upload_dir):
        result = service.upload_document(policy.id, make_upload(), "Certificate", uploaded_by=None)

        assert result is policy
        assert len(policy.documents) == 1
        assert policy.documents[0].document_type == "Certificate"
        assert len(list(upload_dir.iterdir())) == 1
        mock_db.commit.assert_called_once()

    def test_missing_expiry_discards_file(self, service, mock_db, policy, upload_dir):
        policy.expiry_date = None

        result = service.upload_document(policy.id, make_upload(), "Certificate", uploaded_by=None)

        assert result.kind == ErrorKind.VALIDATION
        assert list(upload_dir.iterdir()) == []
        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()

    def test_policy_number_conflict_discards_file(self, service, mock_db, policy, upload_dir):
        mock_db.commit.side_effect = IntegrityError(
            "UPDATE", {}, Exception("UNIQUE constraint failed: insurance_policies.policy_number")
        )

        result = service.upload_document(policy.id, make_upload(), "Certificate", uploaded_by=None)

        assert result.kind == ErrorKind.CONFLICT
        assert list(upload_dir.iterdir()) == []
        mock_db.rollback.assert_called_once()

    def test_database_failure_discards_file_and_propagates(self, service, mock_db, policy, upload_dir):
        mock_db.commit.side_effect = OperationalError("COMMIT", {}, Exception("server closed the connection"))

        with pytest.raises(OperationalError):
            service.upload_document(policy.id, make_upload(), "Certificate", uploaded_by=None)

        assert list(upload_dir.iterdir()) == []
        mock_db.rollback.assert_called_once()

    def test_rejected_type_stores_nothing(self, service, mock_db, policy, upload_dir):
        result = service.upload_document(policy.id, make_upload("run.sh", "text/x-shellscript"), "Other", None)

        assert result.kind == ErrorKind.VALIDATION
        assert list(upload_dir.iterdir()) == []
        assert policy.documents == []
        mock_db.add.assert_not_called()

    def test_missing_policy_stores_nothing(self, service, mock_db, upload_dir):
        mock_db.query.return_value.filter.return_value.first.return_value = None

        result = service.upload_document(uuid4(), make_upload(), "Certificate", uploaded_by=None)

        assert result.kind == ErrorKind.NOT_FOUND
        assert list(upload_dir.iterdir()) == []
