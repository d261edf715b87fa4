"""Tests for upload storage and its cleanup guarantees."""
import io
import pytest
from unittest.mock import MagicMock

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import Headers

from app.core.config import settings
from app.core.errors import ErrorKind
from app.core.storage import UploadRejected, check_upload_type, stored_upload, write_upload
from app.domains.documents.service import DocumentsService

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n"


def make_upload(filename: str = "lease.pdf", content_type: str = "application/pdf", data: bytes = PDF_BYTES):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


class TestUploadValidation:
    @pytest.mark.parametrize("filename, content_type", [
        ("scan.png", "image/png"),
        ("scan.JPG", "image/jpeg"),
        ("lease.pdf", "application/pdf"),
        ("terms.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ])
    def test_accepts_documents_and_images(self, filename, content_type):
        check_upload_type(filename, content_type)

    @pytest.mark.parametrize("filename, content_type", [
        ("payload.exe", "application/octet-stream"),
        ("lease.pdf", "application/x-msdownload"),
        ("notes.txt", "text/plain"),
        (None, "application/pdf"),
    ])
    def test_rejects_other_types(self, filename, content_type):
        with pytest.raises(UploadRejected):
            check_upload_type(filename, content_type)

    def test_rejects_oversized_file_and_leaves_nothing(self, upload_dir, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_BYTES", 8)

        with pytest.raises(UploadRejected):
            write_upload(make_upload())

        assert list(upload_dir.iterdir()) == []


class TestStoredUpload:
    def test_file_removed_unless_kept(self, upload_dir):
        with stored_upload(make_upload()) as stored:
            assert stored.filename.startswith("document-")
            assert stored.size == len(PDF_BYTES)

        assert list(upload_dir.iterdir()) == []

    def test_kept_file_survives(self, upload_dir):
        with stored_upload(make_upload()) as stored:
            stored.keep()

        assert (upload_dir / stored.filename).read_bytes() == PDF_BYTES

    def test_file_removed_when_body_raises(self, upload_dir):
        with pytest.raises(RuntimeError):
            with stored_upload(make_upload()):
                raise RuntimeError("database went away")

        assert list(upload_dir.iterdir()) == []


class TestDocumentUpload:
    def test_failed_commit_discards_file(self, upload_dir):
        mock_db = MagicMock()
        mock_db.commit.side_effect = SQLAlchemyError("insert failed")
        service = DocumentsService(mock_db)

        with pytest.raises(SQLAlchemyError):
            service.upload_document(make_upload(), "Agreement", uploaded_by=None)

        mock_db.rollback.assert_called_once()
        assert list(upload_dir.iterdir()) == []

    def test_rejected_type_is_validation_error(self, upload_dir):
        mock_db = MagicMock()
        service = DocumentsService(mock_db)

        result = service.upload_document(make_upload("run.sh", "text/x-shellscript"), "Other Document", None)

        assert result.kind == ErrorKind.VALIDATION
        mock_db.add.assert_not_called()

    def test_successful_upload_keeps_file(self, upload_dir):
        mock_db = MagicMock()
        service = DocumentsService(mock_db)

        document = service.upload_document(make_upload(), "Agreement", uploaded_by=None)

        assert document.original_name == "lease.pdf"
        assert document.mime_type == "application/pdf"
        assert (upload_dir / document.filename).exists()
