import logging
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ServiceError
from app.core.storage import StoredFile, UploadRejected, discard_file, stored_upload
from app.domains.documents.models import Document

logger = logging.getLogger(__name__)


class DocumentsService:
    def __init__(self, db: Session):
        self.db = db

    def get_documents(self, document_type: str | None = None, skip: int = 0, limit: int = 100) -> list[Document]:
        query = self.db.query(Document)
        if document_type:
            query = query.filter(Document.document_type == document_type)
        return query.order_by(Document.created_at.desc()).offset(skip).limit(limit).all()

    def get_document(self, document_id: UUID) -> Document | None:
        return self.db.query(Document).filter(Document.id == document_id).first()

    def add_document(self, stored: StoredFile, document_type: str, uploaded_by: UUID | None) -> Document:
        """Stage a row for a stored file. The caller commits."""
        document = Document(
            document_type=document_type,
            original_name=stored.original_name,
            filename=stored.filename,
            path=stored.path,
            mime_type=stored.mime_type,
            size=stored.size,
            uploaded_by=uploaded_by,
        )
        self.db.add(document)
        self.db.flush()
        return document

    def upload_document(
        self,
        upload: UploadFile,
        document_type: str,
        uploaded_by: UUID | None,
    ) -> Document | ServiceError:
        """Store the file and record it; the file is removed if the record cannot be saved."""
        try:
            with stored_upload(upload) as stored:
                document = self.add_document(stored, document_type, uploaded_by)
                self.db.commit()
                stored.keep()
        except UploadRejected as e:
            return ServiceError.validation(str(e))
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to record upload {upload.filename}")
            raise

        self.db.refresh(document)
        logger.info(f"Stored document {document.id} ({document.original_name}, {document.size} bytes)")
        return document

    def delete_document(self, document_id: UUID) -> bool:
        document = self.get_document(document_id)
        if not document:
            return False
        path = document.path
        self.db.delete(document)
        self.db.commit()
        discard_file(path)
        return True
