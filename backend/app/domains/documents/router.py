import os
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse

from app.core.dependencies import DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.documents.models import DocumentType
from app.domains.documents.schemas import DocumentResponse
from app.domains.documents.service import DocumentsService
from app.domains.users.permissions import Action, Resource

router = APIRouter()


@router.get("/", response_model=list[DocumentResponse])
def list_documents(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.DOCUMENTS, Action.READ)),
    document_type: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = DocumentsService(db)
    return service.get_documents(document_type=document_type, skip=skip, limit=limit)


@router.post("/", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.DOCUMENTS, Action.CREATE)),
    document: UploadFile = File(..., description="Image, PDF or Word document"),
    document_type: DocumentType = Form(DocumentType.OTHER),
):
    service = DocumentsService(db)
    return raise_for_error(service.upload_document(document, document_type.value, uploaded_by=UUID(actor.sub)))


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.DOCUMENTS, Action.READ)),
):
    service = DocumentsService(db)
    document = service.get_document(document_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


@router.get("/{document_id}/download")
def download_document(
    document_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.DOCUMENTS, Action.READ)),
):
    service = DocumentsService(db)
    document = service.get_document(document_id)
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    if not os.path.exists(document.path):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found on server")
    return FileResponse(document.path, media_type=document.mime_type, filename=document.original_name)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.DOCUMENTS, Action.DELETE)),
):
    service = DocumentsService(db)
    if not service.delete_document(document_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
