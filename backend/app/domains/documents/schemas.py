from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DocumentResponse(BaseModel):
    id: UUID
    document_type: str
    original_name: str
    filename: str
    mime_type: str
    size: int
    uploaded_by: UUID | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
