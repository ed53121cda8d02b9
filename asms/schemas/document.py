from datetime import datetime

from pydantic import BaseModel

from asms.models import DocumentType


class DocumentResponse(BaseModel):
    """Schema for document response."""

    id: int
    application_id: int
    user_id: int
    document_type: DocumentType
    original_name: str
    file_path: str
    mime_type: str
    file_size: int
    checksum: str
    uploaded_at: datetime

    class Config:
        from_attributes = True


class DocumentListResponse(BaseModel):
    items: list[DocumentResponse]
    total: int
