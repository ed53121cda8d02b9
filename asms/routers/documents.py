from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.dependencies.storage import StorageDep
from asms.models import DocumentType
from asms.schemas.auth import MessageResponse
from asms.schemas.document import DocumentListResponse, DocumentResponse
from asms.services import document_store
from asms.services.document_store import UploadedFile

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    session: DBSessionDep,
    storage: StorageDep,
    current_user: CurrentUserDep,
    application_id: int = Form(...),
    document_type: DocumentType = Form(...),
    file: UploadFile = File(...),
) -> DocumentResponse:
    """Upload a profile picture or supporting document for one of the caller's applications."""
    content = await file.read()
    upload = UploadedFile(filename=file.filename or "", content_type=file.content_type, content=content)
    document = await document_store.upload_document(
        session, storage, application_id, current_user.id, document_type, upload
    )
    return DocumentResponse.model_validate(document)


@router.get("", response_model=DocumentListResponse, status_code=status.HTTP_200_OK)
async def list_documents(
    session: DBSessionDep,
    current_user: CurrentUserDep,
    application_id: int = Query(...),
) -> DocumentListResponse:
    documents = await document_store.list_documents(session, application_id, current_user.id)
    return DocumentListResponse(
        items=[DocumentResponse.model_validate(document) for document in documents],
        total=len(documents),
    )


@router.get("/{document_id}", response_model=DocumentResponse, status_code=status.HTTP_200_OK)
async def get_document(document_id: int, session: DBSessionDep, current_user: CurrentUserDep) -> DocumentResponse:
    """Retrieve document metadata."""
    document = await document_store.get_document(session, document_id, current_user.id)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/download")
async def download_document(
    document_id: int, session: DBSessionDep, storage: StorageDep, current_user: CurrentUserDep
) -> StreamingResponse:
    """Download document file."""
    document = await document_store.get_document(session, document_id, current_user.id)
    file_content = await document_store.read_document(storage, document)
    return StreamingResponse(
        iter([file_content]),
        media_type=document.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{document.original_name}"'},
    )


@router.delete("/{document_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def delete_document(
    document_id: int, session: DBSessionDep, storage: StorageDep, current_user: CurrentUserDep
) -> MessageResponse:
    await document_store.delete_document(session, storage, document_id, current_user.id)
    return MessageResponse(message="Document deleted successfully")
