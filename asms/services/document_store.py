"""Service for uploaded application artifacts (profile pictures and supporting documents)."""
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from asms.config import settings
from asms.core.errors import AuthorizationError, NotFoundError, StorageError, ValidationError
from asms.models import Application, Document, DocumentType
from asms.services.storage.base import StorageBackend

logger = logging.getLogger(__name__)

GENERIC_MIME_TYPE = "application/octet-stream"

ALLOWED_EXTENSIONS: dict[DocumentType, set[str]] = {
    DocumentType.PROFILE: {".jpg", ".jpeg", ".png", ".gif"},
    DocumentType.DOCUMENT: {".pdf", ".doc", ".docx"},
}

ALLOWED_MIME_TYPES: dict[DocumentType, set[str]] = {
    DocumentType.PROFILE: {"image/jpeg", "image/jpg", "image/pjpeg", "image/png", "image/gif"},
    DocumentType.DOCUMENT: {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    },
}

# Stored mime type when the client only sent a generic one
EXTENSION_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass
class UploadedFile:
    """File content received from a client, detached from the transport."""

    filename: str
    content_type: str | None
    content: bytes


def validate_upload(upload: UploadedFile, document_type: DocumentType, max_size: int | None = None) -> str:
    """
    Check an upload against the allow-list of its document type.

    Returns:
        The mime type to record for the file

    Raises:
        ValidationError: If the extension, mime type or size is not acceptable
    """
    max_size = max_size if max_size is not None else settings.upload_max_size
    extension = Path(upload.filename or "").suffix.lower()
    allowed_extensions = ALLOWED_EXTENSIONS[document_type]

    if extension not in allowed_extensions:
        raise ValidationError(
            f"Unsupported file type for {document_type.value}. "
            f"Allowed extensions: {', '.join(sorted(ext.lstrip('.') for ext in allowed_extensions))}"
        )

    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type != GENERIC_MIME_TYPE and content_type not in ALLOWED_MIME_TYPES[document_type]:
        raise ValidationError(f"File content type {content_type} does not match a {document_type.value} file")

    if not upload.content:
        raise ValidationError("Uploaded file is empty")

    if len(upload.content) > max_size:
        raise ValidationError(f"File size exceeds maximum allowed size of {max_size} bytes")

    if not content_type or content_type == GENERIC_MIME_TYPE:
        return EXTENSION_MIME_TYPES[extension]
    return content_type


def application_subdir(application_id: int) -> str:
    return f"applications/{application_id}"


def default_reference(document_type: DocumentType) -> str:
    if document_type == DocumentType.PROFILE:
        return settings.default_profile_picture
    return settings.default_document


def set_application_reference(application: Application, document_type: DocumentType, file_path: str) -> None:
    """Point the application's profile picture or document reference at a stored file."""
    if document_type == DocumentType.PROFILE:
        application.profile_picture = file_path
    else:
        application.document_ref = file_path


async def save_upload(
    storage: StorageBackend,
    application: Application,
    user_id: int,
    document_type: DocumentType,
    upload: UploadedFile,
    mime_type: str,
) -> Document:
    """
    Write an already validated upload and build its Document row.

    The row is not added to a session; the caller owns the transaction.

    Raises:
        StorageError: If the file cannot be written
    """
    try:
        file_path, checksum = await storage.save(
            upload.content, upload.filename, subdir=application_subdir(application.id)
        )
    except (OSError, ValueError) as e:
        logger.error(
            f"Failed to write upload for application {application.id}: {e}",
            exc_info=True,
        )
        raise StorageError("Failed to store uploaded file")

    return Document(
        application_id=application.id,
        user_id=user_id,
        document_type=document_type,
        original_name=Path(upload.filename).name,
        file_path=file_path,
        mime_type=mime_type,
        file_size=len(upload.content),
        checksum=checksum,
        uploaded_at=datetime.utcnow(),
    )


async def remove_files(storage: StorageBackend, file_paths: list[str]) -> None:
    """Best-effort removal of files written by a failed operation."""
    for file_path in file_paths:
        try:
            await storage.delete(file_path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to remove orphaned file {file_path}: {e}")


async def get_owned_application(session: AsyncSession, application_id: int, user_id: int) -> Application:
    """
    Raises:
        NotFoundError: If the application does not exist
        AuthorizationError: If the application belongs to another user
    """
    stmt = select(Application).where(Application.id == application_id)
    result = await session.execute(stmt)
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    if application.user_id != user_id:
        logger.warning(
            "Document access to foreign application denied",
            extra={"application_id": application_id, "user_id": user_id},
        )
        raise AuthorizationError("You do not have access to this application")
    return application


async def upload_document(
    session: AsyncSession,
    storage: StorageBackend,
    application_id: int,
    user_id: int,
    document_type: DocumentType,
    upload: UploadedFile,
) -> Document:
    """Validate, store and record a file for the caller's application."""
    application = await get_owned_application(session, application_id, user_id)
    mime_type = validate_upload(upload, document_type)

    document = await save_upload(storage, application, user_id, document_type, upload, mime_type)
    session.add(document)
    set_application_reference(application, document_type, document.file_path)
    application.updated_at = datetime.utcnow()

    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        await remove_files(storage, [document.file_path])
        logger.error(f"Failed to record document for application {application_id}: {e}", exc_info=True)
        raise StorageError("Failed to save document")

    logger.info(
        "Document uploaded",
        extra={"document_id": document.id, "application_id": application_id, "document_type": document_type.value},
    )
    return document


async def list_documents(session: AsyncSession, application_id: int, user_id: int) -> list[Document]:
    await get_owned_application(session, application_id, user_id)
    stmt = (
        select(Document)
        .where(Document.application_id == application_id)
        .order_by(Document.uploaded_at.desc(), Document.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_document(session: AsyncSession, document_id: int, user_id: int) -> Document:
    """
    Return one of the caller's documents.

    Documents owned by someone else are reported as missing.
    """
    stmt = select(Document).where(Document.id == document_id, Document.user_id == user_id)
    result = await session.execute(stmt)
    document = result.scalar_one_or_none()
    if document is None:
        raise NotFoundError("Document not found")
    return document


async def read_document(storage: StorageBackend, document: Document) -> bytes:
    try:
        return await storage.retrieve(document.file_path)
    except FileNotFoundError:
        logger.warning("Stored file missing", extra={"document_id": document.id, "file_path": document.file_path})
        raise NotFoundError("File not found in storage")


async def delete_document(session: AsyncSession, storage: StorageBackend, document_id: int, user_id: int) -> None:
    """
    Remove the backing file, then the row.

    A missing file is not an error. If the application still references the file,
    the reference falls back to the placeholder.
    """
    document = await get_document(session, document_id, user_id)

    try:
        await storage.delete(document.file_path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to delete file for document {document_id}: {e}", exc_info=True)
        raise StorageError("Failed to delete document")

    stmt = select(Application).where(Application.id == document.application_id)
    result = await session.execute(stmt)
    application = result.scalar_one_or_none()
    if application is not None:
        if application.profile_picture == document.file_path:
            application.profile_picture = default_reference(DocumentType.PROFILE)
        if application.document_ref == document.file_path:
            application.document_ref = default_reference(DocumentType.DOCUMENT)

    await session.delete(document)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to delete document {document_id}: {e}", exc_info=True)
        raise StorageError("Failed to delete document")

    logger.info("Document deleted", extra={"document_id": document_id, "user_id": user_id})
