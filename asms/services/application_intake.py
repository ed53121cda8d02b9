"""Service for submitting scholarship applications and reading them back."""
import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from asms.config import settings
from asms.core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from asms.models import Application, ApplicationStatus, DocumentType
from asms.schemas.application import ApplicationCreate
from asms.services.document_store import (
    UploadedFile,
    default_reference,
    remove_files,
    save_upload,
    set_application_reference,
    validate_upload,
)
from asms.services.scholarship_catalog import get_open_scheme
from asms.services.storage.base import StorageBackend
from asms.utils.application_number import generate_application_number
from asms.utils.dates import parse_date_of_birth

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "scheme_id",
    "date_of_birth",
    "gender",
    "category",
    "major",
    "address",
    "external_student_id",
)

ALREADY_APPLIED_MESSAGE = "Already applied for this scholarship"


def check_required_fields(data: ApplicationCreate) -> None:
    """
    Raises:
        ValidationError: Naming the first required field that is missing or blank
    """
    for field in REQUIRED_FIELDS:
        value = getattr(data, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Missing required field: {field}")


async def find_application(session: AsyncSession, user_id: int, scheme_id: int) -> Application | None:
    stmt = select(Application).where(Application.user_id == user_id, Application.scheme_id == scheme_id)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def _insert_application(session: AsyncSession, user_id: int, scheme_id: int, fields: dict) -> Application:
    """
    Insert the application row, retrying with a fresh number when only the number collided.

    Raises:
        ConflictError: If the user already applied for the scheme
        StorageError: If no free application number was found
    """
    max_attempts = max(settings.application_number_max_attempts, 1)
    for attempt in range(1, max_attempts + 1):
        application_number = generate_application_number()
        application = Application(
            application_number=application_number,
            user_id=user_id,
            scheme_id=scheme_id,
            status=ApplicationStatus.PENDING,
            apply_date=datetime.utcnow(),
            profile_picture=default_reference(DocumentType.PROFILE),
            document_ref=default_reference(DocumentType.DOCUMENT),
            **fields,
        )
        session.add(application)
        try:
            await session.flush()
            return application
        except IntegrityError:
            await session.rollback()
            if await find_application(session, user_id, scheme_id) is not None:
                logger.info(
                    "Concurrent duplicate application rejected",
                    extra={"user_id": user_id, "scheme_id": scheme_id},
                )
                raise ConflictError(ALREADY_APPLIED_MESSAGE)
            logger.warning(
                "Application number collision, retrying",
                extra={"attempt": attempt, "application_number": application_number},
            )

    logger.error(f"No unique application number after {max_attempts} attempts")
    raise StorageError("Failed to submit application")


async def submit_application(
    session: AsyncSession,
    storage: StorageBackend,
    user_id: int,
    data: ApplicationCreate,
    uploads: dict[DocumentType, UploadedFile | None] | None = None,
    today: date | None = None,
) -> Application:
    """
    Validate and persist a new application.

    The application row, uploaded files and their Document rows are committed
    together. Files written before a failure are removed again.

    Args:
        session: Database session
        storage: Backend for uploaded files
        user_id: Applicant submitting the application
        data: Profile fields of the application
        uploads: Optional profile picture and supporting document
        today: Date used for the scheme's closing check. Defaults to today (UTC)

    Raises:
        ValidationError: If a required field is missing, the date of birth is not
            understood, or an upload is not acceptable
        NotFoundError: If the scheme does not exist
        PreconditionError: If the scheme is closed
        ConflictError: If the user already applied for the scheme
        StorageError: If the application or its files could not be stored
    """
    check_required_fields(data)

    date_of_birth = parse_date_of_birth(data.date_of_birth)
    if date_of_birth is None:
        logger.warning(
            "Rejected unparseable date of birth",
            extra={"user_id": user_id, "date_of_birth": data.date_of_birth},
        )
        raise ValidationError("Invalid date_of_birth: expected MM/DD/YYYY or YYYY-MM-DD")

    scheme = await get_open_scheme(session, data.scheme_id, today)
    scheme_id = scheme.id

    if await find_application(session, user_id, scheme_id) is not None:
        raise ConflictError(ALREADY_APPLIED_MESSAGE)

    # Validate every upload before anything is written
    pending_uploads = {doc_type: upload for doc_type, upload in (uploads or {}).items() if upload is not None}
    mime_types = {doc_type: validate_upload(upload, doc_type) for doc_type, upload in pending_uploads.items()}

    fields = {
        "date_of_birth": date_of_birth,
        "gender": data.gender.strip(),
        "category": data.category.strip(),
        "major": data.major.strip(),
        "address": data.address.strip(),
        "external_student_id": data.external_student_id.strip(),
    }
    application = await _insert_application(session, user_id, scheme_id, fields)

    written: list[str] = []
    try:
        for doc_type, upload in pending_uploads.items():
            document = await save_upload(storage, application, user_id, doc_type, upload, mime_types[doc_type])
            written.append(document.file_path)
            session.add(document)
            set_application_reference(application, doc_type, document.file_path)
        await session.commit()
    except StorageError:
        await session.rollback()
        await remove_files(storage, written)
        raise
    except IntegrityError:
        await session.rollback()
        await remove_files(storage, written)
        raise ConflictError(ALREADY_APPLIED_MESSAGE)
    except SQLAlchemyError as e:
        await session.rollback()
        await remove_files(storage, written)
        logger.error(f"Failed to submit application for user {user_id}: {e}", exc_info=True)
        raise StorageError("Failed to submit application")

    logger.info(
        "Application submitted",
        extra={
            "application_id": application.id,
            "application_number": application.application_number,
            "user_id": user_id,
            "scheme_id": scheme_id,
            "uploads": len(written),
        },
    )
    return await get_application_for_user(session, application.id, user_id)


async def list_applications_for_user(session: AsyncSession, user_id: int) -> list[Application]:
    stmt = (
        select(Application)
        .where(Application.user_id == user_id)
        .order_by(Application.apply_date.desc(), Application.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def get_application_for_user(session: AsyncSession, application_id: int, user_id: int) -> Application:
    """
    Raises:
        NotFoundError: If the application does not exist or is not the user's
    """
    stmt = (
        select(Application)
        .where(Application.id == application_id, Application.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    application = result.unique().scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    return application
