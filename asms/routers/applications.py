import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError as SchemaValidationError
from starlette.datastructures import UploadFile

from asms.core.errors import format_validation_errors
from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.dependencies.storage import StorageDep
from asms.models import DocumentType
from asms.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatusResponse,
)
from asms.services import application_intake
from asms.services.document_store import UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])

# Multipart field names carrying files, per document type
UPLOAD_FIELDS: dict[str, DocumentType] = {
    "profile_picture": DocumentType.PROFILE,
    "profilePicture": DocumentType.PROFILE,
    "document": DocumentType.DOCUMENT,
}


async def read_upload(upload: UploadFile) -> UploadedFile | None:
    """Read a multipart file field; an empty file input counts as no upload."""
    if not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(filename=upload.filename, content_type=upload.content_type, content=content)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    application_data: ApplicationCreate,
    session: DBSessionDep,
    storage: StorageDep,
    current_user: CurrentUserDep,
) -> ApplicationResponse:
    """Submit an application without uploads; placeholder references are stored."""
    application = await application_intake.submit_application(
        session, storage, user_id=current_user.id, data=application_data
    )
    return ApplicationResponse.model_validate(application)


@router.post("/upload", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application_with_uploads(
    request: Request,
    session: DBSessionDep,
    storage: StorageDep,
    current_user: CurrentUserDep,
) -> ApplicationResponse:
    """
    Submit an application as a multipart form.

    Optional files are sent as ``profile_picture`` and ``document``. Field names of
    the older web and mobile clients are accepted as well.
    """
    form_data = await request.form()

    fields: dict[str, str] = {}
    uploads: dict[DocumentType, UploadedFile | None] = {}
    for key, value in form_data.multi_items():
        if isinstance(value, UploadFile):
            document_type = UPLOAD_FIELDS.get(key)
            if document_type is None:
                logger.warning(f"Ignoring unexpected upload field {key}")
                continue
            uploads[document_type] = await read_upload(value)
        else:
            fields[key] = value

    try:
        application_data = ApplicationCreate.model_validate(fields)
    except SchemaValidationError as e:
        detail = format_validation_errors(e.errors())
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    application = await application_intake.submit_application(
        session, storage, user_id=current_user.id, data=application_data, uploads=uploads
    )
    return ApplicationResponse.model_validate(application)


@router.get("", response_model=ApplicationListResponse, status_code=status.HTTP_200_OK)
async def list_my_applications(session: DBSessionDep, current_user: CurrentUserDep) -> ApplicationListResponse:
    applications = await application_intake.list_applications_for_user(session, current_user.id)
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(application) for application in applications],
        total=len(applications),
    )


@router.get("/{application_id}", response_model=ApplicationResponse, status_code=status.HTTP_200_OK)
async def get_my_application(
    application_id: int, session: DBSessionDep, current_user: CurrentUserDep
) -> ApplicationResponse:
    application = await application_intake.get_application_for_user(session, application_id, current_user.id)
    return ApplicationResponse.model_validate(application)


@router.get("/{application_id}/status", response_model=ApplicationStatusResponse, status_code=status.HTTP_200_OK)
async def get_my_application_status(
    application_id: int, session: DBSessionDep, current_user: CurrentUserDep
) -> ApplicationStatusResponse:
    application = await application_intake.get_application_for_user(session, application_id, current_user.id)
    return ApplicationStatusResponse.model_validate(application)
