from fastapi import APIRouter, Query, status

from asms.dependencies.auth import AdminDep
from asms.dependencies.database import DBSessionDep
from asms.models import ApplicationStatus
from asms.schemas.application import (
    AdminApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from asms.schemas.auth import UserResponse
from asms.schemas.bank_details import BankDetailResponse
from asms.schemas.scheme import SchemeCreate, SchemeResponse, SchemeUpdate
from asms.services import application_lifecycle, scholarship_catalog

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


# Scheme Management Endpoints
@router.get("/schemes", response_model=list[SchemeResponse], status_code=status.HTTP_200_OK)
async def list_schemes(session: DBSessionDep, current_user: AdminDep) -> list[SchemeResponse]:
    """List all schemes, including closed ones."""
    schemes = await scholarship_catalog.list_all_schemes(session)
    return [SchemeResponse.model_validate(scheme) for scheme in schemes]


@router.post("/schemes", response_model=SchemeResponse, status_code=status.HTTP_201_CREATED)
async def create_scheme(scheme_data: SchemeCreate, session: DBSessionDep, current_user: AdminDep) -> SchemeResponse:
    """Publish a scheme. Active applicants are notified."""
    scheme = await scholarship_catalog.create_scheme(session, scheme_data)
    return SchemeResponse.model_validate(scheme)


@router.put("/schemes/{scheme_id}", response_model=SchemeResponse, status_code=status.HTTP_200_OK)
async def update_scheme(
    scheme_id: int, scheme_update: SchemeUpdate, session: DBSessionDep, current_user: AdminDep
) -> SchemeResponse:
    scheme = await scholarship_catalog.update_scheme(session, scheme_id, scheme_update)
    return SchemeResponse.model_validate(scheme)


# Application Review Endpoints
@router.get("/applications", response_model=ApplicationListResponse, status_code=status.HTTP_200_OK)
async def list_applications(
    session: DBSessionDep,
    current_user: AdminDep,
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
) -> ApplicationListResponse:
    applications = await application_lifecycle.list_applications(session, status=status_filter)
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(application) for application in applications],
        total=len(applications),
    )


@router.get(
    "/applications/{application_id}", response_model=AdminApplicationDetailResponse, status_code=status.HTTP_200_OK
)
async def get_application(
    application_id: int, session: DBSessionDep, current_user: AdminDep
) -> AdminApplicationDetailResponse:
    """Get an application with its applicant and bank details."""
    application = await application_lifecycle.get_application(session, application_id)
    return AdminApplicationDetailResponse(
        application=ApplicationResponse.model_validate(application),
        applicant=UserResponse.model_validate(application.user),
        scheme=SchemeResponse.model_validate(application.scheme),
        bank_detail=(
            BankDetailResponse.model_validate(application.bank_detail) if application.bank_detail is not None else None
        ),
    )


@router.put("/applications/{application_id}/status", response_model=ApplicationResponse, status_code=status.HTTP_200_OK)
async def update_application_status(
    application_id: int, status_update: ApplicationStatusUpdate, session: DBSessionDep, current_user: AdminDep
) -> ApplicationResponse:
    """Move an application to a new status. The applicant is notified."""
    application = await application_lifecycle.set_status(
        session,
        application_id,
        status_update.status,
        status_update.remark,
        disbursed_amount=status_update.disbursed_amount,
    )
    return ApplicationResponse.model_validate(application)
