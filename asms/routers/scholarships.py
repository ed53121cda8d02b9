from fastapi import APIRouter, status

from asms.dependencies.database import DBSessionDep
from asms.schemas.scheme import SchemeResponse
from asms.services import scholarship_catalog

router = APIRouter(prefix="/api/v1/scholarships", tags=["scholarships"])


@router.get("", response_model=list[SchemeResponse], status_code=status.HTTP_200_OK)
async def list_scholarships(session: DBSessionDep) -> list[SchemeResponse]:
    """List scholarships that are still open, most recently published first."""
    schemes = await scholarship_catalog.list_open_schemes(session)
    return [SchemeResponse.model_validate(scheme) for scheme in schemes]


@router.get("/{scheme_id}", response_model=SchemeResponse, status_code=status.HTTP_200_OK)
async def get_scholarship(scheme_id: int, session: DBSessionDep) -> SchemeResponse:
    scheme = await scholarship_catalog.get_scheme(session, scheme_id)
    return SchemeResponse.model_validate(scheme)
