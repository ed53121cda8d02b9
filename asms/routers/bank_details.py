from fastapi import APIRouter, status

from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.schemas.bank_details import BankDetailCreate, BankDetailResponse
from asms.services import bank_details

router = APIRouter(prefix="/api/v1/bank-details", tags=["bank-details"])


@router.post("", response_model=BankDetailResponse, status_code=status.HTTP_201_CREATED)
async def submit_bank_details(
    bank_detail_data: BankDetailCreate, session: DBSessionDep, current_user: CurrentUserDep
) -> BankDetailResponse:
    """Submit payout bank details for one of the caller's applications. Allowed once per application."""
    bank_detail = await bank_details.submit_bank_details(session, current_user.id, bank_detail_data)
    return BankDetailResponse.model_validate(bank_detail)


@router.get("/{application_number}", response_model=BankDetailResponse, status_code=status.HTTP_200_OK)
async def get_bank_details(
    application_number: str, session: DBSessionDep, current_user: CurrentUserDep
) -> BankDetailResponse:
    bank_detail = await bank_details.get_bank_details(session, current_user.id, application_number)
    return BankDetailResponse.model_validate(bank_detail)
