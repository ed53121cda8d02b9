from datetime import datetime

from pydantic import BaseModel, Field


class BankDetailCreate(BaseModel):
    """Schema for submitting payout bank details for an application."""

    application_number: str = Field(..., min_length=1, max_length=32)
    account_holder_name: str = Field(..., min_length=1, max_length=120)
    bank_name: str = Field(..., min_length=1, max_length=120)
    branch_name: str = Field(..., min_length=1, max_length=120)
    swift_code: str = Field(..., min_length=1, max_length=20)
    account_number: str = Field(..., min_length=1, max_length=40)


class BankDetailResponse(BaseModel):
    id: int
    application_id: int
    application_number: str
    user_id: int
    account_holder_name: str
    bank_name: str
    branch_name: str
    swift_code: str
    account_number: str
    created_at: datetime

    class Config:
        from_attributes = True
