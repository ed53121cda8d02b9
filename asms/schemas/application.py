from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, model_validator

from asms.models import ApplicationStatus
from asms.schemas.bank_details import BankDetailResponse
from asms.schemas.auth import UserResponse
from asms.schemas.scheme import SchemeResponse

# Field names used by the legacy web form, JSON API and mobile client
LEGACY_FIELD_NAMES: dict[str, str] = {
    "schemeId": "scheme_id",
    "scholarshipId": "scheme_id",
    "scholarship_id": "scheme_id",
    "dateOfBirth": "date_of_birth",
    "dob": "date_of_birth",
    "homeAddress": "address",
    "home_address": "address",
    "ashesiId": "external_student_id",
    "studentId": "external_student_id",
    "student_id": "external_student_id",
    "externalStudentId": "external_student_id",
}


def map_legacy_fields(data: Any) -> Any:
    """Rename legacy client field names to the canonical ones. Canonical names win."""
    if not isinstance(data, dict):
        return data
    mapped = dict(data)
    for legacy, canonical in LEGACY_FIELD_NAMES.items():
        if legacy in mapped:
            value = mapped.pop(legacy)
            mapped.setdefault(canonical, value)
    return mapped


class ApplicationCreate(BaseModel):
    """
    Schema for submitting an application.

    Every field is optional here so that a missing field is reported by the intake
    service with the field's name instead of a generic schema error.
    """

    scheme_id: int | None = None
    date_of_birth: str | None = None
    gender: str | None = Field(None, max_length=50)
    category: str | None = Field(None, max_length=120)
    major: str | None = Field(None, max_length=120)
    address: str | None = None
    external_student_id: str | None = Field(None, max_length=120)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_field_names(cls, data: Any) -> Any:
        return map_legacy_fields(data)


class ApplicationResponse(BaseModel):
    """Schema for application response."""

    id: int
    application_number: str
    user_id: int
    scheme_id: int
    scheme_name: str | None = None
    date_of_birth: date
    gender: str
    category: str
    major: str
    address: str
    external_student_id: str
    profile_picture: str
    document_ref: str
    status: ApplicationStatus
    remark: str | None = None
    disbursed_amount: float | None = None
    apply_date: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int


class ApplicationStatusResponse(BaseModel):
    """Schema for the applicant-facing status view."""

    id: int
    application_number: str
    status: ApplicationStatus
    remark: str | None = None
    disbursed_amount: float | None = None
    apply_date: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ApplicationStatusUpdate(BaseModel):
    """Schema for an administrative status transition."""

    status: ApplicationStatus
    remark: str = Field(..., min_length=1)
    disbursed_amount: Decimal | None = Field(None, max_digits=10, decimal_places=2)


class AdminApplicationDetailResponse(BaseModel):
    """Application with applicant and payout details for administrators."""

    application: ApplicationResponse
    applicant: UserResponse
    scheme: SchemeResponse
    bank_detail: BankDetailResponse | None = None
