from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class SchemeBase(BaseModel):
    """Base scholarship scheme schema."""

    name: str = Field(..., min_length=1, max_length=120)
    scheme_type: str | None = Field(None, max_length=120)
    grade: str | None = Field(None, max_length=120)
    year: str | None = Field(None, max_length=20)
    category: str | None = Field(None, max_length=120)
    criteria: str | None = None
    documents_required: str | None = None
    description: str | None = None
    amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    last_date: date


class SchemeCreate(SchemeBase):
    """Schema for creating a scheme."""

    pass


class SchemeUpdate(BaseModel):
    """Schema for editing a scheme. Only provided fields are changed."""

    name: str | None = Field(None, min_length=1, max_length=120)
    scheme_type: str | None = Field(None, max_length=120)
    grade: str | None = Field(None, max_length=120)
    year: str | None = Field(None, max_length=20)
    category: str | None = Field(None, max_length=120)
    criteria: str | None = None
    documents_required: str | None = None
    description: str | None = None
    amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    last_date: date | None = None

    @field_validator("name", "last_date")
    @classmethod
    def reject_null(cls, value):
        """Name and closing date may be omitted but not cleared."""
        if value is None:
            raise ValueError("must not be null")
        return value


class SchemeResponse(SchemeBase):
    """Schema for scheme response."""

    id: int
    amount: float | None = None
    published_at: datetime
    is_open: bool

    class Config:
        from_attributes = True
