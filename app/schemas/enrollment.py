"""Employee enrollment schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class EnrollmentRequest(BaseModel):
    """Employee enrollment with a one-time code."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, min_length=7, max_length=20)
    date_of_birth: date | None = Field(None, alias="dateOfBirth")
    address: str | None = Field(None, max_length=500)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        if v is None:
            return v
        # Remove common separators
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        if len(cleaned) < 7:
            raise ValueError("Phone number must have at least 7 digits")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date | None) -> date | None:
        """Reject birth dates in the future."""
        if v is not None and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class EnrollmentResponse(BaseModel):
    user_id: int
    name: str
    email: str
    enrollment_date: datetime
    emed_identifier: str
