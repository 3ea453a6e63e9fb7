"""Enrollment code schemas for request/response validation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class CodeStatus(str, Enum):
    """Enrollment code status enumeration."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class CodeBatchCreate(BaseModel):
    """Request body for issuing a batch of enrollment codes."""

    quantity: int = Field(..., gt=0, description="Number of codes to issue")
    notes: str | None = Field(None, max_length=1000)
    expires_in_days: int | None = Field(
        None, ge=1, le=365, description="Optional validity window for every code in the batch"
    )


class CodeBatchCreateResponse(BaseModel):
    batch_id: int
    company_id: int
    program_id: int
    quantity: int
    codes: list[str]


class EnrollmentCodeResponse(BaseModel):
    """Enrollment code as listed to company admins."""

    id: int
    code: str
    company_id: int
    program_id: int
    batch_id: int | None = None
    status: CodeStatus
    used_at: datetime | None = None
    used_by_user_id: int | None = None
    expires_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CodeBatchSummary(BaseModel):
    """Code batch with per-status code counts."""

    id: int
    company_id: int
    program_id: int
    quantity: int
    notes: str | None = None
    created_by: int | None = None
    created_by_name: str | None = None
    created_at: datetime
    active_count: int = 0
    used_count: int = 0
    expired_count: int = 0


class CodeValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class CodeCompany(BaseModel):
    id: int
    name: str


class CodeProgram(BaseModel):
    id: int
    name: str
    description: str | None = None


class CodeValidateResponse(BaseModel):
    """Outcome of validating an active enrollment code."""

    valid: bool = True
    company: CodeCompany
    program: CodeProgram
