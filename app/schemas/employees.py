"""Enrolled employee and dashboard metric schemas."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel


class EmployeeStatus(str, Enum):
    """Enrolled employee status enumeration."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class EmployeeResponse(BaseModel):
    """Enrolled employee as shown to company admins."""

    id: int
    company_id: int
    program_id: int
    enrollment_code_id: int
    name: str
    email: str
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    emed_identifier: str
    status: EmployeeStatus
    enrollment_date: datetime
    lab_kit_status: str | None = None

    model_config = {"from_attributes": True}


class DeactivateResponse(BaseModel):
    success: bool = True
    message: str


class CompanyMetricsResponse(BaseModel):
    """Enrollment funnel counts for one company."""

    company_id: int
    total_employees: int
    total_enrolled: int
    active_users: int
    kits_shipped: int
    kits_processed: int
    total_prescriptions: int
