"""Company admin dashboard endpoints."""

from fastapi import APIRouter, Query

from app.dependencies import CurrentAdmin, DatabaseSession
from app.schemas.employees import (
    CompanyMetricsResponse,
    DeactivateResponse,
    EmployeeResponse,
    EmployeeStatus,
)
from app.services.employee_service import EmployeeService

router = APIRouter(tags=["Dashboard"])


@router.get("/metrics", response_model=CompanyMetricsResponse)
async def get_metrics(db: DatabaseSession, admin: CurrentAdmin) -> CompanyMetricsResponse:
    """Enrollment, lab kit and prescription counts for the admin's company."""
    return await EmployeeService(db).get_metrics(admin.company_id)


@router.get("/employees", response_model=list[EmployeeResponse])
async def list_employees(
    db: DatabaseSession,
    admin: CurrentAdmin,
    status_filter: EmployeeStatus | None = Query(
        None, alias="status", description="Filter by status"
    ),
    search: str | None = Query(None, max_length=200, description="Search by name or email"),
) -> list[EmployeeResponse]:
    """List enrolled employees of the admin's company."""
    return await EmployeeService(db).list_employees(admin.company_id, status_filter, search)


@router.put("/employees/{user_id}/deactivate", response_model=DeactivateResponse)
async def deactivate_employee(
    user_id: int,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> DeactivateResponse:
    """Deactivate an enrolled employee of the admin's company."""
    return await EmployeeService(db).deactivate_employee(admin.company_id, user_id)
