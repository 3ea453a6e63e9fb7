"""Company dashboard: enrolled employees and enrollment metrics."""

import structlog
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.database import transaction
from app.models.companies import companies
from app.models.enrolled_users import enrolled_users
from app.models.lab_kits import lab_kits
from app.models.telehealth import prescriptions
from app.schemas.employees import (
    CompanyMetricsResponse,
    DeactivateResponse,
    EmployeeResponse,
    EmployeeStatus,
)
from app.schemas.webhooks import LabKitStatus

logger = structlog.get_logger(__name__)

# Approximate head count per company size bucket
SIZE_BUCKET_HEADCOUNT = {
    "1-50": 50,
    "51-200": 200,
    "201-500": 500,
    "501-1000": 1000,
    "1001+": 2000,
}
DEFAULT_HEADCOUNT = 100


class EmployeeService:
    """Service for the company admin dashboard."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def list_employees(
        self,
        company_id: int,
        status: EmployeeStatus | None = None,
        search: str | None = None,
    ) -> list[EmployeeResponse]:
        """
        List a company's enrolled employees, most recent enrollment first.

        Args:
            company_id: Company of the requesting admin
            status: Optional status filter
            search: Optional case-insensitive match on name or email

        Returns:
            Employees with the status of their latest lab kit
        """
        latest_kit_status = (
            select(lab_kits.c.status)
            .where(lab_kits.c.user_id == enrolled_users.c.id)
            .order_by(lab_kits.c.id.desc())
            .limit(1)
            .scalar_subquery()
        )

        conditions = [enrolled_users.c.company_id == company_id]

        if status is not None:
            conditions.append(enrolled_users.c.status == status.value)
        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(
                    enrolled_users.c.name.ilike(search_pattern),
                    enrolled_users.c.email.ilike(search_pattern),
                )
            )

        query = (
            select(enrolled_users, latest_kit_status.label("lab_kit_status"))
            .where(and_(*conditions))
            .order_by(enrolled_users.c.enrollment_date.desc(), enrolled_users.c.id.desc())
        )

        result = await self.db.execute(query)
        return [EmployeeResponse.model_validate(dict(row)) for row in result.mappings()]

    async def deactivate_employee(self, company_id: int, user_id: int) -> DeactivateResponse:
        """
        Mark an enrolled employee inactive.

        Raises:
            NotFoundException: If the employee does not belong to the company
        """
        async with transaction(self.db):
            result = await self.db.execute(
                update(enrolled_users)
                .where(
                    and_(
                        enrolled_users.c.id == user_id,
                        enrolled_users.c.company_id == company_id,
                    )
                )
                .values(status=EmployeeStatus.INACTIVE.value)
            )
            if result.rowcount == 0:  # type: ignore[attr-defined]
                raise NotFoundException("Employee not found")

        logger.info("employee_deactivated", company_id=company_id, user_id=user_id)
        return DeactivateResponse(message="Employee deactivated successfully")

    async def get_metrics(self, company_id: int) -> CompanyMetricsResponse:
        """
        Enrollment funnel counts for a company.

        Raises:
            NotFoundException: If the company does not exist
        """
        result = await self.db.execute(select(companies.c.size).where(companies.c.id == company_id))
        row = result.first()
        if row is None:
            raise NotFoundException("Company not found")

        company_users = select(enrolled_users.c.id).where(
            enrolled_users.c.company_id == company_id
        )

        async def count(query) -> int:
            return (await self.db.execute(query)).scalar_one() or 0

        total_enrolled = await count(
            select(func.count()).select_from(enrolled_users).where(
                enrolled_users.c.company_id == company_id
            )
        )
        active_users = await count(
            select(func.count()).select_from(enrolled_users).where(
                and_(
                    enrolled_users.c.company_id == company_id,
                    enrolled_users.c.status == EmployeeStatus.ACTIVE.value,
                )
            )
        )
        kits_shipped = await count(
            select(func.count()).select_from(lab_kits).where(
                and_(
                    lab_kits.c.user_id.in_(company_users),
                    lab_kits.c.status == LabKitStatus.SHIPPED.value,
                )
            )
        )
        kits_processed = await count(
            select(func.count()).select_from(lab_kits).where(
                and_(
                    lab_kits.c.user_id.in_(company_users),
                    lab_kits.c.status == LabKitStatus.PROCESSED.value,
                )
            )
        )
        total_prescriptions = await count(
            select(func.count()).select_from(prescriptions).where(
                prescriptions.c.user_id.in_(company_users)
            )
        )

        return CompanyMetricsResponse(
            company_id=company_id,
            total_employees=SIZE_BUCKET_HEADCOUNT.get(row.size or "", DEFAULT_HEADCOUNT),
            total_enrolled=total_enrolled,
            active_users=active_users,
            kits_shipped=kits_shipped,
            kits_processed=kits_processed,
            total_prescriptions=total_prescriptions,
        )
