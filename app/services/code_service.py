"""Enrollment code service: batch issuance, listing, export and validation."""

import csv
import io
from datetime import timedelta

import structlog
from sqlalchemy import and_, case, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    InvalidOrExpiredCodeException,
    NotFoundException,
    ValidationException,
)
from app.core.identifiers import company_prefix, enrollment_code
from app.core.time_utils import is_past, now_utc
from app.database import retry_once_on_conflict, transaction
from app.models.admins import admins
from app.models.companies import companies
from app.models.enrollment_codes import code_batches, enrollment_codes
from app.models.programs import programs
from app.schemas.codes import (
    CodeBatchCreate,
    CodeBatchCreateResponse,
    CodeBatchSummary,
    CodeCompany,
    CodeProgram,
    CodeStatus,
    CodeValidateResponse,
    EnrollmentCodeResponse,
)
from app.services.program_service import ProgramService

logger = structlog.get_logger(__name__)


async def expire_code(db: AsyncSession, code_id: int) -> bool:
    """
    Move an active code to ``expired`` and commit.

    The update is conditional on the code still being active, so a code that
    was redeemed or expired concurrently is left untouched.

    Returns:
        True if this call performed the transition
    """
    async with transaction(db):
        result = await db.execute(
            update(enrollment_codes)
            .where(
                and_(
                    enrollment_codes.c.id == code_id,
                    enrollment_codes.c.status == CodeStatus.ACTIVE.value,
                )
            )
            .values(status=CodeStatus.EXPIRED.value)
        )
    expired = result.rowcount == 1  # type: ignore[attr-defined]
    if expired:
        logger.info("enrollment_code_expired", code_id=code_id)
    return expired


class CodeService:
    """Service for enrollment code operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def issue_batch(
        self,
        company_id: int,
        admin_id: int,
        data: CodeBatchCreate,
    ) -> CodeBatchCreateResponse:
        """
        Create a batch record and exactly ``quantity`` codes in one transaction.

        Codes look like ``ACM-GLP1-7KQ2ZD``. Their uniqueness is left to the
        unique constraint; a collision aborts the whole batch, which is then
        regenerated once.

        Args:
            company_id: Company of the issuing admin
            admin_id: Issuing admin
            data: Quantity, notes and optional validity window

        Returns:
            Batch id and the generated codes in issuance order

        Raises:
            ValidationException: If quantity is not positive or above the batch limit
            NotFoundException: If the company or program does not exist
            ConflictException: If code generation collided twice in a row
        """
        if data.quantity <= 0:
            raise ValidationException("Quantity must be greater than zero")
        if data.quantity > settings.max_codes_per_batch:
            raise ValidationException(
                f"Quantity must not exceed {settings.max_codes_per_batch} codes per batch"
            )

        result = await self.db.execute(
            select(companies.c.name).where(companies.c.id == company_id)
        )
        company_name = result.scalar_one_or_none()
        if company_name is None:
            raise NotFoundException("Company not found")

        program = await ProgramService.require_active(self.db, settings.program_code)

        return await retry_once_on_conflict(
            lambda: self._issue_batch_once(company_id, admin_id, company_name, program, data),
            "Could not generate unique enrollment codes, please retry",
            operation="issue_batch",
            company_id=company_id,
        )

    async def _issue_batch_once(
        self,
        company_id: int,
        admin_id: int,
        company_name: str,
        program: dict,
        data: CodeBatchCreate,
    ) -> CodeBatchCreateResponse:
        prefix = company_prefix(company_name)
        expires_at = (
            now_utc() + timedelta(days=data.expires_in_days) if data.expires_in_days else None
        )
        codes = [enrollment_code(prefix, program["code"]) for _ in range(data.quantity)]

        async with transaction(self.db):
            result = await self.db.execute(
                insert(code_batches)
                .values(
                    company_id=company_id,
                    program_id=program["id"],
                    quantity=data.quantity,
                    notes=data.notes,
                    created_by=admin_id,
                )
                .returning(code_batches.c.id)
            )
            batch_id = result.scalar_one()

            await self.db.execute(
                insert(enrollment_codes),
                [
                    {
                        "code": code,
                        "company_id": company_id,
                        "program_id": program["id"],
                        "batch_id": batch_id,
                        "created_by": admin_id,
                        "expires_at": expires_at,
                    }
                    for code in codes
                ],
            )

        logger.info(
            "code_batch_issued",
            batch_id=batch_id,
            company_id=company_id,
            admin_id=admin_id,
            quantity=data.quantity,
        )

        return CodeBatchCreateResponse(
            batch_id=batch_id,
            company_id=company_id,
            program_id=program["id"],
            quantity=data.quantity,
            codes=codes,
        )

    async def list_codes(
        self,
        company_id: int,
        batch_id: int | None = None,
        status: CodeStatus | None = None,
    ) -> list[EnrollmentCodeResponse]:
        """List a company's codes, newest first, optionally filtered."""
        conditions = [enrollment_codes.c.company_id == company_id]

        if batch_id is not None:
            conditions.append(enrollment_codes.c.batch_id == batch_id)
        if status is not None:
            conditions.append(enrollment_codes.c.status == status.value)

        query = (
            select(enrollment_codes)
            .where(and_(*conditions))
            .order_by(enrollment_codes.c.created_at.desc(), enrollment_codes.c.id.desc())
        )

        result = await self.db.execute(query)
        return [EnrollmentCodeResponse.model_validate(dict(row)) for row in result.mappings()]

    async def list_batches(self, company_id: int) -> list[CodeBatchSummary]:
        """List a company's batches with active/used/expired counts."""
        counts = (
            select(
                enrollment_codes.c.batch_id,
                *[
                    func.sum(case((enrollment_codes.c.status == s.value, 1), else_=0)).label(
                        f"{s.value}_count"
                    )
                    for s in CodeStatus
                ],
            )
            .group_by(enrollment_codes.c.batch_id)
            .subquery()
        )

        query = (
            select(
                code_batches,
                admins.c.name.label("created_by_name"),
                func.coalesce(counts.c.active_count, 0).label("active_count"),
                func.coalesce(counts.c.used_count, 0).label("used_count"),
                func.coalesce(counts.c.expired_count, 0).label("expired_count"),
            )
            .select_from(
                code_batches.outerjoin(admins, code_batches.c.created_by == admins.c.id).outerjoin(
                    counts, counts.c.batch_id == code_batches.c.id
                )
            )
            .where(code_batches.c.company_id == company_id)
            .order_by(code_batches.c.created_at.desc(), code_batches.c.id.desc())
        )

        result = await self.db.execute(query)
        return [CodeBatchSummary.model_validate(dict(row)) for row in result.mappings()]

    async def export_batch_csv(self, company_id: int, batch_id: int) -> str:
        """
        Render a batch as a one-column CSV with a ``code`` header.

        Raises:
            NotFoundException: If the batch does not belong to the company
        """
        result = await self.db.execute(
            select(code_batches.c.id).where(
                and_(code_batches.c.id == batch_id, code_batches.c.company_id == company_id)
            )
        )
        if result.first() is None:
            raise NotFoundException("Code batch not found")

        result = await self.db.execute(
            select(enrollment_codes.c.code)
            .where(enrollment_codes.c.batch_id == batch_id)
            .order_by(enrollment_codes.c.id)
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["code"])
        writer.writerows([code] for code in result.scalars())
        return buffer.getvalue()

    async def validate_code(self, code: str) -> CodeValidateResponse:
        """
        Check that a code can be redeemed, without consuming it.

        An active code found past its expiry is moved to ``expired``; that is
        the only write this method performs.

        Raises:
            InvalidOrExpiredCodeException: If the code is unknown, not active, or expired
        """
        result = await self.db.execute(
            select(
                enrollment_codes.c.id,
                enrollment_codes.c.status,
                enrollment_codes.c.expires_at,
                companies.c.id.label("company_id"),
                companies.c.name.label("company_name"),
                programs.c.id.label("program_id"),
                programs.c.name.label("program_name"),
                programs.c.description.label("program_description"),
            )
            .select_from(
                enrollment_codes.join(
                    companies, enrollment_codes.c.company_id == companies.c.id
                ).join(programs, enrollment_codes.c.program_id == programs.c.id)
            )
            .where(enrollment_codes.c.code == code)
        )
        row = result.mappings().first()

        if row is None or row["status"] != CodeStatus.ACTIVE.value:
            raise InvalidOrExpiredCodeException()

        if is_past(row["expires_at"]):
            await expire_code(self.db, row["id"])
            raise InvalidOrExpiredCodeException("Enrollment code has expired")

        return CodeValidateResponse(
            valid=True,
            company=CodeCompany(id=row["company_id"], name=row["company_name"]),
            program=CodeProgram(
                id=row["program_id"],
                name=row["program_name"],
                description=row["program_description"],
            ),
        )
