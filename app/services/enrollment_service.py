"""Employee enrollment: redeeming a one-time code."""

from typing import Any

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidOrExpiredCodeException
from app.core.identifiers import emed_identifier, kit_identifier
from app.core.time_utils import is_past, now_utc
from app.database import retry_once_on_conflict, transaction
from app.models.enrolled_users import enrolled_users
from app.models.enrollment_codes import enrollment_codes
from app.models.lab_kits import lab_kits
from app.schemas.codes import CodeStatus
from app.schemas.enrollment import EnrollmentRequest, EnrollmentResponse
from app.schemas.webhooks import LabKitStatus

logger = structlog.get_logger(__name__)


class EnrollmentService:
    """Service for redeeming enrollment codes."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def redeem(self, data: EnrollmentRequest) -> EnrollmentResponse:
        """
        Turn an active code into an enrolled user with a lab kit on order.

        The code is claimed with a conditional update (``status = 'active'``)
        inside the same transaction that creates the user and the kit, so two
        concurrent redemptions of one code cannot both succeed. Any failure
        rolls everything back and leaves the code active.

        An active code found past its expiry is moved to ``expired``; that
        transition is committed even though the enrollment is rejected.

        Args:
            data: Code and employee details

        Returns:
            New user id, name, email, enrollment date and eMed identifier

        Raises:
            InvalidOrExpiredCodeException: If the code is unknown, consumed, or expired
            ConflictException: If identifier generation collided twice in a row
        """
        return await retry_once_on_conflict(
            lambda: self._redeem_once(data),
            "Could not allocate a unique identifier, please retry",
            operation="redeem_code",
        )

    async def _redeem_once(self, data: EnrollmentRequest) -> EnrollmentResponse:
        expired_code_id = None

        async with transaction(self.db):
            code = await self._lock_code(data.code)

            if code is None or code["status"] != CodeStatus.ACTIVE.value:
                raise InvalidOrExpiredCodeException()

            if is_past(code["expires_at"]):
                await self.db.execute(
                    update(enrollment_codes)
                    .where(enrollment_codes.c.id == code["id"])
                    .values(status=CodeStatus.EXPIRED.value)
                )
                expired_code_id = code["id"]
            else:
                user = await self._enroll(code, data)

        if expired_code_id is not None:
            logger.info("enrollment_code_expired", code_id=expired_code_id)
            raise InvalidOrExpiredCodeException("Enrollment code has expired")

        logger.info(
            "enrollment_code_redeemed",
            code_id=code["id"],
            user_id=user["id"],
            company_id=code["company_id"],
        )

        return EnrollmentResponse(
            user_id=user["id"],
            name=user["name"],
            email=user["email"],
            enrollment_date=user["enrollment_date"],
            emed_identifier=user["emed_identifier"],
        )

    async def _lock_code(self, code: str) -> dict[str, Any] | None:
        """Fetch the code row, locking it where the database supports row locks."""
        result = await self.db.execute(
            select(enrollment_codes).where(enrollment_codes.c.code == code).with_for_update()
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def _enroll(self, code: dict[str, Any], data: EnrollmentRequest) -> dict[str, Any]:
        """Claim the code, then create the user and the lab kit. Caller owns the transaction."""
        now = now_utc()

        claimed = await self.db.execute(
            update(enrollment_codes)
            .where(
                and_(
                    enrollment_codes.c.id == code["id"],
                    enrollment_codes.c.status == CodeStatus.ACTIVE.value,
                )
            )
            .values(status=CodeStatus.USED.value, used_at=now)
        )
        if claimed.rowcount != 1:  # type: ignore[attr-defined]
            raise InvalidOrExpiredCodeException()

        result = await self.db.execute(
            insert(enrolled_users)
            .values(
                company_id=code["company_id"],
                program_id=code["program_id"],
                enrollment_code_id=code["id"],
                name=data.name,
                email=str(data.email),
                phone=data.phone,
                date_of_birth=data.date_of_birth,
                address=data.address,
                emed_identifier=emed_identifier(code["company_id"]),
                enrollment_date=now,
            )
            .returning(enrolled_users)
        )
        user = dict(result.mappings().one())

        await self.db.execute(
            update(enrollment_codes)
            .where(enrollment_codes.c.id == code["id"])
            .values(used_by_user_id=user["id"])
        )

        await self.db.execute(
            insert(lab_kits).values(
                user_id=user["id"],
                kit_identifier=kit_identifier(),
                status=LabKitStatus.ORDERED.value,
                ordered_at=now,
            )
        )

        return user
