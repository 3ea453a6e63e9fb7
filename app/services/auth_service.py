"""Authentication service for company admins."""

from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import UnauthorizedException
from app.core.security import create_access_token, verify_password
from app.database import transaction
from app.models.admins import admins
from app.models.companies import companies
from app.schemas.auth import AdminSummary, CompanySummary, LoginResponse

logger = structlog.get_logger(__name__)


class AuthService:
    """Authentication service for admin login and principal checks."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Authenticate an active admin and issue an access token.

        Args:
            email: Admin email
            password: Plain password, only passed to the hash verifier

        Returns:
            Access token with admin and company summaries

        Raises:
            UnauthorizedException: If the email is unknown, inactive, or the password is wrong
        """
        result = await self.db.execute(
            select(admins).where(and_(admins.c.email == email, admins.c.active.is_(True)))
        )
        admin = result.mappings().first()

        if admin is None or not verify_password(password, admin["password_hash"]):
            logger.info("admin_login_rejected")
            raise UnauthorizedException("Invalid credentials")

        result = await self.db.execute(
            select(companies).where(companies.c.id == admin["company_id"])
        )
        company = result.mappings().one()

        async with transaction(self.db):
            await self.db.execute(
                update(admins)
                .where(admins.c.id == admin["id"])
                .values(last_login=datetime.now(UTC))
            )

        token = create_access_token(
            data={
                "sub": str(admin["id"]),
                "admin_id": admin["id"],
                "company_id": admin["company_id"],
                "email": admin["email"],
                "name": admin["name"],
            },
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )

        logger.info("admin_logged_in", admin_id=admin["id"], company_id=admin["company_id"])

        return LoginResponse(
            token=token,
            admin=AdminSummary(
                id=admin["id"], name=admin["name"], email=admin["email"], title=admin["title"]
            ),
            company=CompanySummary(
                id=company["id"],
                name=company["name"],
                industry=company["industry"],
                size=company["size"],
            ),
        )

    @staticmethod
    async def get_active_admin(db: AsyncSession, admin_id: int, company_id: int) -> dict | None:
        """Get an admin only if active and belonging to the given company."""
        result = await db.execute(
            select(admins.c.id, admins.c.company_id, admins.c.name, admins.c.email).where(
                and_(
                    admins.c.id == admin_id,
                    admins.c.company_id == company_id,
                    admins.c.active.is_(True),
                )
            )
        )
        row = result.mappings().first()
        return dict(row) if row else None
