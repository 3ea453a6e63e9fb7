"""Company provisioning service."""

import structlog
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ConflictException
from app.core.identifiers import portal_slug, suffixed_email, temporary_password
from app.core.security import get_password_hash
from app.database import retry_once_on_conflict, transaction
from app.models.admins import admins
from app.models.companies import companies
from app.schemas.companies import (
    CompanyProvisionRequest,
    CompanyProvisionResponse,
    ProvisionedAdmin,
    ProvisionedCompany,
    TemporaryCredentials,
)
from app.services.program_service import ProgramService

logger = structlog.get_logger(__name__)


class CompanyService:
    """Service for provisioning company portals."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def provision_company(self, data: CompanyProvisionRequest) -> CompanyProvisionResponse:
        """
        Create a company and its first admin in one transaction.

        A temporary password is generated and only its hash is stored. When the
        admin email is already registered, ``settings.on_duplicate_email``
        decides whether to reject or to rewrite the address with a suffix.

        Args:
            data: Provisioning request

        Returns:
            Company, admin, one-time credentials and portal URL

        Raises:
            NotFoundException: If the program reference row is missing
            ConflictException: If the admin email is taken and duplicates are rejected
        """
        await ProgramService.require_active(self.db, settings.program_code)

        # The retry re-reads admin emails, so a concurrent duplicate is caught by policy
        return await retry_once_on_conflict(
            lambda: self._provision_once(data),
            "An admin with this email already exists",
            operation="provision_company",
        )

    async def _provision_once(self, data: CompanyProvisionRequest) -> CompanyProvisionResponse:
        temp_password = temporary_password(settings.temp_password_length)
        requested_email = str(data.admin_user.email)

        async with transaction(self.db):
            email = await self._resolve_admin_email(requested_email)

            result = await self.db.execute(
                insert(companies)
                .values(
                    name=data.company_name,
                    address=data.address,
                    industry=data.industry,
                    size=data.size,
                )
                .returning(companies)
            )
            company = dict(result.mappings().one())

            result = await self.db.execute(
                insert(admins)
                .values(
                    company_id=company["id"],
                    name=data.admin_user.name,
                    email=email,
                    title=data.admin_user.title,
                    password_hash=get_password_hash(temp_password),
                )
                .returning(admins.c.id, admins.c.name, admins.c.email, admins.c.title)
            )
            admin = dict(result.mappings().one())

        logger.info(
            "company_provisioned",
            company_id=company["id"],
            admin_id=admin["id"],
            email_rewritten=email != requested_email,
        )

        slug = portal_slug(company["name"]) or str(company["id"])
        return CompanyProvisionResponse(
            company=ProvisionedCompany(id=company["id"], name=company["name"]),
            admin=ProvisionedAdmin(**admin),
            credentials=TemporaryCredentials(email=admin["email"], temp_password=temp_password),
            portal_url=f"{settings.portal_base_url.rstrip('/')}/{slug}",
        )

    async def _resolve_admin_email(self, email: str) -> str:
        """Return the email to store, applying the duplicate-email policy."""
        result = await self.db.execute(select(admins.c.id).where(admins.c.email == email))
        if result.first() is None:
            return email

        if settings.on_duplicate_email == "suffix":
            return suffixed_email(email)

        raise ConflictException("An admin with this email already exists")
