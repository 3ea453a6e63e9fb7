"""Program reference data access."""

import structlog
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.models.programs import programs

logger = structlog.get_logger(__name__)

DEFAULT_PROGRAMS = {
    "GLP1": {
        "name": "GLP-1 Medication Program",
        "description": "Chronic care management program for GLP-1 medications",
    },
}


class ProgramService:
    """Lookups for the Program reference row."""

    @staticmethod
    async def get_by_code(db: AsyncSession, code: str) -> dict | None:
        """Get a program by its unique code."""
        result = await db.execute(select(programs).where(programs.c.code == code))
        row = result.mappings().first()
        return dict(row) if row else None

    @staticmethod
    async def require_active(db: AsyncSession, code: str) -> dict:
        """
        Get an active program or fail.

        Raises:
            NotFoundException: If the program has not been seeded or is inactive
        """
        program = await ProgramService.get_by_code(db, code)
        if program is None or not program["active"]:
            raise NotFoundException(f"Program {code} not found")
        return program

    @staticmethod
    async def ensure_program(db: AsyncSession, code: str) -> dict:
        """
        Create the program row if missing. Idempotent by unique code.

        Only called from seeding and migrations, never from request handlers.
        Commits when a row is inserted.
        """
        existing = await ProgramService.get_by_code(db, code)
        if existing is not None:
            return existing

        defaults = DEFAULT_PROGRAMS.get(code, {"name": code, "description": None})
        result = await db.execute(
            insert(programs)
            .values(code=code, name=defaults["name"], description=defaults["description"])
            .returning(programs)
        )
        row = dict(result.mappings().one())
        await db.commit()

        logger.info("program_seeded", program_id=row["id"], code=code)
        return row
