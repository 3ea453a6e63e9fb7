"""Script to initialize the database without Alembic (local development)."""

import asyncio

from app.config import settings
from app.database import AsyncSessionLocal, engine
from app.models import metadata
from app.services.program_service import ProgramService


async def init_db() -> None:
    """Create all tables and the program reference row."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    async with AsyncSessionLocal() as session:
        program = await ProgramService.ensure_program(session, settings.program_code)

    await engine.dispose()
    print(f"✓ Database initialized successfully! (program {program['code']} #{program['id']})")


if __name__ == "__main__":
    asyncio.run(init_db())
