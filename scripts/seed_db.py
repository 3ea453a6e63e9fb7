"""Seed reference data, and optionally a demo company with codes.

Usage:
    python scripts/seed_db.py           # program row only
    python scripts/seed_db.py --demo    # plus a demo company, admin and 10 codes
"""

import argparse
import asyncio
import sys
import time

from app.config import settings
from app.database import AsyncSessionLocal, engine
from app.schemas.codes import CodeBatchCreate
from app.schemas.companies import AdminUserCreate, CompanyProvisionRequest
from app.services.code_service import CodeService
from app.services.company_service import CompanyService
from app.services.program_service import ProgramService

DEMO_CODE_COUNT = 10


async def seed(demo: bool) -> None:
    """Seed the program row and, with ``demo``, a provisioned company."""
    async with AsyncSessionLocal() as session:
        program = await ProgramService.ensure_program(session, settings.program_code)
        print(f"✓ Program {program['code']} ready (id={program['id']})")

        if demo:
            provisioned = await CompanyService(session).provision_company(
                CompanyProvisionRequest(
                    company_name="Demo Company",
                    industry="Technology",
                    size="51-200",
                    admin_user=AdminUserCreate(
                        name="Demo Admin",
                        email=f"demo-admin-{int(time.time())}@example.com",
                        title="HR Director",
                    ),
                )
            )
            batch = await CodeService(session).issue_batch(
                provisioned.company.id,
                provisioned.admin.id,
                CodeBatchCreate(quantity=DEMO_CODE_COUNT, notes="DEMO"),
            )

            print(f"✓ Company {provisioned.company.name} (id={provisioned.company.id})")
            print(f"  Admin email:    {provisioned.credentials.email}")
            print(f"  Temp password:  {provisioned.credentials.temp_password}")
            print(f"  Portal:         {provisioned.portal_url}")
            print(f"✓ Batch {batch.batch_id} with {batch.quantity} codes:")
            for code in batch.codes:
                print(f"  {code}")

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the onboarding database")
    parser.add_argument("--demo", action="store_true", help="also create a demo company")
    args = parser.parse_args()

    if settings.is_production:
        print("✗ Refusing to seed a production database", file=sys.stderr)
        sys.exit(1)

    asyncio.run(seed(args.demo))
