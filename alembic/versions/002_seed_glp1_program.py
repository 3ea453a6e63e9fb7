"""Seed the GLP1 program reference row.

Revision ID: 002
Revises: 001
Create Date: 2026-10-01 00:10:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

programs = sa.table(
    "programs",
    sa.column("code", sa.Text()),
    sa.column("name", sa.Text()),
    sa.column("description", sa.Text()),
)


def upgrade() -> None:
    """Insert the GLP1 program."""
    op.bulk_insert(
        programs,
        [
            {
                "code": "GLP1",
                "name": "GLP-1 Medication Program",
                "description": "Chronic care management program for GLP-1 medications",
            }
        ],
    )


def downgrade() -> None:
    """Remove the GLP1 program."""
    op.execute(programs.delete().where(programs.c.code == "GLP1"))
