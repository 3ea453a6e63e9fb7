"""Run Alembic migrations for the onboarding database.

Usage:
    python scripts/migrate.py                   # upgrade to head
    python scripts/migrate.py create <message>  # autogenerate a revision
    python scripts/migrate.py downgrade <rev>   # step back, e.g. -1 or 001
"""

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def alembic_config() -> Config:
    """Alembic config that works regardless of the current directory."""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    return cfg


def run_migrations() -> None:
    """Run database migrations to latest version."""
    try:
        print("Running database migrations...")
        command.upgrade(alembic_config(), "head")
        print("✓ Migrations completed successfully!")
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        sys.exit(1)


def create_migration(message: str) -> None:
    """Create a new migration."""
    try:
        print(f"Creating migration: {message}")
        command.revision(alembic_config(), message=message, autogenerate=True)
        print("✓ Migration created successfully!")
    except Exception as e:
        print(f"✗ Migration creation failed: {e}", file=sys.stderr)
        sys.exit(1)


def downgrade(revision: str) -> None:
    """Downgrade to the given revision."""
    try:
        print(f"Downgrading to {revision}...")
        command.downgrade(alembic_config(), revision)
        print("✓ Downgrade completed successfully!")
    except Exception as e:
        print(f"✗ Downgrade failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    args = sys.argv[1:]
    if not args:
        run_migrations()
    elif args[0] == "create" and len(args) > 1:
        create_migration(" ".join(args[1:]))
    elif args[0] == "downgrade" and len(args) == 2:
        downgrade(args[1])
    else:
        print(__doc__)
        sys.exit(2)
