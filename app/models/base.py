"""Shared metadata for all tables."""

from sqlalchemy import JSON, MetaData
from sqlalchemy.dialects.postgresql import JSONB

# Deterministic constraint names so Alembic migrations can refer to them
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# JSONB on PostgreSQL, plain JSON elsewhere
JsonType = JSON().with_variant(JSONB(), "postgresql")
