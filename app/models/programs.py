"""Program reference table using SQLAlchemy Core."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Table, Text, func, true

from app.models.base import metadata

programs = Table(
    "programs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", Text, nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=True),
    Column("active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
