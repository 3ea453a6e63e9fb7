"""Company model definition using SQLAlchemy Core."""

from sqlalchemy import Column, DateTime, Integer, Table, Text, func

from app.models.base import metadata

companies = Table(
    "companies",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("address", Text, nullable=True),
    Column("industry", Text, nullable=True),
    # Head-count bucket, e.g. "51-200"
    Column("size", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
