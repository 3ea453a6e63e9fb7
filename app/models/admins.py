"""Company admin model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Table,
    Text,
    func,
    true,
)

from app.models.base import metadata

admins = Table(
    "company_admins",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "company_id",
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("title", Text, nullable=True),
    Column("password_hash", Text, nullable=False),
    # Account state
    Column("active", Boolean, nullable=False, server_default=true()),
    Column("last_login", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
