"""Code batch and enrollment code tables using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Table,
    Text,
    func,
    text,
)

from app.models.base import metadata

code_batches = Table(
    "code_batches",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "company_id",
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("program_id", Integer, ForeignKey("programs.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("notes", Text, nullable=True),
    # Null for seeded batches
    Column("created_by", Integer, ForeignKey("company_admins.id"), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("quantity > 0", name="quantity_positive"),
)

enrollment_codes = Table(
    "enrollment_codes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", Text, nullable=False, unique=True),
    Column(
        "company_id",
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("program_id", Integer, ForeignKey("programs.id"), nullable=False),
    Column(
        "batch_id",
        Integer,
        ForeignKey("code_batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    ),
    Column("created_by", Integer, ForeignKey("company_admins.id"), nullable=True),
    # active -> used | expired, never back
    Column("status", Text, nullable=False, server_default=text("'active'")),
    Column("used_at", DateTime(timezone=True), nullable=True),
    # Not a foreign key: enrolled_users already references this table
    Column("used_by_user_id", Integer, nullable=True),
    Column("expires_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("status IN ('active', 'used', 'expired')", name="status"),
)
