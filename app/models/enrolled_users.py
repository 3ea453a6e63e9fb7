"""Enrolled employee table using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
    text,
)

from app.models.base import metadata

enrolled_users = Table(
    "enrolled_users",
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
    # One enrolled user per redeemed code
    Column(
        "enrollment_code_id",
        Integer,
        ForeignKey("enrollment_codes.id"),
        nullable=False,
        unique=True,
    ),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, index=True),
    Column("phone", String(20), nullable=True),
    Column("date_of_birth", Date, nullable=True),
    Column("address", Text, nullable=True),
    Column("emed_identifier", Text, nullable=False, unique=True),
    Column("status", Text, nullable=False, server_default=text("'active'")),
    Column("enrollment_date", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("status IN ('active', 'inactive')", name="status"),
)
