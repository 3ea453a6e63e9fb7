"""Telehealth review, prescription and shipment tables using SQLAlchemy Core."""

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

telehealth_reviews = Table(
    "telehealth_reviews",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("enrolled_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("decision", Text, nullable=False),
    Column("reviewer_name", Text, nullable=True),
    Column("notes", Text, nullable=True),
    Column("reviewed_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "decision IN ('approved', 'denied', 'needs_more_info')",
        name="decision",
    ),
)

prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("enrolled_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("review_id", Integer, ForeignKey("telehealth_reviews.id"), nullable=True),
    Column("rx_identifier", Text, nullable=False, unique=True),
    Column("medication", Text, nullable=False),
    Column("dosage", Text, nullable=False),
    Column("instructions", Text, nullable=True),
    Column("status", Text, nullable=False, server_default=text("'pending'")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('pending', 'filled', 'shipped', 'delivered', 'cancelled')",
        name="status",
    ),
)

shipments = Table(
    "shipments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "prescription_id",
        Integer,
        ForeignKey("prescriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("tracking_number", Text, nullable=False),
    Column("carrier", Text, nullable=True),
    Column("shipped_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
