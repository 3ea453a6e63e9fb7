"""Lab kit and lab result tables using SQLAlchemy Core."""

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

from app.models.base import JsonType, metadata

lab_kits = Table(
    "lab_kits",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("enrolled_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("kit_identifier", Text, nullable=False, unique=True),
    Column("status", Text, nullable=False, server_default=text("'ordered'")),
    # One timestamp per transition
    Column("ordered_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("shipped_at", DateTime(timezone=True), nullable=True),
    Column("delivered_at", DateTime(timezone=True), nullable=True),
    Column("processed_at", DateTime(timezone=True), nullable=True),
    CheckConstraint("status IN ('ordered', 'shipped', 'delivered', 'processed')", name="status"),
)

lab_results = Table(
    "lab_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Integer,
        ForeignKey("enrolled_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "kit_id",
        Integer,
        ForeignKey("lab_kits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Partner payload, stored as received
    Column("result_data", JsonType, nullable=False),
    Column("received_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
