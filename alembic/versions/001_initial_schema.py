"""Initial schema - companies, admins, programs, codes, enrollment and partner tables.

Revision ID: 001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        postgresql.TIMESTAMP(timezone=True),
        server_default=sa.text("NOW()"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    # Tenants
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("industry", sa.Text(), nullable=True),
        sa.Column("size", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_companies"),
    )

    op.create_table(
        "company_admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("last_login", postgresql.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_company_admins_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_company_admins"),
        sa.UniqueConstraint("email", name="uq_company_admins_email"),
    )
    op.create_index("ix_company_admins_company_id", "company_admins", ["company_id"])

    # Program reference data
    op.create_table(
        "programs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_programs"),
        sa.UniqueConstraint("code", name="uq_programs_code"),
    )

    # Enrollment codes
    op.create_table(
        "code_batches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        _created_at(),
        sa.CheckConstraint("quantity > 0", name="ck_code_batches_quantity_positive"),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_code_batches_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["program_id"], ["programs.id"], name="fk_code_batches_program_id_programs"
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["company_admins.id"],
            name="fk_code_batches_created_by_company_admins",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_code_batches"),
    )
    op.create_index("ix_code_batches_company_id", "code_batches", ["company_id"])

    op.create_table(
        "enrollment_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.Integer(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        sa.Column("used_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("used_by_user_id", sa.Integer(), nullable=True),
        sa.Column("expires_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "status IN ('active', 'used', 'expired')",
            name="ck_enrollment_codes_status",
        ),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_enrollment_codes_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["program_id"], ["programs.id"], name="fk_enrollment_codes_program_id_programs"
        ),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["code_batches.id"],
            name="fk_enrollment_codes_batch_id_code_batches",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"],
            ["company_admins.id"],
            name="fk_enrollment_codes_created_by_company_admins",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_enrollment_codes"),
        sa.UniqueConstraint("code", name="uq_enrollment_codes_code"),
    )
    op.create_index("ix_enrollment_codes_company_id", "enrollment_codes", ["company_id"])
    op.create_index("ix_enrollment_codes_batch_id", "enrollment_codes", ["batch_id"])

    # Enrolled employees
    op.create_table(
        "enrolled_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("program_id", sa.Integer(), nullable=False),
        sa.Column("enrollment_code_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.VARCHAR(length=20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("emed_identifier", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        _created_at("enrollment_date"),
        sa.CheckConstraint(
            "status IN ('active', 'inactive')", name="ck_enrolled_users_status"
        ),
        sa.ForeignKeyConstraint(
            ["company_id"],
            ["companies.id"],
            name="fk_enrolled_users_company_id_companies",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["program_id"], ["programs.id"], name="fk_enrolled_users_program_id_programs"
        ),
        sa.ForeignKeyConstraint(
            ["enrollment_code_id"],
            ["enrollment_codes.id"],
            name="fk_enrolled_users_enrollment_code_id_enrollment_codes",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_enrolled_users"),
        sa.UniqueConstraint("enrollment_code_id", name="uq_enrolled_users_enrollment_code_id"),
        sa.UniqueConstraint("emed_identifier", name="uq_enrolled_users_emed_identifier"),
    )
    op.create_index("ix_enrolled_users_company_id", "enrolled_users", ["company_id"])
    op.create_index("ix_enrolled_users_email", "enrolled_users", ["email"])

    # Lab partner
    op.create_table(
        "lab_kits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("kit_identifier", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="ordered", nullable=False),
        _created_at("ordered_at"),
        sa.Column("shipped_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("delivered_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("processed_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('ordered', 'shipped', 'delivered', 'processed')",
            name="ck_lab_kits_status",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["enrolled_users.id"],
            name="fk_lab_kits_user_id_enrolled_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_lab_kits"),
        sa.UniqueConstraint("kit_identifier", name="uq_lab_kits_kit_identifier"),
    )
    op.create_index("ix_lab_kits_user_id", "lab_kits", ["user_id"])

    op.create_table(
        "lab_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("kit_id", sa.Integer(), nullable=False),
        sa.Column("result_data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        _created_at("received_at"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["enrolled_users.id"],
            name="fk_lab_results_user_id_enrolled_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["kit_id"],
            ["lab_kits.id"],
            name="fk_lab_results_kit_id_lab_kits",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_lab_results"),
    )
    op.create_index("ix_lab_results_user_id", "lab_results", ["user_id"])
    op.create_index("ix_lab_results_kit_id", "lab_results", ["kit_id"])

    # Telehealth and pharmacy partners
    op.create_table(
        "telehealth_reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("decision", sa.Text(), nullable=False),
        sa.Column("reviewer_name", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at("reviewed_at"),
        sa.CheckConstraint(
            "decision IN ('approved', 'denied', 'needs_more_info')",
            name="ck_telehealth_reviews_decision",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["enrolled_users.id"],
            name="fk_telehealth_reviews_user_id_enrolled_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_telehealth_reviews"),
    )
    op.create_index("ix_telehealth_reviews_user_id", "telehealth_reviews", ["user_id"])

    op.create_table(
        "prescriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("review_id", sa.Integer(), nullable=True),
        sa.Column("rx_identifier", sa.Text(), nullable=False),
        sa.Column("medication", sa.Text(), nullable=False),
        sa.Column("dosage", sa.Text(), nullable=False),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        _created_at(),
        _created_at("updated_at"),
        sa.CheckConstraint(
            "status IN ('pending', 'filled', 'shipped', 'delivered', 'cancelled')",
            name="ck_prescriptions_status",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["enrolled_users.id"],
            name="fk_prescriptions_user_id_enrolled_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["review_id"],
            ["telehealth_reviews.id"],
            name="fk_prescriptions_review_id_telehealth_reviews",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_prescriptions"),
        sa.UniqueConstraint("rx_identifier", name="uq_prescriptions_rx_identifier"),
    )
    op.create_index("ix_prescriptions_user_id", "prescriptions", ["user_id"])

    op.create_table(
        "shipments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("prescription_id", sa.Integer(), nullable=False),
        sa.Column("tracking_number", sa.Text(), nullable=False),
        sa.Column("carrier", sa.Text(), nullable=True),
        _created_at("shipped_at"),
        sa.ForeignKeyConstraint(
            ["prescription_id"],
            ["prescriptions.id"],
            name="fk_shipments_prescription_id_prescriptions",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_shipments"),
    )
    op.create_index("ix_shipments_prescription_id", "shipments", ["prescription_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    # Drop in reverse dependency order; indexes go with their tables
    op.drop_table("shipments")
    op.drop_table("prescriptions")
    op.drop_table("telehealth_reviews")
    op.drop_table("lab_results")
    op.drop_table("lab_kits")
    op.drop_table("enrolled_users")
    op.drop_table("enrollment_codes")
    op.drop_table("code_batches")
    op.drop_table("programs")
    op.drop_table("company_admins")
    op.drop_table("companies")
