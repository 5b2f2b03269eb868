"""Initial schema for CareLink.

Revision ID: 5e2b7c41d0a9
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5e2b7c41d0a9"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "emergencies",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("emergency_type", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "requires_ambulance",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            server_default=sa.text("'pending'"),
            nullable=False,
        ),
        sa.Column("reporter_name", sa.String(length=255), nullable=True),
        sa.Column("contact_number", sa.String(length=50), nullable=True),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("patient_unique_id", sa.String(length=20), nullable=True),
        sa.Column("location", sa.String(length=500), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="ck_emergencies_status",
        ),
        if_not_exists=True,
    )

    op.create_table(
        "patients",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("patient_unique_id", sa.String(length=20), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("blood_type", sa.String(length=5), nullable=True),
        sa.Column("allergies", sa.JSON(), nullable=False),
        sa.Column("medical_history", sa.JSON(), nullable=False),
        sa.Column("health_metrics", sa.JSON(), nullable=False),
        sa.Column("last_checkup", sa.String(length=30), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("patient_unique_id", name="uq_patients_patient_unique_id"),
        if_not_exists=True,
    )

    # Indexes - emergencies
    op.create_index(
        "ix_emergencies_emergency_type",
        "emergencies",
        ["emergency_type"],
        if_not_exists=True,
    )
    op.create_index("ix_emergencies_status", "emergencies", ["status"], if_not_exists=True)
    op.create_index("ix_emergencies_user_id", "emergencies", ["user_id"], if_not_exists=True)
    op.create_index(
        "ix_emergencies_patient_unique_id",
        "emergencies",
        ["patient_unique_id"],
        if_not_exists=True,
    )
    op.create_index(
        "idx_emergencies_created",
        "emergencies",
        [sa.text("created_at DESC")],
        if_not_exists=True,
    )

    # Indexes - patients
    op.create_index("ix_patients_name", "patients", ["name"], if_not_exists=True)
    op.create_index("ix_patients_email", "patients", ["email"], if_not_exists=True)
    op.create_index("ix_patients_phone", "patients", ["phone"], if_not_exists=True)


def downgrade() -> None:
    op.drop_index("ix_patients_phone", table_name="patients", if_exists=True)
    op.drop_index("ix_patients_email", table_name="patients", if_exists=True)
    op.drop_index("ix_patients_name", table_name="patients", if_exists=True)

    op.drop_index("idx_emergencies_created", table_name="emergencies", if_exists=True)
    op.drop_index("ix_emergencies_patient_unique_id", table_name="emergencies", if_exists=True)
    op.drop_index("ix_emergencies_user_id", table_name="emergencies", if_exists=True)
    op.drop_index("ix_emergencies_status", table_name="emergencies", if_exists=True)
    op.drop_index("ix_emergencies_emergency_type", table_name="emergencies", if_exists=True)

    op.drop_table("patients", if_exists=True)
    op.drop_table("emergencies", if_exists=True)
