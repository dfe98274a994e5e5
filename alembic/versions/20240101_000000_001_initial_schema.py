"""Initial schema with all core tables.

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _soft_delete() -> list[sa.Column]:
    return [
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", postgresql.UUID(as_uuid=False), nullable=True),
    ]


def upgrade() -> None:
    """Create initial database schema."""

    # Users table
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="patient"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refresh_token_ids", postgresql.JSON(), nullable=False, server_default="[]"),
        sa.Column("specialization", sa.String(150), nullable=True),
        sa.Column("license_number", sa.String(50), nullable=True),
        sa.Column("years_of_experience", sa.Integer(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("consultation_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        *_soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_created_at", "users", ["created_at"])
    op.create_index("ix_users_is_deleted", "users", ["is_deleted"])

    # Triages table
    op.create_table(
        "triages",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("patient_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("symptoms", postgresql.JSON(), nullable=False),
        sa.Column("vital_signs", postgresql.JSON(), nullable=True),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("risk_level", sa.String(20), nullable=False),
        sa.Column("urgency", sa.String(20), nullable=False),
        sa.Column("recommendations", postgresql.JSON(), nullable=False),
        sa.Column("possible_conditions", postgresql.JSON(), nullable=False),
        sa.Column("immediate_actions", postgresql.JSON(), nullable=False),
        sa.Column("ruleset_version", sa.String(50), nullable=True),
        sa.Column("ruleset_hash", sa.String(64), nullable=True),
        sa.Column("rules_fired", postgresql.JSON(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("doctor_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_triages"),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["users.id"],
            name="fk_triages_patient_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["reviewed_by"],
            ["users.id"],
            name="fk_triages_reviewed_by_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_triages_patient_id", "triages", ["patient_id"])
    op.create_index("ix_triages_risk_level", "triages", ["risk_level"])
    op.create_index("ix_triages_urgency", "triages", ["urgency"])
    op.create_index("ix_triages_status", "triages", ["status"])
    op.create_index("ix_triages_created_at", "triages", ["created_at"])

    # Chats table
    op.create_table(
        "chats",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("participant_a_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("participant_b_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("last_message_content", sa.Text(), nullable=True),
        sa.Column("last_message_sender_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("last_message_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_chats"),
        sa.UniqueConstraint(
            "participant_a_id", "participant_b_id", name="uq_chats_participants"
        ),
        sa.ForeignKeyConstraint(
            ["participant_a_id"],
            ["users.id"],
            name="fk_chats_participant_a_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["participant_b_id"],
            ["users.id"],
            name="fk_chats_participant_b_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_chats_participant_a_id", "chats", ["participant_a_id"])
    op.create_index("ix_chats_participant_b_id", "chats", ["participant_b_id"])
    op.create_index("ix_chats_last_message_at", "chats", ["last_message_at"])
    op.create_index("ix_chats_created_at", "chats", ["created_at"])

    # Chat messages table
    op.create_table(
        "chat_messages",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("chat_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("sender_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("message_type", sa.String(20), nullable=False, server_default="text"),
        sa.Column("file_url", sa.String(500), nullable=True),
        sa.Column("read_by", postgresql.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_chat_messages"),
        sa.ForeignKeyConstraint(
            ["chat_id"],
            ["chats.id"],
            name="fk_chat_messages_chat_id_chats",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["sender_id"],
            ["users.id"],
            name="fk_chat_messages_sender_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_chat_messages_chat_id", "chat_messages", ["chat_id"])
    op.create_index("ix_chat_messages_created_at", "chat_messages", ["created_at"])

    # Appointments table
    op.create_table(
        "appointments",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("patient_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.String(5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="30"),
        sa.Column(
            "appointment_type", sa.String(30), nullable=False, server_default="consultation"
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("symptoms", postgresql.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("prescription", postgresql.JSON(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_appointments"),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["users.id"],
            name="fk_appointments_patient_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["users.id"],
            name="fk_appointments_doctor_id_users",
            ondelete="RESTRICT",
        ),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_created_at", "appointments", ["created_at"])

    # Medical records table
    op.create_table(
        "medical_records",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("patient_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("doctor_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("related_appointment_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("record_type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("record_date", sa.Date(), nullable=False),
        sa.Column("details", postgresql.JSON(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tags", postgresql.JSON(), nullable=False),
        *_timestamps(),
        *_soft_delete(),
        sa.PrimaryKeyConstraint("id", name="pk_medical_records"),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["users.id"],
            name="fk_medical_records_patient_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["users.id"],
            name="fk_medical_records_doctor_id_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["related_appointment_id"],
            ["appointments.id"],
            name="fk_medical_records_related_appointment_id_appointments",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_medical_records_patient_id", "medical_records", ["patient_id"])
    op.create_index("ix_medical_records_doctor_id", "medical_records", ["doctor_id"])
    op.create_index("ix_medical_records_record_type", "medical_records", ["record_type"])
    op.create_index("ix_medical_records_created_at", "medical_records", ["created_at"])
    op.create_index("ix_medical_records_is_deleted", "medical_records", ["is_deleted"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("medical_records")
    op.drop_table("appointments")
    op.drop_table("chat_messages")
    op.drop_table("chats")
    op.drop_table("triages")
    op.drop_table("users")
