"""create sessions, conversations, messages and user mapping tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Create chatbot tables."""
    op.create_table(
        "sessions",
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("session_id"),
    )
    op.create_index(
        op.f("ix_sessions_expires_at"), "sessions", ["expires_at"], unique=False
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("patient_id", sa.String(255), nullable=True),
        sa.Column(
            "status", sa.String(20), server_default="active", nullable=False
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        _timestamp("start_time"),
        _timestamp("last_activity"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_conversations_session_id"),
        "conversations",
        ["session_id"],
        unique=True,
    )
    op.create_index(
        op.f("ix_conversations_patient_id"),
        "conversations",
        ["patient_id"],
        unique=False,
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB(),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        _timestamp("timestamp"),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_messages_conversation_id"),
        "messages",
        ["conversation_id"],
        unique=False,
    )

    op.create_table(
        "user_patient_mapping",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("iam_user_id", sa.String(255), nullable=False),
        sa.Column("fhir_patient_id", sa.String(255), nullable=False),
        sa.Column(
            "is_primary", sa.Boolean(), server_default=sa.false(), nullable=False
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "iam_user_id", "fhir_patient_id", name="uq_user_patient_mapping_pair"
        ),
    )
    op.create_index(
        op.f("ix_user_patient_mapping_iam_user_id"),
        "user_patient_mapping",
        ["iam_user_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_user_patient_mapping_fhir_patient_id"),
        "user_patient_mapping",
        ["fhir_patient_id"],
        unique=False,
    )
    op.create_index(
        "uq_user_patient_mapping_primary",
        "user_patient_mapping",
        ["iam_user_id"],
        unique=True,
        postgresql_where=sa.text("is_primary"),
    )

    op.create_table(
        "user_practitioner_mapping",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("iam_user_id", sa.String(255), nullable=False),
        sa.Column("fhir_practitioner_id", sa.String(255), nullable=False),
        sa.Column("fhir_organization_id", sa.String(255), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_user_practitioner_mapping_iam_user_id"),
        "user_practitioner_mapping",
        ["iam_user_id"],
        unique=True,
    )


def downgrade() -> None:
    """Drop chatbot tables."""
    op.drop_index(
        op.f("ix_user_practitioner_mapping_iam_user_id"),
        table_name="user_practitioner_mapping",
    )
    op.drop_table("user_practitioner_mapping")
    op.drop_index("uq_user_patient_mapping_primary", table_name="user_patient_mapping")
    op.drop_index(
        op.f("ix_user_patient_mapping_fhir_patient_id"),
        table_name="user_patient_mapping",
    )
    op.drop_index(
        op.f("ix_user_patient_mapping_iam_user_id"),
        table_name="user_patient_mapping",
    )
    op.drop_table("user_patient_mapping")
    op.drop_index(op.f("ix_messages_conversation_id"), table_name="messages")
    op.drop_table("messages")
    op.drop_index(op.f("ix_conversations_patient_id"), table_name="conversations")
    op.drop_index(op.f("ix_conversations_session_id"), table_name="conversations")
    op.drop_table("conversations")
    op.drop_index(op.f("ix_sessions_expires_at"), table_name="sessions")
    op.drop_table("sessions")
