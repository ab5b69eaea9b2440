"""Initial schema for Crisis Connect.

Revision ID: 7e2a91c4d0b3
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7e2a91c4d0b3"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("email"),
        if_not_exists=True,
    )

    op.create_table(
        "incidents",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("severity", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("coordinates", sa.JSON(), nullable=True),
        sa.Column("status", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("reported_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("verified_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        if_not_exists=True,
    )

    op.create_table(
        "help_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("civilian_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("coordinates", sa.JSON(), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("priority", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("claimed_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("verified_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("notes", sa.JSON(), nullable=False),
        *_timestamps(),
        if_not_exists=True,
    )

    op.create_table(
        "volunteer_profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("id_proof", sa.String(length=512), nullable=True),
        sa.Column("experience_certificate", sa.String(length=512), nullable=True),
        sa.Column("application_status", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("task_status", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("availability", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id"),
        if_not_exists=True,
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("task_type", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("incident_id", sa.String(length=36), sa.ForeignKey("incidents.id"), nullable=True),
        sa.Column(
            "volunteer_id",
            sa.String(length=36),
            sa.ForeignKey("volunteer_profiles.id"),
            nullable=False,
        ),
        sa.Column("status", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("assigned_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("extra_details", sa.JSON(), nullable=False),
        sa.Column("notes", sa.JSON(), nullable=False),
        *_timestamps(),
        if_not_exists=True,
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("target_audience", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        if_not_exists=True,
    )

    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("current_occupancy", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("contact_phone", sa.String(length=32), nullable=True),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        if_not_exists=True,
    )

    # Indexes
    op.create_index("ix_users_role", "users", ["role"], if_not_exists=True)
    op.create_index("ix_incidents_status", "incidents", ["status"], if_not_exists=True)
    op.create_index("ix_incidents_created_at", "incidents", ["created_at"], if_not_exists=True)
    op.create_index(
        "ix_incidents_reported_by_id", "incidents", ["reported_by_id"], if_not_exists=True
    )
    op.create_index(
        "ix_help_requests_status_claimed_by",
        "help_requests",
        ["status", "claimed_by_id"],
        if_not_exists=True,
    )
    op.create_index(
        "ix_help_requests_created_at", "help_requests", ["created_at"], if_not_exists=True
    )
    op.create_index(
        "ix_help_requests_civilian_id", "help_requests", ["civilian_id"], if_not_exists=True
    )
    op.create_index(
        "ix_volunteer_profiles_status",
        "volunteer_profiles",
        ["application_status", "task_status"],
        if_not_exists=True,
    )
    op.create_index(
        "ix_tasks_volunteer_status", "tasks", ["volunteer_id", "status"], if_not_exists=True
    )
    op.create_index("ix_tasks_status", "tasks", ["status"], if_not_exists=True)
    op.create_index("ix_tasks_incident_id", "tasks", ["incident_id"], if_not_exists=True)
    op.create_index("ix_alerts_is_active", "alerts", ["is_active"], if_not_exists=True)
    op.create_index("ix_resources_is_active", "resources", ["is_active"], if_not_exists=True)


def downgrade() -> None:
    op.drop_index("ix_resources_is_active", table_name="resources", if_exists=True)
    op.drop_index("ix_alerts_is_active", table_name="alerts", if_exists=True)
    op.drop_index("ix_tasks_incident_id", table_name="tasks", if_exists=True)
    op.drop_index("ix_tasks_status", table_name="tasks", if_exists=True)
    op.drop_index("ix_tasks_volunteer_status", table_name="tasks", if_exists=True)
    op.drop_index("ix_volunteer_profiles_status", table_name="volunteer_profiles", if_exists=True)
    op.drop_index("ix_help_requests_civilian_id", table_name="help_requests", if_exists=True)
    op.drop_index("ix_help_requests_created_at", table_name="help_requests", if_exists=True)
    op.drop_index("ix_help_requests_status_claimed_by", table_name="help_requests", if_exists=True)
    op.drop_index("ix_incidents_reported_by_id", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_created_at", table_name="incidents", if_exists=True)
    op.drop_index("ix_incidents_status", table_name="incidents", if_exists=True)
    op.drop_index("ix_users_role", table_name="users", if_exists=True)

    op.drop_table("resources", if_exists=True)
    op.drop_table("alerts", if_exists=True)
    op.drop_table("tasks", if_exists=True)
    op.drop_table("volunteer_profiles", if_exists=True)
    op.drop_table("help_requests", if_exists=True)
    op.drop_table("incidents", if_exists=True)
    op.drop_table("users", if_exists=True)
