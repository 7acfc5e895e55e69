"""Initial schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create bays, projects and schedules."""
    # --- manufacturing_bays ---
    op.create_table(
        "manufacturing_bays",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bay_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("equipment", sa.Text(), nullable=True),
        sa.Column("team", sa.String(100), server_default="General", nullable=True, comment="Display grouping"),
        sa.Column("staff_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("hours_per_person_per_week", sa.Integer(), server_default="40", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_manufacturing_bays"),
        sa.UniqueConstraint("bay_number", name="uq_manufacturing_bays_bay_number"),
    )

    # --- projects ---
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("total_hours", sa.Integer(), nullable=True),
        sa.Column("fab_percentage", sa.Float(), nullable=True),
        sa.Column("paint_percentage", sa.Float(), nullable=True),
        sa.Column("production_percentage", sa.Float(), nullable=True),
        sa.Column("it_percentage", sa.Float(), nullable=True),
        sa.Column("ntc_percentage", sa.Float(), nullable=True),
        sa.Column("qc_percentage", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.UniqueConstraint("project_number", name="uq_projects_project_number"),
    )

    # --- manufacturing_schedules ---
    op.create_table(
        "manufacturing_schedules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bay_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), server_default="scheduled", nullable=False),
        sa.Column("row", sa.Integer(), server_default="0", nullable=False, comment="Lane within the bay"),
        sa.Column("total_hours", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("start_date <= end_date", name="ck_manufacturing_schedules_date_order"),
        sa.CheckConstraint('"row" >= 0', name="ck_manufacturing_schedules_row_non_negative"),
        sa.ForeignKeyConstraint(
            ["bay_id"], ["manufacturing_bays.id"],
            name="fk_manufacturing_schedules_bay_id_manufacturing_bays",
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], ondelete="CASCADE",
            name="fk_manufacturing_schedules_project_id_projects",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_manufacturing_schedules"),
    )
    op.create_index("ix_manufacturing_schedules_bay_id", "manufacturing_schedules", ["bay_id"])
    op.create_index("ix_manufacturing_schedules_project_id", "manufacturing_schedules", ["project_id"])
    op.create_index(
        "ix_manufacturing_schedules_bay_dates",
        "manufacturing_schedules",
        ["bay_id", "start_date", "end_date"],
    )


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_index("ix_manufacturing_schedules_bay_dates", table_name="manufacturing_schedules")
    op.drop_index("ix_manufacturing_schedules_project_id", table_name="manufacturing_schedules")
    op.drop_index("ix_manufacturing_schedules_bay_id", table_name="manufacturing_schedules")
    op.drop_table("manufacturing_schedules")
    op.drop_table("projects")
    op.drop_table("manufacturing_bays")
