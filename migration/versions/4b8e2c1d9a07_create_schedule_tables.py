"""create schedule, phase, work package, task and dependency tables

Revision ID: 4b8e2c1d9a07
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4b8e2c1d9a07"
down_revision = None
branch_labels = None
depends_on = None


_owner_type = sa.Enum("PROJECT", "QUOTATION", name="ownertype")
_schedule_kind = sa.Enum("COMMERCIAL", "EXECUTION", name="schedulekind")
_task_state = sa.Enum("PENDING", "IN_PROGRESS", "DONE", "BLOCKED", name="taskstate")
_task_priority = sa.Enum("LOW", "MEDIUM", "HIGH", "CRITICAL", name="taskpriority")
_dependency_type = sa.Enum(
    "FINISH_TO_START",
    "START_TO_START",
    "FINISH_TO_FINISH",
    "START_TO_FINISH",
    name="dependencytype",
)


def upgrade() -> None:
    op.create_table(
        "schedules",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("owner_type", _owner_type, nullable=False),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kind", _schedule_kind, nullable=False),
        sa.Column("is_baseline", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("source_schedule_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("revision", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(["source_schedule_id"], ["schedules.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_schedule_owner", "schedules", ["owner_type", "owner_id"])
    op.create_index(
        "ux_schedule_baseline_version",
        "schedules",
        ["owner_type", "owner_id", "kind", "version"],
        unique=True,
        sqlite_where=sa.text("is_baseline = 1"),
        postgresql_where=sa.text("is_baseline"),
    )

    op.create_table(
        "phases",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("schedule_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("progress_percent", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("source_phase_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_phase_schedule", "phases", ["schedule_id"])

    op.create_table(
        "work_packages",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("phase_id", sa.String(), nullable=False),
        sa.Column("schedule_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("planned_start", sa.Date(), nullable=True),
        sa.Column("planned_end", sa.Date(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("progress_percent", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("source_work_package_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["phase_id"], ["phases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_work_package_phase", "work_packages", ["phase_id"])
    op.create_index("idx_work_package_schedule", "work_packages", ["schedule_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("work_package_id", sa.String(), nullable=False),
        sa.Column("schedule_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("progress_percent", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("state", _task_state, nullable=False),
        sa.Column("priority", _task_priority, nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("source_task_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["work_package_id"], ["work_packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_tasks_work_package", "tasks", ["work_package_id"])
    op.create_index("idx_tasks_schedule", "tasks", ["schedule_id"])

    op.create_table(
        "task_dependencies",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("schedule_id", sa.String(), nullable=False),
        sa.Column("predecessor_task_id", sa.String(), nullable=False),
        sa.Column("successor_task_id", sa.String(), nullable=False),
        sa.Column("dependency_type", _dependency_type, nullable=False),
        sa.Column("lag_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["predecessor_task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["successor_task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_dep_schedule", "task_dependencies", ["schedule_id"])
    op.create_index("idx_dep_predecessor", "task_dependencies", ["predecessor_task_id"])
    op.create_index("idx_dep_successor", "task_dependencies", ["successor_task_id"])
    op.create_index(
        "ux_dep_pair",
        "task_dependencies",
        ["predecessor_task_id", "successor_task_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ux_dep_pair", table_name="task_dependencies")
    op.drop_index("idx_dep_successor", table_name="task_dependencies")
    op.drop_index("idx_dep_predecessor", table_name="task_dependencies")
    op.drop_index("idx_dep_schedule", table_name="task_dependencies")
    op.drop_table("task_dependencies")

    op.drop_index("idx_tasks_schedule", table_name="tasks")
    op.drop_index("idx_tasks_work_package", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("idx_work_package_schedule", table_name="work_packages")
    op.drop_index("idx_work_package_phase", table_name="work_packages")
    op.drop_table("work_packages")

    op.drop_index("idx_phase_schedule", table_name="phases")
    op.drop_table("phases")

    op.drop_index("ux_schedule_baseline_version", table_name="schedules")
    op.drop_index("idx_schedule_owner", table_name="schedules")
    op.drop_table("schedules")

    for enum_type in (_dependency_type, _task_priority, _task_state, _schedule_kind, _owner_type):
        enum_type.drop(op.get_bind(), checkfirst=True)
