# infra/db/models.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.domain import DependencyType, OwnerType, ScheduleKind, TaskPriority, TaskState
from infra.db.base import Base


class ScheduleORM(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    owner_type: Mapped[OwnerType] = mapped_column(SAEnum(OwnerType), nullable=False)
    owner_id: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[ScheduleKind] = mapped_column(
        SAEnum(ScheduleKind), default=ScheduleKind.COMMERCIAL, nullable=False
    )
    is_baseline: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    source_schedule_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

Index("idx_schedule_owner", ScheduleORM.owner_type, ScheduleORM.owner_id)
Index(
    "ux_schedule_baseline_version",
    ScheduleORM.owner_type,
    ScheduleORM.owner_id,
    ScheduleORM.kind,
    ScheduleORM.version,
    unique=True,
    sqlite_where=ScheduleORM.is_baseline.is_(True),
    postgresql_where=ScheduleORM.is_baseline.is_(True),
)


class PhaseORM(Base):
    __tablename__ = "phases"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    schedule_id: Mapped[str] = mapped_column(
        String, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, default=0, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    progress_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    source_phase_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

Index("idx_phase_schedule", PhaseORM.schedule_id)


class WorkPackageORM(Base):
    __tablename__ = "work_packages"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    phase_id: Mapped[str] = mapped_column(
        String, ForeignKey("phases.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[str] = mapped_column(
        String, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, default=0, nullable=False)
    planned_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    planned_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    progress_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    source_work_package_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

Index("idx_work_package_phase", WorkPackageORM.phase_id)
Index("idx_work_package_schedule", WorkPackageORM.schedule_id)


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    work_package_id: Mapped[str] = mapped_column(
        String, ForeignKey("work_packages.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[str] = mapped_column(
        String, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    progress_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    state: Mapped[TaskState] = mapped_column(
        SAEnum(TaskState), default=TaskState.PENDING, nullable=False
    )
    priority: Mapped[TaskPriority] = mapped_column(
        SAEnum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False
    )
    order: Mapped[int] = mapped_column("sort_order", Integer, default=0, nullable=False)
    source_task_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

Index("idx_tasks_work_package", TaskORM.work_package_id)
Index("idx_tasks_schedule", TaskORM.schedule_id)


class TaskDependencyORM(Base):
    __tablename__ = "task_dependencies"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    schedule_id: Mapped[str] = mapped_column(
        String, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False
    )
    predecessor_task_id: Mapped[str] = mapped_column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    successor_task_id: Mapped[str] = mapped_column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    dependency_type: Mapped[DependencyType] = mapped_column(
        SAEnum(DependencyType), default=DependencyType.FINISH_TO_START, nullable=False
    )
    lag_days: Mapped[int] = mapped_column(nullable=False, default=0)

Index("idx_dep_schedule", TaskDependencyORM.schedule_id)
Index("idx_dep_predecessor", TaskDependencyORM.predecessor_task_id)
Index("idx_dep_successor", TaskDependencyORM.successor_task_id)
Index(
    "ux_dep_pair",
    TaskDependencyORM.predecessor_task_id,
    TaskDependencyORM.successor_task_id,
    unique=True,
)
