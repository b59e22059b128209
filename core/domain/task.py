from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.enums import DependencyType, TaskPriority, TaskState
from core.domain.identifiers import generate_id


@dataclass
class Task:
    id: str
    work_package_id: str
    schedule_id: str
    name: str
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_hours: float = 0.0
    progress_percent: float = 0.0
    state: TaskState = TaskState.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    order: int = 0
    source_task_id: Optional[str] = None

    @property
    def duration_days(self) -> Optional[int]:
        if self.start_date is None or self.end_date is None:
            return None
        return (self.end_date - self.start_date).days

    @property
    def is_milestone(self) -> bool:
        return self.start_date is not None and self.start_date == self.end_date

    @staticmethod
    def create(work_package_id: str, schedule_id: str, name: str, description: str = "", **extra) -> "Task":
        return Task(
            id=generate_id(),
            work_package_id=work_package_id,
            schedule_id=schedule_id,
            name=name,
            description=description,
            **extra,
        )


@dataclass
class TaskDependency:
    id: str
    schedule_id: str
    predecessor_task_id: str
    successor_task_id: str
    dependency_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0  # negative for lead time

    @staticmethod
    def create(
        schedule_id: str,
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
    ) -> "TaskDependency":
        return TaskDependency(
            id=generate_id(),
            schedule_id=schedule_id,
            predecessor_task_id=predecessor_id,
            successor_task_id=successor_id,
            dependency_type=dependency_type,
            lag_days=lag_days,
        )


__all__ = ["Task", "TaskDependency"]
