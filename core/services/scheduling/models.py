from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from core.domain import Phase, Task, TaskDependency, WorkPackage


@dataclass
class PropagationResult:
    changed_task_ids: List[str] = field(default_factory=list)
    shift_days_by_task: Dict[str, int] = field(default_factory=dict)
    blocked_task_ids: List[str] = field(default_factory=list)
    recovered_task_ids: List[str] = field(default_factory=list)
    touched_work_package_ids: Set[str] = field(default_factory=set)

    @property
    def state_changed_task_ids(self) -> List[str]:
        return self.blocked_task_ids + self.recovered_task_ids


@dataclass
class RollupResult:
    work_packages: List[WorkPackage] = field(default_factory=list)
    phases: List[Phase] = field(default_factory=list)


@dataclass
class ScheduleUpdateResult:
    """Tasks whose dates (or blocked flag) changed, for client-side refresh."""
    schedule_id: str
    updated_tasks: List[Task] = field(default_factory=list)
    blocked_task_ids: List[str] = field(default_factory=list)
    recovered_task_ids: List[str] = field(default_factory=list)
    work_packages: List[WorkPackage] = field(default_factory=list)
    phases: List[Phase] = field(default_factory=list)
    revision: int = 0


@dataclass
class BatchCreateResult:
    created_tasks: List[Task] = field(default_factory=list)
    created_dependencies: List[TaskDependency] = field(default_factory=list)
    updated_tasks: List[Task] = field(default_factory=list)


__all__ = ["PropagationResult", "RollupResult", "ScheduleUpdateResult", "BatchCreateResult"]
