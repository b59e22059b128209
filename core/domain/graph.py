from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from core.domain.schedule import Phase, Schedule, WorkPackage
from core.domain.task import Task, TaskDependency


@dataclass
class ScheduleGraph:
    """
    In-memory arena of one schedule (or a slice of it).

    Records are keyed by id; the dependency graph is the flat `dependencies`
    list and never object pointers.
    """
    schedule: Schedule
    phases: Dict[str, Phase] = field(default_factory=dict)
    work_packages: Dict[str, WorkPackage] = field(default_factory=dict)
    tasks: Dict[str, Task] = field(default_factory=dict)
    dependencies: List[TaskDependency] = field(default_factory=list)

    def task(self, task_id: str) -> Task:
        return self.tasks[task_id]

    def tasks_of(self, work_package_id: str) -> List[Task]:
        return [t for t in self.tasks.values() if t.work_package_id == work_package_id]

    def work_packages_of(self, phase_id: str) -> List[WorkPackage]:
        return [wp for wp in self.work_packages.values() if wp.phase_id == phase_id]

    def incoming(self, task_id: str) -> List[TaskDependency]:
        return [d for d in self.dependencies if d.successor_task_id == task_id]

    def dependency(self, dependency_id: str) -> Optional[TaskDependency]:
        for dep in self.dependencies:
            if dep.id == dependency_id:
                return dep
        return None


def _upsert(records: list, incoming: Iterable) -> None:
    """Append by id; a later record with the same id replaces the earlier one in place."""
    index = {r.id: i for i, r in enumerate(records)}
    for record in incoming:
        pos = index.get(record.id)
        if pos is None:
            index[record.id] = len(records)
            records.append(record)
        else:
            records[pos] = record


@dataclass
class ChangeBatch:
    """Records to upsert/delete in a single GraphStore transaction."""
    schedule_id: Optional[str] = None
    schedules: List[Schedule] = field(default_factory=list)
    phases: List[Phase] = field(default_factory=list)
    work_packages: List[WorkPackage] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    dependencies: List[TaskDependency] = field(default_factory=list)
    deleted_task_ids: List[str] = field(default_factory=list)
    deleted_dependency_ids: List[str] = field(default_factory=list)

    def add_tasks(self, tasks: Iterable[Task]) -> None:
        _upsert(self.tasks, tasks)

    def add_work_packages(self, work_packages: Iterable[WorkPackage]) -> None:
        _upsert(self.work_packages, work_packages)

    def add_phases(self, phases: Iterable[Phase]) -> None:
        _upsert(self.phases, phases)

    @property
    def is_empty(self) -> bool:
        return not (
            self.schedules
            or self.phases
            or self.work_packages
            or self.tasks
            or self.dependencies
            or self.deleted_task_ids
            or self.deleted_dependency_ids
        )


__all__ = ["ScheduleGraph", "ChangeBatch"]
