# core/interfaces.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain import (
    ChangeBatch,
    OwnerType,
    Phase,
    Schedule,
    ScheduleGraph,
    ScheduleKind,
    Task,
    TaskDependency,
    WorkPackage,
)


class ScheduleRepository(ABC):
    @abstractmethod
    def add(self, schedule: Schedule) -> None: ...

    @abstractmethod
    def update(self, schedule: Schedule) -> None: ...

    @abstractmethod
    def get(self, schedule_id: str) -> Optional[Schedule]: ...

    @abstractmethod
    def list_for_owner(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: Optional[ScheduleKind] = None,
        is_baseline: Optional[bool] = None,
    ) -> List[Schedule]: ...

    @abstractmethod
    def latest_baseline_version(self, owner_type: OwnerType, owner_id: str, kind: ScheduleKind) -> int: ...

    @abstractmethod
    def delete_for_owner(self, owner_type: OwnerType, owner_id: str) -> None: ...


class PhaseRepository(ABC):
    @abstractmethod
    def upsert(self, phase: Phase) -> None: ...

    @abstractmethod
    def get(self, phase_id: str) -> Optional[Phase]: ...

    @abstractmethod
    def list_by_schedule(self, schedule_id: str) -> List[Phase]: ...

    @abstractmethod
    def list_by_ids(self, phase_ids: List[str]) -> List[Phase]: ...


class WorkPackageRepository(ABC):
    @abstractmethod
    def upsert(self, work_package: WorkPackage) -> None: ...

    @abstractmethod
    def get(self, work_package_id: str) -> Optional[WorkPackage]: ...

    @abstractmethod
    def list_by_schedule(self, schedule_id: str) -> List[WorkPackage]: ...

    @abstractmethod
    def list_by_ids(self, work_package_ids: List[str]) -> List[WorkPackage]: ...

    @abstractmethod
    def list_by_phases(self, phase_ids: List[str]) -> List[WorkPackage]: ...


class TaskRepository(ABC):
    @abstractmethod
    def upsert(self, task: Task) -> None: ...

    @abstractmethod
    def delete(self, task_id: str) -> None: ...

    @abstractmethod
    def get(self, task_id: str) -> Optional[Task]: ...

    @abstractmethod
    def list_by_schedule(self, schedule_id: str) -> List[Task]: ...

    @abstractmethod
    def list_by_ids(self, task_ids: List[str]) -> List[Task]: ...

    @abstractmethod
    def list_by_work_packages(self, work_package_ids: List[str]) -> List[Task]: ...


class DependencyRepository(ABC):
    @abstractmethod
    def add(self, dependency: TaskDependency) -> None: ...

    @abstractmethod
    def get(self, dependency_id: str) -> Optional[TaskDependency]: ...

    @abstractmethod
    def list_by_schedule(self, schedule_id: str) -> List[TaskDependency]: ...

    @abstractmethod
    def delete(self, dependency_id: str) -> None: ...

    @abstractmethod
    def delete_for_task(self, task_id: str) -> None: ...


class GraphStore(ABC):
    """
    Persisted phases/work packages/tasks/edges of a schedule, with
    all-or-nothing batch writes.
    """

    @abstractmethod
    def get_schedule(self, schedule_id: str) -> Optional[Schedule]: ...

    @abstractmethod
    def get_phase(self, phase_id: str) -> Optional[Phase]: ...

    @abstractmethod
    def get_work_package(self, work_package_id: str) -> Optional[WorkPackage]: ...

    @abstractmethod
    def get_task(self, task_id: str) -> Optional[Task]: ...

    @abstractmethod
    def get_dependency(self, dependency_id: str) -> Optional[TaskDependency]: ...

    @abstractmethod
    def list_schedules(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: Optional[ScheduleKind] = None,
        is_baseline: Optional[bool] = None,
    ) -> List[Schedule]: ...

    @abstractmethod
    def latest_baseline_version(self, owner_type: OwnerType, owner_id: str, kind: ScheduleKind) -> int: ...

    @abstractmethod
    def load_schedule_graph(self, schedule_id: str) -> ScheduleGraph: ...

    @abstractmethod
    def load_task_subgraph(self, task_id: str) -> ScheduleGraph: ...

    @abstractmethod
    def apply(self, batch: ChangeBatch, expected_revision: Optional[int] = None) -> None: ...

    @abstractmethod
    def delete_owner(self, owner_type: OwnerType, owner_id: str) -> None: ...


__all__ = [
    "ScheduleRepository",
    "PhaseRepository",
    "WorkPackageRepository",
    "TaskRepository",
    "DependencyRepository",
    "GraphStore",
]
