from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

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
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import GraphStore
from core.services.scheduling.graph import reachable_from
from infra.db.models import ScheduleORM
from infra.db.optimistic import update_with_version_check
from infra.db.schedule.repository import (
    SqlAlchemyPhaseRepository,
    SqlAlchemyScheduleRepository,
    SqlAlchemyWorkPackageRepository,
)
from infra.db.task.repository import SqlAlchemyDependencyRepository, SqlAlchemyTaskRepository

logger = logging.getLogger(__name__)


class SqlAlchemyGraphStore(GraphStore):
    """
    Schedule graph persistence on one SQLAlchemy session.

    `apply` is the only write path: the whole batch is committed together or
    rolled back together.
    """

    def __init__(self, session: Session):
        self._session: Session = session
        self._schedules = SqlAlchemyScheduleRepository(session)
        self._phases = SqlAlchemyPhaseRepository(session)
        self._work_packages = SqlAlchemyWorkPackageRepository(session)
        self._tasks = SqlAlchemyTaskRepository(session)
        self._dependencies = SqlAlchemyDependencyRepository(session)

    # ---------------- reads ----------------

    def get_schedule(self, schedule_id: str) -> Optional[Schedule]:
        return self._schedules.get(schedule_id)

    def get_phase(self, phase_id: str) -> Optional[Phase]:
        return self._phases.get(phase_id)

    def get_work_package(self, work_package_id: str) -> Optional[WorkPackage]:
        return self._work_packages.get(work_package_id)

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def get_dependency(self, dependency_id: str) -> Optional[TaskDependency]:
        return self._dependencies.get(dependency_id)

    def list_schedules(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: Optional[ScheduleKind] = None,
        is_baseline: Optional[bool] = None,
    ) -> List[Schedule]:
        return self._schedules.list_for_owner(owner_type, owner_id, kind=kind, is_baseline=is_baseline)

    def latest_baseline_version(self, owner_type: OwnerType, owner_id: str, kind: ScheduleKind) -> int:
        return self._schedules.latest_baseline_version(owner_type, owner_id, kind)

    def load_schedule_graph(self, schedule_id: str) -> ScheduleGraph:
        # graphs are read under the schedule lock; drop rows cached before it was taken
        self._session.expire_all()
        schedule = self._require_schedule(schedule_id)
        return ScheduleGraph(
            schedule=schedule,
            phases={p.id: p for p in self._phases.list_by_schedule(schedule_id)},
            work_packages={wp.id: wp for wp in self._work_packages.list_by_schedule(schedule_id)},
            tasks={t.id: t for t in self._tasks.list_by_schedule(schedule_id)},
            dependencies=self._dependencies.list_by_schedule(schedule_id),
        )

    def load_task_subgraph(self, task_id: str) -> ScheduleGraph:
        """
        The slice of a schedule needed to propagate from ``task_id``:
        the task, everything downstream of it, their direct predecessors,
        and every sibling of those tasks up to their phases so rollups stay
        complete. All edges of the schedule are included.
        """
        self._session.expire_all()
        root = self._tasks.get(task_id)
        if root is None:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        schedule = self._require_schedule(root.schedule_id)
        edges = self._dependencies.list_by_schedule(schedule.id)

        wanted: Set[str] = {task_id} | reachable_from(task_id, edges)
        for dep in edges:
            if dep.successor_task_id in wanted:
                wanted.add(dep.predecessor_task_id)

        tasks: Dict[str, Task] = {t.id: t for t in self._tasks.list_by_ids(sorted(wanted))}
        wp_ids = sorted({t.work_package_id for t in tasks.values()})
        work_packages = {wp.id: wp for wp in self._work_packages.list_by_ids(wp_ids)}
        phase_ids = sorted({wp.phase_id for wp in work_packages.values()})

        for wp in self._work_packages.list_by_phases(phase_ids):
            work_packages.setdefault(wp.id, wp)
        for task in self._tasks.list_by_work_packages(wp_ids):
            tasks.setdefault(task.id, task)

        return ScheduleGraph(
            schedule=schedule,
            phases={p.id: p for p in self._phases.list_by_ids(phase_ids)},
            work_packages=work_packages,
            tasks=tasks,
            dependencies=edges,
        )

    # ---------------- writes ----------------

    def apply(self, batch: ChangeBatch, expected_revision: Optional[int] = None) -> None:
        if batch.is_empty and expected_revision is None:
            return
        try:
            self._check_references(batch)

            if batch.schedule_id is not None and expected_revision is not None:
                revision = update_with_version_check(
                    self._session,
                    ScheduleORM,
                    batch.schedule_id,
                    expected_revision,
                    {},
                    version_attr="revision",
                    not_found_message="Schedule not found.",
                    stale_message="Schedule was modified by another operation. Reload and try again.",
                )
                for schedule in batch.schedules:
                    if schedule.id == batch.schedule_id:
                        schedule.revision = revision

            for dep_id in batch.deleted_dependency_ids:
                self._dependencies.delete(dep_id)
            for task_id in batch.deleted_task_ids:
                self._dependencies.delete_for_task(task_id)
                self._tasks.delete(task_id)

            for schedule in batch.schedules:
                if self._session.get(ScheduleORM, schedule.id) is None:
                    self._schedules.add(schedule)
                else:
                    self._schedules.update(schedule)
            # flush parents before children so FK checks pass on strict backends
            self._session.flush()
            for phase in batch.phases:
                self._phases.upsert(phase)
            self._session.flush()
            for wp in batch.work_packages:
                self._work_packages.upsert(wp)
            self._session.flush()
            for task in batch.tasks:
                self._tasks.upsert(task)
            self._session.flush()
            for dep in batch.dependencies:
                self._dependencies.add(dep)

            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.debug(
            "Applied batch on schedule %s: %d task(s), %d edge(s), %d deletion(s)",
            batch.schedule_id,
            len(batch.tasks),
            len(batch.dependencies),
            len(batch.deleted_task_ids) + len(batch.deleted_dependency_ids),
        )

    def delete_owner(self, owner_type: OwnerType, owner_id: str) -> None:
        try:
            self._schedules.delete_for_owner(owner_type, owner_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("Deleted all schedules of %s %s", owner_type.value, owner_id)

    # ---------------- helpers ----------------

    def _require_schedule(self, schedule_id: str) -> Schedule:
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found.", code="SCHEDULE_NOT_FOUND")
        return schedule

    def _check_references(self, batch: ChangeBatch) -> None:
        """Every reference in the batch must resolve, in the batch or in storage."""
        schedule_ids = {s.id for s in batch.schedules}
        phases = {p.id: p for p in batch.phases}
        work_packages = {wp.id: wp for wp in batch.work_packages}
        tasks = {t.id: t for t in batch.tasks}
        deleted = set(batch.deleted_task_ids)

        def schedule_exists(schedule_id: str) -> bool:
            return schedule_id in schedule_ids or self._schedules.get(schedule_id) is not None

        def phase_of(phase_id: str) -> Optional[Phase]:
            return phases.get(phase_id) or self._phases.get(phase_id)

        def work_package_of(wp_id: str) -> Optional[WorkPackage]:
            return work_packages.get(wp_id) or self._work_packages.get(wp_id)

        def task_of(task_id: str) -> Optional[Task]:
            if task_id in deleted:
                return None
            return tasks.get(task_id) or self._tasks.get(task_id)

        for phase in batch.phases:
            if not schedule_exists(phase.schedule_id):
                raise ValidationError(
                    f"Phase {phase.id} references unknown schedule {phase.schedule_id}.",
                    code="INVALID_REFERENCE",
                )
        for wp in batch.work_packages:
            parent = phase_of(wp.phase_id)
            if parent is None or parent.schedule_id != wp.schedule_id:
                raise ValidationError(
                    f"Work package {wp.id} references unknown phase {wp.phase_id}.",
                    code="INVALID_REFERENCE",
                )
        for task in batch.tasks:
            parent = work_package_of(task.work_package_id)
            if parent is None or parent.schedule_id != task.schedule_id:
                raise ValidationError(
                    f"Task {task.id} references unknown work package {task.work_package_id}.",
                    code="INVALID_REFERENCE",
                )
        for dep in batch.dependencies:
            if dep.predecessor_task_id == dep.successor_task_id:
                raise ValidationError("A task cannot depend on itself.", code="SELF_DEPENDENCY")
            for endpoint in (dep.predecessor_task_id, dep.successor_task_id):
                task = task_of(endpoint)
                if task is None or task.schedule_id != dep.schedule_id:
                    raise ValidationError(
                        f"Dependency {dep.id} references unknown task {endpoint}.",
                        code="INVALID_REFERENCE",
                    )


__all__ = ["SqlAlchemyGraphStore"]
