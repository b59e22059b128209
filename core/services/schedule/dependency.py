from __future__ import annotations

import logging
from typing import Optional

from core.domain import ChangeBatch, DependencyType, TaskDependency
from core.exceptions import CycleDetectedError, ValidationError
from core.interfaces import GraphStore
from core.services.schedule.locks import ScheduleLockRegistry
from core.services.scheduling import ScheduleUpdateResult, find_cycle

logger = logging.getLogger(__name__)


class DependencyMixin:
    _store: GraphStore
    _locks: ScheduleLockRegistry

    def add_dependency(
        self,
        predecessor_id: str,
        successor_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag_days: int = 0,
        expected_revision: Optional[int] = None,
    ) -> TaskDependency:
        """
        Add ``predecessor -> successor`` and push the successor (and its
        downstream tasks) forward as far as the new constraint requires.
        """
        if predecessor_id == successor_id:
            raise ValidationError("A task cannot depend on itself.", code="SELF_DEPENDENCY")
        pred = self._require_task(predecessor_id)
        succ = self._require_task(successor_id)
        if pred.schedule_id != succ.schedule_id:
            raise ValidationError(
                "Dependencies cannot link tasks of different schedules.",
                code="CROSS_SCHEDULE_DEPENDENCY",
            )

        with self._locks.hold(succ.schedule_id):
            graph = self._store.load_schedule_graph(succ.schedule_id)
            self._require_mutable(graph.schedule)
            self._check_expected_revision(graph.schedule, expected_revision)

            if any(
                d.predecessor_task_id == predecessor_id and d.successor_task_id == successor_id
                for d in graph.dependencies
            ):
                raise ValidationError("Dependency already exists.", code="DUPLICATE_DEPENDENCY")

            dep = TaskDependency.create(
                succ.schedule_id,
                predecessor_id,
                successor_id,
                dependency_type=DependencyType(dependency_type),
                lag_days=int(lag_days or 0),
            )
            cycle = find_cycle(graph.dependencies + [dep], start=successor_id)
            if cycle is not None:
                names = [graph.tasks[t].name if t in graph.tasks else t for t in cycle]
                logger.info("Rejected dependency %s -> %s: cycle %s", predecessor_id, successor_id, cycle)
                raise CycleDetectedError(
                    cycle,
                    "Adding this dependency would create a circular dependency: " + " -> ".join(names),
                )

            graph.dependencies.append(dep)
            self._commit_change(graph, roots=[successor_id], batch=ChangeBatch(dependencies=[dep]))

        logger.info(
            "Added %s dependency %s -> %s (lag %s)",
            dep.dependency_type.value,
            predecessor_id,
            successor_id,
            dep.lag_days,
        )
        return dep

    def delete_dependency(self, dependency_id: str) -> ScheduleUpdateResult:
        """
        Remove an edge. No task moves; the successor's blocked flag is
        re-evaluated against the edges that remain.
        """
        dep = self._require_dependency(dependency_id)

        with self._locks.hold(dep.schedule_id):
            graph = self._store.load_schedule_graph(dep.schedule_id)
            self._require_mutable(graph.schedule)
            graph.dependencies = [d for d in graph.dependencies if d.id != dependency_id]
            result = self._commit_change(
                graph,
                batch=ChangeBatch(deleted_dependency_ids=[dependency_id]),
                reevaluate_task_ids=[dep.successor_task_id],
            )

        logger.info("Removed dependency %s (%s -> %s)", dependency_id, dep.predecessor_task_id, dep.successor_task_id)
        return result
