from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from core.domain import ChangeBatch, ScheduleGraph
from core.events.domain_events import DomainEvents, TasksChanged
from core.exceptions import BusinessRuleError
from core.interfaces import GraphStore
from core.services.rollup import RollupAggregator
from core.services.scheduling import DatePropagator, ScheduleUpdateResult

logger = logging.getLogger(__name__)

BLOCKED_POLICY_FLAG = "flag"
BLOCKED_POLICY_REJECT = "reject"


def _unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


class SchedulePipelineMixin:
    """validate -> propagate -> rollup -> persist, shared by every task mutation."""

    _store: GraphStore
    _propagator: DatePropagator
    _rollup: RollupAggregator
    _events: DomainEvents
    _blocked_policy: str

    def _commit_change(
        self,
        graph: ScheduleGraph,
        *,
        roots: Iterable[str] = (),
        edited_task_ids: Iterable[str] = (),
        work_package_ids: Iterable[str] = (),
        batch: Optional[ChangeBatch] = None,
        reevaluate_task_ids: Iterable[str] = (),
    ) -> ScheduleUpdateResult:
        batch = batch or ChangeBatch()
        batch.schedule_id = graph.schedule.id
        edited = _unique(edited_task_ids)

        propagation = self._propagator.propagate(graph, _unique(roots))
        for task_id in _unique(reevaluate_task_ids):
            extra = self._propagator.reevaluate(graph, task_id)
            propagation.blocked_task_ids.extend(extra.blocked_task_ids)
            propagation.recovered_task_ids.extend(extra.recovered_task_ids)
            propagation.touched_work_package_ids |= extra.touched_work_package_ids

        if propagation.blocked_task_ids and self._blocked_policy == BLOCKED_POLICY_REJECT:
            raise BusinessRuleError(
                "Conflicting dependency constraints would block task(s): "
                + ", ".join(graph.tasks[t].name for t in propagation.blocked_task_ids),
                code="DURATION_INVERSION",
            )

        wp_ids = set(work_package_ids) | propagation.touched_work_package_ids
        wp_ids.update(graph.tasks[t].work_package_id for t in edited if t in graph.tasks)
        rollup = self._rollup.rollup(graph, wp_ids)

        changed_ids = _unique(
            edited + propagation.changed_task_ids + propagation.state_changed_task_ids
        )
        changed_tasks = [graph.tasks[t] for t in changed_ids if t in graph.tasks]
        batch.add_tasks(changed_tasks)
        batch.add_work_packages(rollup.work_packages)
        batch.add_phases(rollup.phases)

        expected = graph.schedule.revision
        self._store.apply(batch, expected_revision=expected)
        graph.schedule.revision = expected + 1

        result = ScheduleUpdateResult(
            schedule_id=graph.schedule.id,
            updated_tasks=changed_tasks,
            blocked_task_ids=list(propagation.blocked_task_ids),
            recovered_task_ids=list(propagation.recovered_task_ids),
            work_packages=list(rollup.work_packages),
            phases=list(rollup.phases),
            revision=graph.schedule.revision,
        )
        logger.info(
            "Schedule %s now at revision %s: %d task(s) updated, %d blocked, %d work package(s) rolled up",
            graph.schedule.id,
            result.revision,
            len(result.updated_tasks),
            len(result.blocked_task_ids),
            len(result.work_packages),
        )
        self._notify(graph.schedule.id, [t.id for t in changed_tasks] + list(batch.deleted_task_ids))
        return result

    def _notify(self, schedule_id: str, task_ids: List[str]) -> None:
        if task_ids:
            self._events.tasks_changed.emit(TasksChanged(schedule_id=schedule_id, task_ids=list(task_ids)))
        self._events.schedule_changed.emit(schedule_id)


__all__ = ["SchedulePipelineMixin", "BLOCKED_POLICY_FLAG", "BLOCKED_POLICY_REJECT"]
