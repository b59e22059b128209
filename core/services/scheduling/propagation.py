from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Optional, Set

from core.domain import ScheduleGraph, Task, TaskState
from core.services.scheduling.constraints import forward_shift_days, required_window
from core.services.scheduling.graph import SortKey, downstream_closure, topological_order
from core.services.scheduling.models import PropagationResult


logger = logging.getLogger(__name__)


def recovered_state(task: Task) -> TaskState:
    return TaskState.IN_PROGRESS if (task.progress_percent or 0.0) > 0 else TaskState.PENDING


class DatePropagator:
    """
    Forward-only date propagation over explicit dependency edges.

    The changed tasks and everything downstream of them are visited once, in
    topological order. Each visited task is checked against all of its
    incoming edges; if the latest-forcing bound is later than its dates, the
    task is translated forward with its duration preserved. Tasks are never
    moved earlier here.
    """

    def __init__(self, sort_key: Optional[SortKey] = None):
        self._sort_key: Optional[SortKey] = sort_key

    def propagate(self, graph: ScheduleGraph, changed_task_ids: Iterable[str]) -> PropagationResult:
        roots = [tid for tid in changed_task_ids if tid in graph.tasks]
        affected: Set[str] = set(roots)
        for root in roots:
            affected.update(downstream_closure(root, graph.dependencies, self._sort_key))

        order = topological_order(affected, graph.dependencies, self._sort_key)
        result = PropagationResult()
        for task_id in order:
            task = graph.tasks.get(task_id)
            if task is None:
                logger.warning("Task %s missing from loaded subgraph; skipped during propagation", task_id)
                continue
            self._visit(graph, task, result)

        if result.changed_task_ids or result.blocked_task_ids:
            logger.info(
                "Propagation from %s moved %d task(s), blocked %d, recovered %d",
                ",".join(roots),
                len(result.changed_task_ids),
                len(result.blocked_task_ids),
                len(result.recovered_task_ids),
            )
        return result

    def reevaluate(self, graph: ScheduleGraph, task_id: str) -> PropagationResult:
        """Refresh the blocked flag of one task without moving it."""
        result = PropagationResult()
        task = graph.tasks.get(task_id)
        if task is not None:
            window = required_window(graph.incoming(task.id), graph.tasks)
            self._update_state(task, self._is_inverted(task, window), result)
        return result

    def _visit(self, graph: ScheduleGraph, task: Task, result: PropagationResult) -> None:
        if task.start_date is None or task.end_date is None:
            logger.debug("Task %s has no dates; nothing to propagate", task.id)
            return

        window = required_window(graph.incoming(task.id), graph.tasks)
        inverted = self._is_inverted(task, window)

        shift = forward_shift_days(task, window)
        if shift > 0:
            task.start_date = task.start_date + timedelta(days=shift)
            task.end_date = task.end_date + timedelta(days=shift)
            result.changed_task_ids.append(task.id)
            result.shift_days_by_task[task.id] = shift
            result.touched_work_package_ids.add(task.work_package_id)

        self._update_state(task, inverted, result)

    @staticmethod
    def _is_inverted(task: Task, window) -> bool:
        if task.start_date is not None and task.end_date is not None and task.end_date < task.start_date:
            return True
        return window.is_conflicting

    @staticmethod
    def _update_state(task: Task, inverted: bool, result: PropagationResult) -> None:
        if inverted:
            if task.state == TaskState.DONE:
                logger.warning("Completed task %s has conflicting incoming constraints", task.id)
                return
            if task.state != TaskState.BLOCKED:
                task.state = TaskState.BLOCKED
                result.blocked_task_ids.append(task.id)
                result.touched_work_package_ids.add(task.work_package_id)
            return
        if task.state == TaskState.BLOCKED:
            task.state = recovered_state(task)
            result.recovered_task_ids.append(task.id)
            result.touched_work_package_ids.add(task.work_package_id)


__all__ = ["DatePropagator", "recovered_state"]
