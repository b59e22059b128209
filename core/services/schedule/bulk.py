from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from core.exceptions import ValidationError
from core.interfaces import GraphStore
from core.services.schedule.locks import ScheduleLockRegistry
from core.services.scheduling import ScheduleUpdateResult, downstream_closure

logger = logging.getLogger(__name__)


class BulkScheduleMixin:
    _store: GraphStore
    _locks: ScheduleLockRegistry

    def shift_dates(
        self,
        root_task_id: str,
        delta_days: int,
        expected_revision: Optional[int] = None,
    ) -> ScheduleUpdateResult:
        """
        Move a task and its whole downstream tail by ``delta_days``, then run
        the usual propagation so every constraint holds again. Tasks outside
        the tail are never touched by the shift itself.
        """
        delta = int(delta_days)
        schedule_id = self._require_task(root_task_id).schedule_id

        with self._locks.hold(schedule_id):
            graph = self._store.load_task_subgraph(root_task_id)
            self._require_mutable(graph.schedule)
            self._check_expected_revision(graph.schedule, expected_revision)

            root = graph.tasks[root_task_id]
            if root.start_date is None or root.end_date is None:
                raise ValidationError("Only dated tasks can be shifted.", code="TASK_UNSCHEDULED")
            if delta == 0:
                return ScheduleUpdateResult(schedule_id=schedule_id, revision=graph.schedule.revision)

            tail = downstream_closure(root_task_id, graph.dependencies)
            moved = []
            for task_id in [root_task_id] + tail:
                task = graph.tasks.get(task_id)
                if task is None or task.start_date is None or task.end_date is None:
                    continue
                task.start_date += timedelta(days=delta)
                task.end_date += timedelta(days=delta)
                moved.append(task_id)

            result = self._commit_change(graph, roots=moved, edited_task_ids=moved)

        logger.info("Shifted task %s and %d downstream task(s) by %+d day(s)", root_task_id, len(moved) - 1, delta)
        return result
