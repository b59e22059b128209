from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from core.domain import OwnerType, Schedule, ScheduleGraph, ScheduleKind, Task, TaskState
from core.interfaces import GraphStore


@dataclass
class ScheduleSummary:
    schedule_id: str
    revision: int
    total_tasks: int
    tasks_by_state: Dict[str, int] = field(default_factory=dict)
    total_hours: float = 0.0
    progress_percent: float = 0.0
    milestones: int = 0
    blocked_tasks: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ScheduleQueryMixin:
    _store: GraphStore

    def get_schedule(self, schedule_id: str) -> Schedule:
        return self._require_schedule(schedule_id)

    def get_task(self, task_id: str) -> Task:
        return self._require_task(task_id)

    def list_schedules(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: Optional[ScheduleKind] = None,
        include_baselines: bool = False,
    ) -> List[Schedule]:
        return self._store.list_schedules(
            owner_type,
            owner_id,
            kind=kind,
            is_baseline=None if include_baselines else False,
        )

    def get_schedule_graph(self, schedule_id: str) -> ScheduleGraph:
        return self._store.load_schedule_graph(schedule_id)

    def schedule_summary(self, schedule_id: str) -> ScheduleSummary:
        graph = self._store.load_schedule_graph(schedule_id)
        tasks = list(graph.tasks.values())

        by_state = {state.value: 0 for state in TaskState}
        for task in tasks:
            by_state[task.state.value] += 1

        phases = list(graph.phases.values())
        hours = sum(float(p.estimated_hours or 0.0) for p in phases)
        weighted = sum(float(p.estimated_hours or 0.0) * float(p.progress_percent or 0.0) for p in phases)
        starts = [t.start_date for t in tasks if t.start_date is not None]
        ends = [t.end_date for t in tasks if t.end_date is not None]

        return ScheduleSummary(
            schedule_id=schedule_id,
            revision=graph.schedule.revision,
            total_tasks=len(tasks),
            tasks_by_state=by_state,
            total_hours=hours,
            progress_percent=round(weighted / hours, 2) if hours > 0 else 0.0,
            milestones=sum(1 for t in tasks if t.is_milestone),
            blocked_tasks=by_state[TaskState.BLOCKED.value],
            start_date=min(starts) if starts else None,
            end_date=max(ends) if ends else None,
        )
