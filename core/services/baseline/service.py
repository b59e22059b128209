# core/services/baseline/service.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from core.domain import Schedule, ScheduleGraph, Task
from core.events.domain_events import BaselineCreated, DomainEvents
from core.exceptions import (
    ConcurrencyError,
    CycleDetectedError,
    LockedScheduleError,
    NotFoundError,
    ValidationError,
)
from core.interfaces import GraphStore
from core.services.baseline.models import BaselineVarianceResult, BaselineVarianceRow
from core.services.baseline.snapshot import copy_graph_into
from core.services.scheduling.graph import find_cycle

logger = logging.getLogger(__name__)

_CHANGE_PRIORITY = {"ADDED": 0, "REMOVED": 1, "CHANGED": 2, "UNCHANGED": 3}


class BaselineManager:
    """Immutable, versioned snapshots of a schedule and their variance against it."""

    def __init__(self, store: GraphStore, events: Optional[DomainEvents] = None):
        self._store: GraphStore = store
        self._events: DomainEvents = events if events is not None else DomainEvents()

    def create_baseline(self, schedule_id: str, acting_user_id: Optional[str] = None) -> Schedule:
        source = self._store.get_schedule(schedule_id)
        if source is None:
            raise NotFoundError("Schedule not found.", code="SCHEDULE_NOT_FOUND")
        if source.is_baseline:
            raise LockedScheduleError(schedule_id, "A baseline cannot be baselined again.")

        graph = self._store.load_schedule_graph(schedule_id)
        validate_acyclic_schedule(graph)

        version = self._store.latest_baseline_version(source.owner_type, source.owner_id, source.kind) + 1
        baseline = Schedule.create(
            owner_type=source.owner_type,
            owner_id=source.owner_id,
            name=f"{source.name} - baseline v{version}",
            kind=source.kind,
            created_by=acting_user_id,
            is_baseline=True,
            locked=True,
            is_active=False,
            version=version,
            source_schedule_id=source.id,
        )
        batch = copy_graph_into(graph, baseline)
        try:
            self._store.apply(batch)
        except IntegrityError as exc:
            logger.warning(
                "Baseline version %s of %s %s already taken", version, source.owner_type.value, source.owner_id
            )
            raise ConcurrencyError(
                f"Baseline version {version} was created concurrently. Retry.",
                code="BASELINE_VERSION_TAKEN",
            ) from exc

        logger.info(
            "Baseline v%s (%s) created from schedule %s by %s: %d task(s), %d edge(s)",
            version,
            baseline.id,
            source.id,
            acting_user_id or "-",
            len(batch.tasks),
            len(batch.dependencies),
        )
        self._events.baseline_created.emit(
            BaselineCreated(source_schedule_id=source.id, baseline_schedule_id=baseline.id, version=version)
        )
        return baseline

    def list_baselines(self, schedule_id: str) -> List[Schedule]:
        source = self._require(schedule_id)
        baselines = self._store.list_schedules(source.owner_type, source.owner_id, kind=source.kind, is_baseline=True)
        return sorted(baselines, key=lambda s: s.version, reverse=True)

    def get_latest_baseline(self, schedule_id: str) -> Optional[Schedule]:
        baselines = self.list_baselines(schedule_id)
        return baselines[0] if baselines else None

    def compare_to_live(self, baseline_id: str, include_unchanged: bool = False) -> BaselineVarianceResult:
        baseline = self._require(baseline_id)
        if not baseline.is_baseline:
            raise ValidationError("Schedule is not a baseline.", code="NOT_A_BASELINE")
        if not baseline.source_schedule_id:
            raise ValidationError(
                "Baseline has no live schedule to compare with.", code="BASELINE_SOURCE_MISSING"
            )

        snapshot = self._store.load_schedule_graph(baseline.id)
        live = self._store.load_schedule_graph(baseline.source_schedule_id)

        all_rows = _variance_rows(snapshot, live)
        rows = all_rows if include_unchanged else [r for r in all_rows if r.change_type != "UNCHANGED"]
        return BaselineVarianceResult(
            baseline_id=baseline.id,
            baseline_version=baseline.version,
            baseline_created_at=baseline.created_at,
            live_schedule_id=live.schedule.id,
            total_tasks_compared=len(all_rows),
            changed_tasks=sum(1 for r in all_rows if r.change_type == "CHANGED"),
            added_tasks=sum(1 for r in all_rows if r.change_type == "ADDED"),
            removed_tasks=sum(1 for r in all_rows if r.change_type == "REMOVED"),
            unchanged_tasks=sum(1 for r in all_rows if r.change_type == "UNCHANGED"),
            rows=rows,
        )

    def _require(self, schedule_id: str) -> Schedule:
        schedule = self._store.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found.", code="SCHEDULE_NOT_FOUND")
        return schedule


def validate_acyclic_schedule(graph: ScheduleGraph) -> None:
    cycle = find_cycle(graph.dependencies)
    if cycle is not None:
        logger.error("Schedule %s has a dependency cycle %s; refusing to copy it", graph.schedule.id, cycle)
        raise CycleDetectedError(cycle, code="SCHEDULE_CYCLE")


def _variance_rows(snapshot: ScheduleGraph, live: ScheduleGraph) -> List[BaselineVarianceRow]:
    frozen: Dict[str, Task] = {t.source_task_id: t for t in snapshot.tasks.values() if t.source_task_id}
    live_ids = set(live.tasks)

    rows: List[BaselineVarianceRow] = []
    for task_id in sorted(live_ids | set(frozen)):
        before = frozen.get(task_id)
        after = live.tasks.get(task_id)
        rows.append(_variance_row(task_id, before, after))

    rows.sort(key=lambda r: (_CHANGE_PRIORITY.get(r.change_type, 9), r.task_name.lower()))
    return rows


def _days(a, b) -> Optional[int]:
    return (b - a).days if (a is not None and b is not None) else None


def _variance_row(task_id: str, before: Optional[Task], after: Optional[Task]) -> BaselineVarianceRow:
    if before is None:
        change_type = "ADDED"
    elif after is None:
        change_type = "REMOVED"
    else:
        unchanged = (
            before.start_date == after.start_date
            and before.end_date == after.end_date
            and abs(float(before.estimated_hours or 0.0) - float(after.estimated_hours or 0.0)) < 1e-9
            and abs(float(before.progress_percent or 0.0) - float(after.progress_percent or 0.0)) < 1e-9
        )
        change_type = "UNCHANGED" if unchanged else "CHANGED"

    before_duration = before.duration_days if before else None
    after_duration = after.duration_days if after else None
    duration_delta = (
        after_duration - before_duration
        if (before_duration is not None and after_duration is not None)
        else None
    )
    name = (after.name if after else None) or (before.name if before else None) or task_id
    return BaselineVarianceRow(
        task_id=after.id if after else None,
        baseline_task_id=before.id if before else None,
        task_name=name,
        baseline_start=before.start_date if before else None,
        baseline_finish=before.end_date if before else None,
        live_start=after.start_date if after else None,
        live_finish=after.end_date if after else None,
        start_shift_days=_days(before.start_date if before else None, after.start_date if after else None),
        finish_shift_days=_days(before.end_date if before else None, after.end_date if after else None),
        duration_delta_days=duration_delta,
        hours_delta=round(
            float(after.estimated_hours if after else 0.0) - float(before.estimated_hours if before else 0.0), 4
        ),
        progress_delta=round(
            float(after.progress_percent if after else 0.0) - float(before.progress_percent if before else 0.0), 2
        ),
        change_type=change_type,
    )


__all__ = ["BaselineManager", "validate_acyclic_schedule"]
