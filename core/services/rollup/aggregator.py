from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from core.domain import ChangeBatch, Phase, ScheduleGraph, Task, WorkPackage
from core.exceptions import NotFoundError, RollupInvariantError
from core.interfaces import GraphStore
from core.services.scheduling.models import RollupResult


logger = logging.getLogger(__name__)


def _weighted_progress(rows: Sequence[Tuple[float, float]]) -> float:
    total_hours = sum(hours for hours, _progress in rows)
    if total_hours <= 0:
        return 0.0
    weighted = sum(hours * progress for hours, progress in rows)
    return round(weighted / total_hours, 2)


def _span(
    ranges: Sequence[Tuple[Optional[date], Optional[date]]],
) -> Tuple[Optional[date], Optional[date]]:
    starts = [start for start, _end in ranges if start is not None]
    ends = [end for _start, end in ranges if end is not None]
    return (min(starts) if starts else None, max(ends) if ends else None)


def _check(kind: str, record_id: str, hours: float, progress: float) -> None:
    if hours < 0 or not (0.0 <= progress <= 100.0):
        logger.critical(
            "Rollup invariant broken for %s %s: hours=%s progress=%s", kind, record_id, hours, progress
        )
        raise RollupInvariantError(
            f"Derived aggregates for {kind} {record_id} are impossible (hours={hours}, progress={progress})."
        )


def aggregate_work_package(work_package: WorkPackage, tasks: Sequence[Task]) -> WorkPackage:
    """
    Derived fields of a work package from its tasks:
    - estimated_hours = sum of task hours
    - planned window = [min task start, max task end]; kept as-is without dated tasks
    - progress_percent = hours-weighted task progress, 0 with no tasks or no hours
    """
    hours = sum(float(t.estimated_hours or 0.0) for t in tasks)
    progress = _weighted_progress([(float(t.estimated_hours or 0.0), float(t.progress_percent or 0.0)) for t in tasks])
    _check("work package", work_package.id, hours, progress)

    start, end = _span([(t.start_date, t.end_date) for t in tasks])
    return replace(
        work_package,
        estimated_hours=hours,
        progress_percent=progress,
        planned_start=start if start is not None else work_package.planned_start,
        planned_end=end if end is not None else work_package.planned_end,
    )


def aggregate_phase(phase: Phase, work_packages: Sequence[WorkPackage]) -> Phase:
    hours = sum(float(wp.estimated_hours or 0.0) for wp in work_packages)
    progress = _weighted_progress(
        [(float(wp.estimated_hours or 0.0), float(wp.progress_percent or 0.0)) for wp in work_packages]
    )
    _check("phase", phase.id, hours, progress)

    start, end = _span([(wp.planned_start, wp.planned_end) for wp in work_packages])
    return replace(
        phase,
        estimated_hours=hours,
        progress_percent=progress,
        start_date=start,
        end_date=end,
    )


class RollupAggregator:
    """
    One-directional leaf -> work package -> phase recomputation.

    `rollup` works on an in-memory graph and returns only the aggregates that
    actually changed, so the caller can fold them into its own batch. The
    `recompute_*` methods load, recompute and persist on their own.
    """

    def __init__(self, store: GraphStore):
        self._store: GraphStore = store

    def rollup(self, graph: ScheduleGraph, work_package_ids: Iterable[str]) -> RollupResult:
        result = RollupResult()
        phase_ids: List[str] = []

        for wp_id in sorted(set(work_package_ids)):
            current = graph.work_packages.get(wp_id)
            if current is None:
                continue
            updated = aggregate_work_package(current, graph.tasks_of(wp_id))
            if updated != current:
                graph.work_packages[wp_id] = updated
                result.work_packages.append(updated)
            if current.phase_id not in phase_ids:
                phase_ids.append(current.phase_id)

        for phase_id in phase_ids:
            current = graph.phases.get(phase_id)
            if current is None:
                continue
            updated = aggregate_phase(current, graph.work_packages_of(phase_id))
            if updated != current:
                graph.phases[phase_id] = updated
                result.phases.append(updated)

        return result

    def recompute_work_package(self, work_package_id: str) -> WorkPackage:
        wp = self._store.get_work_package(work_package_id)
        if wp is None:
            raise NotFoundError("Work package not found.", code="WORK_PACKAGE_NOT_FOUND")
        graph = self._store.load_schedule_graph(wp.schedule_id)
        result = self.rollup(graph, [work_package_id])
        self._persist(result)
        return graph.work_packages[work_package_id]

    def recompute_phase(self, phase_id: str) -> Phase:
        phase = self._store.get_phase(phase_id)
        if phase is None:
            raise NotFoundError("Phase not found.", code="PHASE_NOT_FOUND")
        graph = self._store.load_schedule_graph(phase.schedule_id)
        updated = aggregate_phase(graph.phases[phase_id], graph.work_packages_of(phase_id))
        if updated != graph.phases[phase_id]:
            self._persist(RollupResult(phases=[updated]))
        return updated

    def _persist(self, result: RollupResult) -> None:
        if not result.work_packages and not result.phases:
            return
        batch = ChangeBatch()
        batch.add_work_packages(result.work_packages)
        batch.add_phases(result.phases)
        self._store.apply(batch)


__all__ = ["RollupAggregator", "aggregate_work_package", "aggregate_phase"]
