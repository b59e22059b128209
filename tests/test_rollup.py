from __future__ import annotations

from datetime import date

import pytest

from core.domain import Phase, Task, WorkPackage
from core.exceptions import RollupInvariantError
from core.services.rollup import aggregate_phase, aggregate_work_package


def _wp(**extra):
    return WorkPackage(id="wp-1", phase_id="ph-1", schedule_id="s-1", name="WP", **extra)


def _task(tid, hours, progress, start=None, end=None):
    return Task(
        id=tid,
        work_package_id="wp-1",
        schedule_id="s-1",
        name=tid,
        estimated_hours=hours,
        progress_percent=progress,
        start_date=start,
        end_date=end,
    )


def test_progress_is_hours_weighted():
    wp = aggregate_work_package(_wp(), [_task("a", 10, 50), _task("b", 30, 0)])

    assert wp.progress_percent == 12.5
    assert wp.estimated_hours == 40


def test_hours_keep_full_precision():
    tasks = [_task("a", 1 / 3, 0), _task("b", 2.123456789, 0)]

    wp = aggregate_work_package(_wp(), tasks)
    phase = aggregate_phase(Phase(id="ph-1", schedule_id="s-1", name="Phase"), [wp])

    assert wp.estimated_hours == 1 / 3 + 2.123456789
    assert phase.estimated_hours == wp.estimated_hours


def test_work_package_without_tasks_or_hours_has_zero_progress():
    assert aggregate_work_package(_wp(), []).progress_percent == 0.0
    assert aggregate_work_package(_wp(), [_task("a", 0, 80)]).progress_percent == 0.0


def test_work_package_window_spans_its_tasks():
    tasks = [
        _task("a", 1, 0, date(2026, 3, 2), date(2026, 3, 4)),
        _task("b", 1, 0, date(2026, 2, 27), date(2026, 3, 1)),
        _task("c", 1, 0),
    ]

    wp = aggregate_work_package(_wp(planned_start=date(2026, 1, 1), planned_end=date(2026, 1, 2)), tasks)

    assert (wp.planned_start, wp.planned_end) == (date(2026, 2, 27), date(2026, 3, 4))


def test_planned_window_is_kept_when_no_task_is_dated():
    original = _wp(planned_start=date(2026, 1, 1), planned_end=date(2026, 1, 31))

    wp = aggregate_work_package(original, [_task("a", 4, 0)])

    assert (wp.planned_start, wp.planned_end) == (date(2026, 1, 1), date(2026, 1, 31))


def test_aggregation_is_idempotent():
    tasks = [_task("a", 7, 33.3, date(2026, 1, 1), date(2026, 1, 3)), _task("b", 5, 90)]

    once = aggregate_work_package(_wp(), tasks)
    twice = aggregate_work_package(once, tasks)

    assert once == twice


def test_phase_aggregates_work_packages():
    phase = Phase(id="ph-1", schedule_id="s-1", name="Phase")
    wps = [
        WorkPackage(
            id="wp-1",
            phase_id="ph-1",
            schedule_id="s-1",
            name="A",
            estimated_hours=10,
            progress_percent=100,
            planned_start=date(2026, 1, 5),
            planned_end=date(2026, 1, 9),
        ),
        WorkPackage(
            id="wp-2",
            phase_id="ph-1",
            schedule_id="s-1",
            name="B",
            estimated_hours=30,
            progress_percent=0,
            planned_start=date(2026, 1, 1),
            planned_end=date(2026, 1, 6),
        ),
    ]

    result = aggregate_phase(phase, wps)

    assert result.estimated_hours == 40
    assert result.progress_percent == 25.0
    assert (result.start_date, result.end_date) == (date(2026, 1, 1), date(2026, 1, 9))


def test_impossible_aggregates_raise_invariant_error(caplog):
    with pytest.raises(RollupInvariantError):
        aggregate_work_package(_wp(), [_task("a", -5, 0)])

    assert any(r.levelname == "CRITICAL" for r in caplog.records)


def test_service_rollup_matches_weighted_progress(services, work_package, make_task):
    make_task("Excavation", date(2026, 1, 1), date(2026, 1, 5), hours=10, progress=50)
    make_task("Formwork", date(2026, 1, 6), date(2026, 1, 9), hours=30, progress=0)

    graph = services["schedule_service"].get_schedule_graph(work_package.schedule_id)
    wp = graph.work_packages[work_package.id]
    phase = graph.phases[wp.phase_id]

    assert wp.progress_percent == 12.5
    assert wp.estimated_hours == 40
    assert (wp.planned_start, wp.planned_end) == (date(2026, 1, 1), date(2026, 1, 9))
    assert phase.estimated_hours == 40
    assert phase.progress_percent == 12.5


def test_recompute_is_idempotent_and_persisted(services, work_package, make_task):
    make_task("Excavation", date(2026, 1, 1), date(2026, 1, 5), hours=12, progress=25)
    rollup = services["rollup"]

    first = rollup.recompute_work_package(work_package.id)
    second = rollup.recompute_work_package(work_package.id)
    phase_first = rollup.recompute_phase(first.phase_id)
    phase_second = rollup.recompute_phase(first.phase_id)

    assert first == second
    assert phase_first == phase_second
    assert services["graph_store"].get_work_package(work_package.id) == first
