from datetime import date

import pytest

from core.domain import OwnerType, Schedule, ScheduleGraph, ScheduleKind, TaskDependency
from core.exceptions import (
    ConcurrencyError,
    CycleDetectedError,
    LockedScheduleError,
    NotFoundError,
    ValidationError,
)
from core.services.baseline import validate_acyclic_schedule


def _d(day):
    return date(2026, 2, day)


def _structure(graph):
    """Names, dates and edges of a graph with ids replaced by names."""
    names = {t.id: t.name for t in graph.tasks.values()}
    tasks = sorted(
        (t.name, t.start_date, t.end_date, t.estimated_hours, t.progress_percent, t.state)
        for t in graph.tasks.values()
    )
    edges = sorted(
        (names[d.predecessor_task_id], names[d.successor_task_id], d.dependency_type, d.lag_days)
        for d in graph.dependencies
    )
    wps = sorted((wp.name, wp.planned_start, wp.planned_end, wp.estimated_hours) for wp in graph.work_packages.values())
    phases = sorted((p.name, p.order) for p in graph.phases.values())
    return tasks, edges, wps, phases


def test_baseline_copies_structure_and_dates(services, make_task, schedule):
    ss = services["schedule_service"]
    a = make_task("Survey", _d(1), _d(3), hours=6)
    b = make_task("Earthworks", _d(4), _d(9), hours=40, progress=25)
    ss.add_dependency(a.id, b.id, lag_days=1)

    baseline = ss.create_baseline(schedule.id, acting_user_id="planner")

    assert baseline.is_baseline and baseline.locked
    assert baseline.is_active is False
    assert baseline.version == 1
    assert baseline.created_by == "planner"
    assert baseline.source_schedule_id == schedule.id
    live = ss.get_schedule_graph(schedule.id)
    frozen = ss.get_schedule_graph(baseline.id)
    assert _structure(frozen) == _structure(live)
    assert not set(frozen.tasks) & set(live.tasks)


def test_baseline_is_unaffected_by_later_live_edits(services, make_task, schedule):
    ss = services["schedule_service"]
    task = make_task("Survey", _d(1), _d(3))
    baseline = ss.create_baseline(schedule.id)
    before = ss.get_schedule_graph(baseline.id)

    ss.update_task_dates(task.id, _d(5), _d(8))
    ss.update_task(task.id, progress_percent=50)

    after = ss.get_schedule_graph(baseline.id)
    assert _structure(after) == _structure(before)


def test_baseline_versions_increase(services, make_task, schedule):
    ss = services["schedule_service"]
    bm = services["baseline_manager"]
    make_task("Survey", _d(1), _d(3))

    first = ss.create_baseline(schedule.id)
    second = ss.create_baseline(schedule.id)

    assert (first.version, second.version) == (1, 2)
    assert [b.id for b in bm.list_baselines(schedule.id)] == [second.id, first.id]
    assert bm.get_latest_baseline(schedule.id).id == second.id


def test_baseline_of_baseline_is_rejected(services, make_task, schedule):
    ss = services["schedule_service"]
    make_task("Survey", _d(1), _d(3))
    baseline = ss.create_baseline(schedule.id)

    with pytest.raises(LockedScheduleError):
        ss.create_baseline(baseline.id)


def test_baseline_of_missing_schedule(services):
    with pytest.raises(NotFoundError):
        services["baseline_manager"].create_baseline("nope")


def test_version_race_surfaces_as_concurrency_error(services, make_task, schedule, monkeypatch):
    ss = services["schedule_service"]
    store = services["graph_store"]
    make_task("Survey", _d(1), _d(3))
    ss.create_baseline(schedule.id)
    monkeypatch.setattr(store, "latest_baseline_version", lambda *args, **kwargs: 0)

    with pytest.raises(ConcurrencyError) as exc:
        ss.create_baseline(schedule.id)

    assert exc.value.code == "BASELINE_VERSION_TAKEN"
    baselines = ss.list_schedules(OwnerType.PROJECT, "proj-1", include_baselines=True)
    assert len([s for s in baselines if s.is_baseline]) == 1


def test_compare_to_live_reports_changes(services, make_task, schedule, work_package):
    ss = services["schedule_service"]
    bm = services["baseline_manager"]
    kept = make_task("Survey", _d(1), _d(3))
    moved = make_task("Earthworks", _d(4), _d(9), hours=40)
    dropped = make_task("Fence", _d(2), _d(2))
    baseline = ss.create_baseline(schedule.id)

    ss.update_task_dates(moved.id, _d(6), _d(12))
    ss.delete_task(dropped.id)
    added = make_task("Drainage", _d(10), _d(11))

    variance = bm.compare_to_live(baseline.id)

    assert variance.baseline_version == 1
    assert variance.live_schedule_id == schedule.id
    assert (variance.added_tasks, variance.removed_tasks, variance.changed_tasks, variance.unchanged_tasks) == (
        1,
        1,
        1,
        1,
    )
    assert [r.change_type for r in variance.rows] == ["ADDED", "REMOVED", "CHANGED"]
    by_type = {r.change_type: r for r in variance.rows}
    assert by_type["ADDED"].task_id == added.id
    assert by_type["REMOVED"].task_name == "Fence"
    assert by_type["REMOVED"].task_id is None
    changed = by_type["CHANGED"]
    assert changed.task_id == moved.id
    assert (changed.start_shift_days, changed.finish_shift_days, changed.duration_delta_days) == (2, 3, 1)
    assert kept.id not in {r.task_id for r in variance.rows}

    full = bm.compare_to_live(baseline.id, include_unchanged=True)
    assert len(full.rows) == 4


def test_compare_requires_a_baseline(services, schedule):
    with pytest.raises(ValidationError) as exc:
        services["baseline_manager"].compare_to_live(schedule.id)

    assert exc.value.code == "NOT_A_BASELINE"


def test_baselines_follow_their_kind(services, make_task, schedule):
    ss = services["schedule_service"]
    make_task("Survey", _d(1), _d(3))
    ss.create_baseline(schedule.id)
    execution = ss.create_execution_schedule(schedule.id)

    exec_baseline = ss.create_baseline(execution.id)

    assert exec_baseline.kind == ScheduleKind.EXECUTION
    assert exec_baseline.version == 1


def test_cyclic_graph_cannot_be_snapshotted():
    schedule = Schedule.create(OwnerType.PROJECT, "p-1", "Plan")
    graph = ScheduleGraph(
        schedule=schedule,
        dependencies=[
            TaskDependency.create(schedule.id, "a", "b"),
            TaskDependency.create(schedule.id, "b", "a"),
        ],
    )

    with pytest.raises(CycleDetectedError) as exc:
        validate_acyclic_schedule(graph)

    assert exc.value.code == "SCHEDULE_CYCLE"
