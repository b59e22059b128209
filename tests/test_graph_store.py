from datetime import date

import pytest

from core.domain import ChangeBatch, OwnerType, Task, TaskDependency
from core.exceptions import ConcurrencyError, NotFoundError, ValidationError


def _orphan_task(schedule_id):
    return Task.create(work_package_id="missing-wp", schedule_id=schedule_id, name="Orphan")


def test_batch_with_dangling_reference_writes_nothing(services, make_task, schedule, work_package):
    store = services["graph_store"]
    valid = Task.create(work_package_id=work_package.id, schedule_id=schedule.id, name="Valid")
    batch = ChangeBatch(schedule_id=schedule.id)
    batch.add_tasks([valid, _orphan_task(schedule.id)])

    with pytest.raises(ValidationError) as exc:
        store.apply(batch)

    assert exc.value.code == "INVALID_REFERENCE"
    assert store.get_task(valid.id) is None


def test_dependency_to_unknown_task_is_rejected(services, make_task, schedule):
    store = services["graph_store"]
    task = make_task("A", date(2026, 1, 1), date(2026, 1, 2))
    before = store.get_schedule(schedule.id).revision

    batch = ChangeBatch(
        schedule_id=schedule.id,
        dependencies=[TaskDependency.create(schedule.id, task.id, "ghost")],
    )
    with pytest.raises(ValidationError):
        store.apply(batch, expected_revision=before)

    assert store.load_schedule_graph(schedule.id).dependencies == []
    assert store.get_schedule(schedule.id).revision == before


def test_apply_bumps_revision_and_rejects_stale_writers(services, make_task, schedule):
    store = services["graph_store"]
    task = make_task("A", date(2026, 1, 1), date(2026, 1, 2))
    revision = store.get_schedule(schedule.id).revision

    renamed = store.get_task(task.id)
    renamed.name = "A renamed"
    batch = ChangeBatch(schedule_id=schedule.id, tasks=[renamed])
    store.apply(batch, expected_revision=revision)

    assert store.get_schedule(schedule.id).revision == revision + 1
    assert store.get_task(task.id).name == "A renamed"

    renamed.name = "lost update"
    with pytest.raises(ConcurrencyError) as exc:
        store.apply(ChangeBatch(schedule_id=schedule.id, tasks=[renamed]), expected_revision=revision)
    assert exc.value.code == "STALE_WRITE"
    assert store.get_task(task.id).name == "A renamed"


def test_task_subgraph_contains_downstream_and_siblings(services, make_task, schedule, work_package):
    ss = services["schedule_service"]
    store = services["graph_store"]
    upstream = make_task("Upstream", date(2026, 1, 1), date(2026, 1, 2))
    root = make_task("Root", date(2026, 1, 3), date(2026, 1, 4))
    child = make_task("Child", date(2026, 1, 5), date(2026, 1, 6))
    other_parent = make_task("Other parent", date(2026, 1, 1), date(2026, 1, 2))
    sibling = make_task("Sibling", date(2026, 1, 1), date(2026, 1, 2))
    phase_b = ss.create_phase(schedule.id, "Unrelated")
    wp_b = ss.create_work_package(phase_b.id, "Elsewhere")
    far = make_task("Far", date(2026, 1, 1), date(2026, 1, 2), wp_id=wp_b.id)
    ss.add_dependency(upstream.id, root.id)
    ss.add_dependency(root.id, child.id)
    ss.add_dependency(other_parent.id, child.id)

    graph = store.load_task_subgraph(root.id)

    assert {upstream.id, root.id, child.id, other_parent.id, sibling.id} <= set(graph.tasks)
    assert far.id not in graph.tasks
    assert set(graph.work_packages) == {work_package.id}
    assert set(graph.phases) == {work_package.phase_id}
    assert len(graph.dependencies) == 3


def test_unknown_task_subgraph(services):
    with pytest.raises(NotFoundError):
        services["graph_store"].load_task_subgraph("nope")


def test_delete_owner_removes_every_schedule(services, make_task, schedule):
    ss = services["schedule_service"]
    store = services["graph_store"]
    a = make_task("A", date(2026, 1, 1), date(2026, 1, 2))
    b = make_task("B", date(2026, 1, 3), date(2026, 1, 4))
    ss.add_dependency(a.id, b.id)
    ss.create_baseline(schedule.id)
    keep = ss.create_schedule(OwnerType.PROJECT, "proj-2")

    store.delete_owner(OwnerType.PROJECT, "proj-1")

    assert store.list_schedules(OwnerType.PROJECT, "proj-1") == []
    assert store.get_task(a.id) is None
    assert store.get_schedule(keep.id) is not None


def test_graph_round_trips_through_storage(services, make_task, schedule, work_package):
    store = services["graph_store"]
    task = make_task("A", date(2026, 1, 1), date(2026, 1, 2), hours=12.5, progress=20)

    graph = store.load_schedule_graph(schedule.id)

    assert graph.tasks[task.id] == task
    assert graph.work_packages[work_package.id].estimated_hours == 12.5
    assert graph.schedule.id == schedule.id
