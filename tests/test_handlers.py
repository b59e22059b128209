import logging
from datetime import date

import pytest

from core.domain import OwnerType, ScheduleKind
from core.exceptions import ConcurrencyError, CycleDetectedError, ValidationError
from infra.handlers import ScheduleRequestHandler


@pytest.fixture
def handler(services):
    return ScheduleRequestHandler(services["schedule_service"])


def test_create_task_returns_serialized_task(handler, work_package):
    body = handler.create_task(
        {
            "workPackageId": work_package.id,
            "name": "Excavation",
            "start": "2026-01-01",
            "durationDays": 4,
            "hours": 16,
            "priority": "high",
        }
    )

    assert body["name"] == "Excavation"
    assert (body["start"], body["end"]) == ("2026-01-01", "2026-01-05")
    assert body["state"] == "pending"
    assert body["priority"] == "high"
    assert body["isMilestone"] is False


def test_batch_dependency_and_patch_flow(handler, work_package):
    created = handler.create_tasks_batch(
        {
            "workPackageId": work_package.id,
            "tasks": [
                {"key": "x", "name": "X", "start": "2026-01-01", "end": "2026-01-05"},
                {"key": "y", "name": "Y", "start": "2026-01-07", "end": "2026-01-09"},
            ],
            "dependencies": [{"fromTaskId": "x", "toTaskId": "y", "type": "finish_to_start", "lagDays": 2}],
        }
    )
    x_id, y_id = (t["id"] for t in created["createdTasks"])
    assert created["createdDependencies"][0]["lagDays"] == 2

    patched = handler.patch_task(x_id, {"end": "2026-01-10"})

    moved = {t["id"]: t for t in patched["updatedTasks"]}
    assert moved[y_id]["start"] == "2026-01-12"
    assert patched["blockedTaskIds"] == []


def test_shift_checks_schedule_membership(handler, services, make_task, schedule):
    task = make_task("Root", date(2026, 1, 1), date(2026, 1, 2))
    other = services["schedule_service"].create_schedule(OwnerType.QUOTATION, "q-1", ScheduleKind.COMMERCIAL)

    with pytest.raises(ValidationError) as exc:
        handler.shift(other.id, {"rootTaskId": task.id, "deltaDays": 3})
    assert exc.value.code == "TASK_SCHEDULE_MISMATCH"

    body = handler.shift(schedule.id, {"rootTaskId": task.id, "deltaDays": 3})
    assert body["updatedTasks"][0]["start"] == "2026-01-04"


def test_stale_patch_is_a_concurrency_error(handler, make_task, services, schedule):
    task = make_task("Root", date(2026, 1, 1), date(2026, 1, 2))
    revision = services["schedule_service"].get_schedule(schedule.id).revision

    with pytest.raises(ConcurrencyError):
        handler.patch_task(task.id, {"hours": 4, "expectedRevision": revision - 1})


def test_cycle_is_logged_under_the_request_trace(handler, make_task, caplog):
    a = make_task("A", date(2026, 1, 1), date(2026, 1, 2))
    b = make_task("B", date(2026, 1, 3), date(2026, 1, 4))
    handler.add_dependency({"fromTaskId": a.id, "toTaskId": b.id})
    caplog.set_level(logging.WARNING, logger="infra.handlers")

    with pytest.raises(CycleDetectedError):
        handler.add_dependency({"fromTaskId": b.id, "toTaskId": a.id}, trace_id="req-cycle")

    assert any("DEPENDENCY_CYCLE" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "No work package"},
        {"workPackageId": "wp", "name": "Bad date", "start": "01/02/2026"},
        {"workPackageId": "wp", "name": "Bad hours", "hours": "many"},
    ],
)
def test_malformed_payloads_become_validation_errors(handler, payload):
    with pytest.raises(ValidationError) as exc:
        handler.create_task(payload)

    assert exc.value.code == "MALFORMED_REQUEST"


def test_create_baseline_response(handler, make_task, schedule):
    make_task("A", date(2026, 1, 1), date(2026, 1, 2))

    body = handler.create_baseline(schedule.id, acting_user_id="planner")

    assert body["version"] == 1
    assert body["baselineId"] != schedule.id


def test_delete_dependency_response(handler, make_task):
    a = make_task("A", date(2026, 1, 1), date(2026, 1, 2))
    b = make_task("B", date(2026, 1, 3), date(2026, 1, 4))
    dep = handler.add_dependency({"fromTaskId": a.id, "toTaskId": b.id, "type": "start_to_start"})

    body = handler.delete_dependency(dep["id"])

    assert dep["type"] == "start_to_start"
    assert body["updatedTasks"] == []
    assert body["revision"] > 0
