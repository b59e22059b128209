from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, TypeVar

from core.domain import Task, TaskDependency
from core.exceptions import DomainError, ValidationError
from core.services.schedule import ScheduleService
from core.services.scheduling import ScheduleUpdateResult
from infra.operational_support import bind_trace_id
from infra.services import _as_dependency_type, _as_priority, _parse_date

logger = logging.getLogger(__name__)

T = TypeVar("T")


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "workPackageId": task.work_package_id,
        "scheduleId": task.schedule_id,
        "name": task.name,
        "description": task.description,
        "start": task.start_date.isoformat() if task.start_date else None,
        "end": task.end_date.isoformat() if task.end_date else None,
        "hours": task.estimated_hours,
        "progress": task.progress_percent,
        "state": task.state.value,
        "priority": task.priority.value,
        "isMilestone": task.is_milestone,
    }


def dependency_to_dict(dep: TaskDependency) -> dict[str, Any]:
    return {
        "id": dep.id,
        "fromTaskId": dep.predecessor_task_id,
        "toTaskId": dep.successor_task_id,
        "type": dep.dependency_type.value,
        "lagDays": dep.lag_days,
    }


def _update_to_dict(result: ScheduleUpdateResult) -> dict[str, Any]:
    return {
        "updatedTasks": [task_to_dict(t) for t in result.updated_tasks],
        "blockedTaskIds": list(result.blocked_task_ids),
        "recoveredTaskIds": list(result.recovered_task_ids),
        "revision": result.revision,
    }


def _optional_float(payload: Mapping[str, Any], key: str) -> Optional[float]:
    value = payload.get(key)
    return None if value is None else float(value)


class ScheduleRequestHandler:
    """
    Request-shaped facade over ScheduleService: camelCase payloads in,
    plain dicts out. Every call runs under one trace id so its log lines
    can be correlated.
    """

    def __init__(self, service: ScheduleService):
        self._service = service

    def _run(self, operation: str, call: Callable[[], T], trace_id: Optional[str]) -> T:
        with bind_trace_id(trace_id):
            try:
                return call()
            except DomainError as exc:
                logger.warning("%s rejected [%s]: %s", operation, exc.code, exc)
                raise
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("%s rejected: malformed payload: %s", operation, exc)
                raise ValidationError(f"Malformed request: {exc}", code="MALFORMED_REQUEST") from exc

    def create_task(self, payload: Mapping[str, Any], trace_id: Optional[str] = None) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            task = self._service.create_task(
                payload["workPackageId"],
                payload.get("name") or "",
                start_date=_parse_date(payload.get("start")),
                end_date=_parse_date(payload.get("end")),
                duration_days=payload.get("durationDays"),
                estimated_hours=float(payload.get("hours") or 0.0),
                progress_percent=float(payload.get("progress") or 0.0),
                description=payload.get("description") or "",
                priority=_as_priority(payload.get("priority")),
            )
            return task_to_dict(task)

        return self._run("create_task", call, trace_id)

    def create_tasks_batch(self, payload: Mapping[str, Any], trace_id: Optional[str] = None) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            tasks = [
                {
                    "key": item.get("key"),
                    "name": item.get("name") or "",
                    "start_date": _parse_date(item.get("start")),
                    "end_date": _parse_date(item.get("end")),
                    "duration_days": item.get("durationDays"),
                    "estimated_hours": item.get("hours") or 0.0,
                    "progress_percent": item.get("progress") or 0.0,
                    "description": item.get("description") or "",
                    "priority": _as_priority(item.get("priority")),
                }
                for item in payload.get("tasks") or []
            ]
            dependencies = [
                {
                    "predecessor": item.get("fromTaskId"),
                    "successor": item.get("toTaskId"),
                    "dependency_type": _as_dependency_type(item.get("type")),
                    "lag_days": int(item.get("lagDays") or 0),
                }
                for item in payload.get("dependencies") or []
            ]
            result = self._service.create_tasks_batch(
                payload["workPackageId"],
                tasks,
                dependencies,
                extend_work_package_end=bool(payload.get("extendWorkPackageEnd", False)),
            )
            return {
                "createdTasks": [task_to_dict(t) for t in result.created_tasks],
                "createdDependencies": [dependency_to_dict(d) for d in result.created_dependencies],
            }

        return self._run("create_tasks_batch", call, trace_id)

    def patch_task(
        self, task_id: str, payload: Mapping[str, Any], trace_id: Optional[str] = None
    ) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            result = self._service.update_task(
                task_id,
                start_date=_parse_date(payload.get("start")),
                end_date=_parse_date(payload.get("end")),
                estimated_hours=_optional_float(payload, "hours"),
                progress_percent=_optional_float(payload, "progress"),
                expected_revision=payload.get("expectedRevision"),
            )
            return _update_to_dict(result)

        return self._run("patch_task", call, trace_id)

    def add_dependency(self, payload: Mapping[str, Any], trace_id: Optional[str] = None) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            dep = self._service.add_dependency(
                payload["fromTaskId"],
                payload["toTaskId"],
                dependency_type=_as_dependency_type(payload.get("type")),
                lag_days=int(payload.get("lagDays") or 0),
            )
            return dependency_to_dict(dep)

        return self._run("add_dependency", call, trace_id)

    def delete_dependency(self, dependency_id: str, trace_id: Optional[str] = None) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            return _update_to_dict(self._service.delete_dependency(dependency_id))

        return self._run("delete_dependency", call, trace_id)

    def shift(self, schedule_id: str, payload: Mapping[str, Any], trace_id: Optional[str] = None) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            root_id = payload["rootTaskId"]
            if self._service.get_task(root_id).schedule_id != schedule_id:
                raise ValidationError("Task does not belong to this schedule.", code="TASK_SCHEDULE_MISMATCH")
            result = self._service.shift_dates(
                root_id,
                int(payload["deltaDays"]),
                expected_revision=payload.get("expectedRevision"),
            )
            return _update_to_dict(result)

        return self._run("shift", call, trace_id)

    def create_baseline(
        self, schedule_id: str, acting_user_id: Optional[str] = None, trace_id: Optional[str] = None
    ) -> dict[str, Any]:
        def call() -> dict[str, Any]:
            baseline = self._service.create_baseline(schedule_id, acting_user_id)
            return {"baselineId": baseline.id, "version": baseline.version}

        return self._run("create_baseline", call, trace_id)


__all__ = ["ScheduleRequestHandler", "task_to_dict", "dependency_to_dict"]
