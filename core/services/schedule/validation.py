from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from core.domain import Phase, Schedule, Task, TaskDependency, WorkPackage
from core.exceptions import ConcurrencyError, LockedScheduleError, NotFoundError, ValidationError
from core.interfaces import GraphStore


class ScheduleValidationMixin:
    _store: GraphStore

    def _require_schedule(self, schedule_id: str) -> Schedule:
        schedule = self._store.get_schedule(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found.", code="SCHEDULE_NOT_FOUND")
        return schedule

    def _require_phase(self, phase_id: str) -> Phase:
        phase = self._store.get_phase(phase_id)
        if phase is None:
            raise NotFoundError("Phase not found.", code="PHASE_NOT_FOUND")
        return phase

    def _require_work_package(self, work_package_id: str) -> WorkPackage:
        wp = self._store.get_work_package(work_package_id)
        if wp is None:
            raise NotFoundError("Work package not found.", code="WORK_PACKAGE_NOT_FOUND")
        return wp

    def _require_task(self, task_id: str) -> Task:
        task = self._store.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        return task

    def _require_dependency(self, dependency_id: str) -> TaskDependency:
        dep = self._store.get_dependency(dependency_id)
        if dep is None:
            raise NotFoundError("Dependency not found.", code="DEPENDENCY_NOT_FOUND")
        return dep

    @staticmethod
    def _require_mutable(schedule: Schedule) -> None:
        if schedule.is_baseline:
            raise LockedScheduleError(schedule.id, "Baselines are read-only.")
        if schedule.locked:
            raise LockedScheduleError(schedule.id)

    @staticmethod
    def _check_expected_revision(schedule: Schedule, expected_revision: Optional[int]) -> None:
        if expected_revision is not None and int(expected_revision) != schedule.revision:
            raise ConcurrencyError(
                "Schedule was modified by another operation. Reload and try again.",
                code="STALE_WRITE",
            )

    @staticmethod
    def _validate_name(name: str, label: str = "Task") -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError(f"{label} name cannot be empty.", code=f"{label.upper().replace(' ', '_')}_NAME_EMPTY")
        return cleaned

    @staticmethod
    def _validate_dates(start_date: Optional[date], end_date: Optional[date]) -> None:
        if start_date and end_date and end_date < start_date:
            raise ValidationError(
                f"End date ({end_date}) cannot be before start date ({start_date}).",
                code="TASK_INVALID_DATE",
            )

    @staticmethod
    def _validate_hours(hours: Optional[float]) -> None:
        if hours is not None and hours < 0:
            raise ValidationError("Estimated hours cannot be negative.", code="TASK_INVALID_HOURS")

    @staticmethod
    def _validate_progress(progress: Optional[float]) -> None:
        if progress is not None and not (0.0 <= progress <= 100.0):
            raise ValidationError("progress_percent must be between 0 and 100.", code="TASK_INVALID_PROGRESS")

    @staticmethod
    def _resolve_end(
        start_date: Optional[date],
        end_date: Optional[date],
        duration_days: Optional[int],
    ) -> Optional[date]:
        """End date from an explicit end or from start + duration (calendar days)."""
        if duration_days is not None:
            if duration_days < 0:
                raise ValidationError("Task duration_days cannot be negative.", code="TASK_INVALID_DURATION")
            if start_date is None:
                raise ValidationError("A duration needs a start date.", code="TASK_INVALID_DATE")
            computed = start_date + timedelta(days=int(duration_days))
            if end_date is not None and end_date != computed:
                raise ValidationError(
                    "End date and duration disagree; give one or the other.", code="TASK_INVALID_DATE"
                )
            return computed
        return end_date
