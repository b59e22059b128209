from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from core.domain import Task, TaskDependency


@dataclass(frozen=True)
class RequiredWindow:
    required_start: Optional[date] = None
    required_end: Optional[date] = None

    @property
    def is_conflicting(self) -> bool:
        return (
            self.required_start is not None
            and self.required_end is not None
            and self.required_start > self.required_end
        )


def constraint_bound(dep: TaskDependency, predecessor: Task) -> Optional[date]:
    """
    Earliest date allowed for the successor's constrained end of the edge:
    its start for FS/SS, its finish for FF/SF.
    """
    if dep.dependency_type.anchored_on_predecessor_finish:
        anchor = predecessor.end_date
    else:
        anchor = predecessor.start_date
    if anchor is None:
        return None
    return anchor + timedelta(days=int(dep.lag_days or 0))


def is_satisfied(dep: TaskDependency, predecessor: Task, successor: Task) -> bool:
    bound = constraint_bound(dep, predecessor)
    if bound is None:
        return True
    constrained = successor.start_date if dep.dependency_type.constrains_start else successor.end_date
    return constrained is None or constrained >= bound


def required_window(incoming: Iterable[TaskDependency], tasks_by_id: Dict[str, Task]) -> RequiredWindow:
    """Latest-forcing bound per side across all incoming edges."""
    start_bounds: list[date] = []
    end_bounds: list[date] = []
    for dep in incoming:
        predecessor = tasks_by_id.get(dep.predecessor_task_id)
        if predecessor is None:
            continue
        bound = constraint_bound(dep, predecessor)
        if bound is None:
            continue
        if dep.dependency_type.constrains_start:
            start_bounds.append(bound)
        else:
            end_bounds.append(bound)
    return RequiredWindow(
        required_start=max(start_bounds) if start_bounds else None,
        required_end=max(end_bounds) if end_bounds else None,
    )


def forward_shift_days(task: Task, window: RequiredWindow) -> int:
    """Days the task must move forward (duration preserved) to meet ``window``; never negative."""
    shift = 0
    if window.required_start is not None and task.start_date is not None:
        shift = max(shift, (window.required_start - task.start_date).days)
    if window.required_end is not None and task.end_date is not None:
        shift = max(shift, (window.required_end - task.end_date).days)
    return shift


__all__ = [
    "RequiredWindow",
    "constraint_bound",
    "is_satisfied",
    "required_window",
    "forward_shift_days",
]
