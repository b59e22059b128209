from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass
class BaselineVarianceRow:
    task_id: Optional[str]
    baseline_task_id: Optional[str]
    task_name: str
    baseline_start: Optional[date]
    baseline_finish: Optional[date]
    live_start: Optional[date]
    live_finish: Optional[date]
    start_shift_days: Optional[int]
    finish_shift_days: Optional[int]
    duration_delta_days: Optional[int]
    hours_delta: float
    progress_delta: float
    change_type: str


@dataclass
class BaselineVarianceResult:
    baseline_id: str
    baseline_version: int
    baseline_created_at: datetime
    live_schedule_id: str
    total_tasks_compared: int
    changed_tasks: int
    added_tasks: int
    removed_tasks: int
    unchanged_tasks: int
    rows: List[BaselineVarianceRow] = field(default_factory=list)


__all__ = ["BaselineVarianceRow", "BaselineVarianceResult"]
