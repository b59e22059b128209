"""Notify listeners (dashboards, exporters, caches) about committed schedule changes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.events.signal import Signal


@dataclass(frozen=True)
class TasksChanged:
    schedule_id: str
    task_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BaselineCreated:
    source_schedule_id: str
    baseline_schedule_id: str
    version: int


class DomainEvents:
    def __init__(self) -> None:
        self.schedule_changed: Signal[str] = Signal("schedule_changed")          # schedule_id
        self.tasks_changed: Signal[TasksChanged] = Signal("tasks_changed")
        self.baseline_created: Signal[BaselineCreated] = Signal("baseline_created")


__all__ = ["DomainEvents", "TasksChanged", "BaselineCreated"]
