from __future__ import annotations

from enum import Enum


class ScheduleKind(str, Enum):
    COMMERCIAL = "commercial"
    EXECUTION = "execution"


class OwnerType(str, Enum):
    PROJECT = "project"
    QUOTATION = "quotation"


class TaskState(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DependencyType(str, Enum):
    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"

    @property
    def constrains_start(self) -> bool:
        return self in (DependencyType.FINISH_TO_START, DependencyType.START_TO_START)

    @property
    def anchored_on_predecessor_finish(self) -> bool:
        return self in (DependencyType.FINISH_TO_START, DependencyType.FINISH_TO_FINISH)


__all__ = ["ScheduleKind", "OwnerType", "TaskState", "TaskPriority", "DependencyType"]
