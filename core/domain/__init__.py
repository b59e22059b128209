from core.domain.enums import DependencyType, OwnerType, ScheduleKind, TaskPriority, TaskState
from core.domain.graph import ChangeBatch, ScheduleGraph
from core.domain.identifiers import generate_id, utc_now
from core.domain.schedule import Phase, Schedule, WorkPackage
from core.domain.task import Task, TaskDependency

__all__ = [
    "generate_id",
    "utc_now",
    "ScheduleKind",
    "OwnerType",
    "TaskState",
    "TaskPriority",
    "DependencyType",
    "Schedule",
    "Phase",
    "WorkPackage",
    "Task",
    "TaskDependency",
    "ScheduleGraph",
    "ChangeBatch",
]
