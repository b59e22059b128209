from .locks import ScheduleLockRegistry
from .pipeline import BLOCKED_POLICY_FLAG, BLOCKED_POLICY_REJECT
from .query import ScheduleSummary
from .service import ScheduleService

__all__ = [
    "ScheduleService",
    "ScheduleLockRegistry",
    "ScheduleSummary",
    "BLOCKED_POLICY_FLAG",
    "BLOCKED_POLICY_REJECT",
]
