from .scheduling import DatePropagator
from .rollup import RollupAggregator
from .baseline import BaselineManager
from .schedule import ScheduleLockRegistry, ScheduleService

__all__ = [
    "DatePropagator",
    "RollupAggregator",
    "BaselineManager",
    "ScheduleLockRegistry",
    "ScheduleService",
]
