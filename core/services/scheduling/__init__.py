from .constraints import RequiredWindow, constraint_bound, is_satisfied, required_window
from .graph import downstream_closure, find_cycle, topological_order, validate_acyclic
from .models import BatchCreateResult, PropagationResult, RollupResult, ScheduleUpdateResult
from .propagation import DatePropagator

__all__ = [
    "DatePropagator",
    "RequiredWindow",
    "constraint_bound",
    "is_satisfied",
    "required_window",
    "downstream_closure",
    "find_cycle",
    "topological_order",
    "validate_acyclic",
    "BatchCreateResult",
    "PropagationResult",
    "RollupResult",
    "ScheduleUpdateResult",
]
