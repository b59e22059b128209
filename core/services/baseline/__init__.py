from .models import BaselineVarianceResult, BaselineVarianceRow
from .service import BaselineManager, validate_acyclic_schedule
from .snapshot import copy_graph_into

__all__ = [
    "BaselineManager",
    "BaselineVarianceResult",
    "BaselineVarianceRow",
    "copy_graph_into",
    "validate_acyclic_schedule",
]
