from __future__ import annotations

from typing import Optional

from core.domain import Schedule
from core.events.domain_events import DomainEvents
from core.interfaces import GraphStore
from core.services.baseline import BaselineManager
from core.services.rollup import RollupAggregator
from core.services.schedule.bulk import BulkScheduleMixin
from core.services.schedule.dependency import DependencyMixin
from core.services.schedule.lifecycle import TaskLifecycleMixin
from core.services.schedule.locks import ScheduleLockRegistry
from core.services.schedule.pipeline import BLOCKED_POLICY_FLAG, BLOCKED_POLICY_REJECT, SchedulePipelineMixin
from core.services.schedule.query import ScheduleQueryMixin
from core.services.schedule.structure import ScheduleStructureMixin
from core.services.schedule.validation import ScheduleValidationMixin
from core.services.scheduling import DatePropagator


class ScheduleService(
    ScheduleStructureMixin,
    TaskLifecycleMixin,
    DependencyMixin,
    BulkScheduleMixin,
    ScheduleQueryMixin,
    SchedulePipelineMixin,
    ScheduleValidationMixin,
):
    """
    Entry point for every schedule mutation.

    Each operation holds the schedule's lock for validate -> propagate ->
    rollup -> persist, and commits one batch guarded by the schedule
    revision, so concurrent writers in other processes get a
    ConcurrencyError instead of interleaving.
    """

    def __init__(
        self,
        store: GraphStore,
        propagator: DatePropagator | None = None,
        rollup: RollupAggregator | None = None,
        baselines: BaselineManager | None = None,
        locks: ScheduleLockRegistry | None = None,
        events: DomainEvents | None = None,
        blocked_policy: str = BLOCKED_POLICY_FLAG,
    ):
        if blocked_policy not in (BLOCKED_POLICY_FLAG, BLOCKED_POLICY_REJECT):
            raise ValueError(f"Unknown blocked policy: {blocked_policy!r}")
        self._store: GraphStore = store
        self._events: DomainEvents = events if events is not None else DomainEvents()
        self._propagator: DatePropagator = propagator if propagator is not None else DatePropagator()
        self._rollup: RollupAggregator = rollup if rollup is not None else RollupAggregator(store)
        self._baselines: BaselineManager = baselines if baselines is not None else BaselineManager(store, self._events)
        self._locks: ScheduleLockRegistry = locks if locks is not None else ScheduleLockRegistry()
        self._blocked_policy: str = blocked_policy

    @property
    def events(self) -> DomainEvents:
        return self._events

    @property
    def locks(self) -> ScheduleLockRegistry:
        return self._locks

    def create_baseline(self, schedule_id: str, acting_user_id: Optional[str] = None) -> Schedule:
        with self._locks.hold(schedule_id):
            return self._baselines.create_baseline(schedule_id, acting_user_id)
