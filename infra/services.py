from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy.orm import Session

from core.domain import DependencyType, TaskPriority
from core.events.domain_events import DomainEvents
from core.services.baseline import BaselineManager
from core.services.rollup import RollupAggregator
from core.services.schedule import ScheduleLockRegistry, ScheduleService
from core.services.scheduling import DatePropagator
from infra.config import Settings, load_settings
from infra.db.graph_store import SqlAlchemyGraphStore


def _parse_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def _as_dependency_type(value: Any) -> DependencyType:
    if isinstance(value, DependencyType):
        return value
    return DependencyType((value or DependencyType.FINISH_TO_START.value))


def _as_priority(value: Any) -> TaskPriority:
    if isinstance(value, TaskPriority):
        return value
    return TaskPriority((value or TaskPriority.MEDIUM.value))


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    events: DomainEvents
    graph_store: SqlAlchemyGraphStore
    propagator: DatePropagator
    rollup: RollupAggregator
    baseline_manager: BaselineManager
    schedule_service: ScheduleService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "events": self.events,
            "graph_store": self.graph_store,
            "propagator": self.propagator,
            "rollup": self.rollup,
            "baseline_manager": self.baseline_manager,
            "schedule_service": self.schedule_service,
        }


def build_service_graph(
    session: Session,
    settings: Optional[Settings] = None,
    locks: Optional[ScheduleLockRegistry] = None,
) -> ServiceGraph:
    settings = settings or load_settings()
    events = DomainEvents()
    store = SqlAlchemyGraphStore(session)
    propagator = DatePropagator()
    rollup = RollupAggregator(store)
    baselines = BaselineManager(store, events)
    schedule_service = ScheduleService(
        store,
        propagator=propagator,
        rollup=rollup,
        baselines=baselines,
        locks=locks,
        events=events,
        blocked_policy=settings.blocked_policy,
    )
    return ServiceGraph(
        session=session,
        events=events,
        graph_store=store,
        propagator=propagator,
        rollup=rollup,
        baseline_manager=baselines,
        schedule_service=schedule_service,
    )
