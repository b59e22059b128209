from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from core.domain import (
    ChangeBatch,
    OwnerType,
    Phase,
    Schedule,
    ScheduleKind,
    WorkPackage,
)
from core.events.domain_events import DomainEvents
from core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from core.interfaces import GraphStore
from core.services.baseline import copy_graph_into, validate_acyclic_schedule
from core.services.schedule.locks import ScheduleLockRegistry
from core.services.scheduling import ScheduleUpdateResult

logger = logging.getLogger(__name__)


class ScheduleStructureMixin:
    """Schedules, phases and work packages: everything above the task level."""

    _store: GraphStore
    _locks: ScheduleLockRegistry
    _events: DomainEvents

    def create_schedule(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: ScheduleKind = ScheduleKind.COMMERCIAL,
        name: str = "",
        acting_user_id: Optional[str] = None,
    ) -> Schedule:
        if not (owner_id or "").strip():
            raise ValidationError("Schedule owner is required.", code="SCHEDULE_OWNER_REQUIRED")

        live = self._store.list_schedules(owner_type, owner_id, kind=kind, is_baseline=False)
        active = [s for s in live if s.is_active]
        if kind == ScheduleKind.COMMERCIAL and active:
            raise BusinessRuleError(
                f"{owner_type.value.title()} {owner_id} already has a commercial schedule.",
                code="SCHEDULE_ALREADY_EXISTS",
            )

        schedule = Schedule.create(
            owner_type=owner_type,
            owner_id=owner_id,
            name=name,
            kind=kind,
            created_by=acting_user_id,
            version=max((s.version for s in live), default=0) + 1,
        )
        batch = ChangeBatch(schedules=[replace(s, is_active=False) for s in active] + [schedule])
        self._store.apply(batch)
        logger.info(
            "Created %s schedule %s v%s for %s %s",
            kind.value,
            schedule.id,
            schedule.version,
            owner_type.value,
            owner_id,
        )
        self._events.schedule_changed.emit(schedule.id)
        return schedule

    def create_execution_schedule(
        self,
        commercial_schedule_id: str,
        acting_user_id: Optional[str] = None,
    ) -> Schedule:
        """
        Copy a commercial schedule into a new active execution revision.
        The commercial schedule is locked from then on; earlier execution
        revisions of the same owner are deactivated.
        """
        source = self._require_schedule(commercial_schedule_id)
        if source.is_baseline or source.kind != ScheduleKind.COMMERCIAL:
            raise BusinessRuleError(
                "Only a live commercial schedule can be converted to execution.",
                code="SCHEDULE_NOT_COMMERCIAL",
            )

        with self._locks.hold(source.id):
            graph = self._store.load_schedule_graph(source.id)
            validate_acyclic_schedule(graph)

            previous = self._store.list_schedules(
                source.owner_type, source.owner_id, kind=ScheduleKind.EXECUTION, is_baseline=False
            )
            execution = Schedule.create(
                owner_type=source.owner_type,
                owner_id=source.owner_id,
                name=source.name,
                kind=ScheduleKind.EXECUTION,
                created_by=acting_user_id,
                version=max((s.version for s in previous), default=0) + 1,
                source_schedule_id=source.id,
            )
            batch = copy_graph_into(graph, execution)
            batch.schedule_id = source.id
            batch.schedules.append(replace(graph.schedule, locked=True))
            batch.schedules.extend(replace(s, is_active=False) for s in previous if s.is_active)
            self._store.apply(batch, expected_revision=graph.schedule.revision)

        logger.info(
            "Schedule %s converted to execution revision %s (%s); commercial schedule locked",
            source.id,
            execution.version,
            execution.id,
        )
        self._events.schedule_changed.emit(source.id)
        self._events.schedule_changed.emit(execution.id)
        return execution

    def create_phase(self, schedule_id: str, name: str, order: Optional[int] = None) -> Phase:
        cleaned = self._validate_name(name, "Phase")
        with self._locks.hold(schedule_id):
            graph = self._store.load_schedule_graph(schedule_id)
            self._require_mutable(graph.schedule)
            phase = Phase.create(
                schedule_id=schedule_id,
                name=cleaned,
                order=len(graph.phases) if order is None else int(order),
            )
            batch = ChangeBatch(schedule_id=schedule_id, phases=[phase])
            self._store.apply(batch, expected_revision=graph.schedule.revision)
        logger.info("Created phase %s - %s in schedule %s", phase.id, phase.name, schedule_id)
        self._events.schedule_changed.emit(schedule_id)
        return phase

    def create_work_package(
        self,
        phase_id: str,
        name: str,
        planned_start: Optional[date] = None,
        planned_end: Optional[date] = None,
        order: Optional[int] = None,
    ) -> WorkPackage:
        cleaned = self._validate_name(name, "Work package")
        self._validate_dates(planned_start, planned_end)
        phase = self._require_phase(phase_id)

        with self._locks.hold(phase.schedule_id):
            graph = self._store.load_schedule_graph(phase.schedule_id)
            self._require_mutable(graph.schedule)
            wp = WorkPackage.create(
                phase_id=phase_id,
                schedule_id=phase.schedule_id,
                name=cleaned,
                order=len(graph.work_packages_of(phase_id)) if order is None else int(order),
                planned_start=planned_start,
                planned_end=planned_end,
            )
            graph.work_packages[wp.id] = wp
            batch = ChangeBatch(work_packages=[wp])
            self._commit_change(graph, work_package_ids=[wp.id], batch=batch)
        logger.info("Created work package %s - %s in phase %s", wp.id, wp.name, phase_id)
        return graph.work_packages[wp.id]

    def reorder(self, sibling_ids: List[str]) -> ScheduleUpdateResult:
        """
        Set ``order`` of sibling phases (same schedule) or sibling work
        packages (same phase) to their position in ``sibling_ids``.
        Dates are never affected.
        """
        ids = list(sibling_ids or [])
        if not ids:
            raise ValidationError("Nothing to reorder.", code="REORDER_EMPTY")
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate ids in reorder request.", code="REORDER_DUPLICATE")

        first_phase = self._store.get_phase(ids[0])
        first_wp = None if first_phase else self._store.get_work_package(ids[0])
        if first_phase is None and first_wp is None:
            raise NotFoundError("Phase or work package not found.", code="REORDER_TARGET_NOT_FOUND")
        schedule_id = first_phase.schedule_id if first_phase else first_wp.schedule_id

        with self._locks.hold(schedule_id):
            graph = self._store.load_schedule_graph(schedule_id)
            self._require_mutable(graph.schedule)
            batch = ChangeBatch(schedule_id=schedule_id)
            if first_phase is not None:
                for position, phase_id in enumerate(ids):
                    phase = graph.phases.get(phase_id)
                    if phase is None:
                        raise ValidationError(
                            "All reordered phases must belong to the same schedule.",
                            code="REORDER_MIXED_PARENTS",
                        )
                    batch.phases.append(replace(phase, order=position))
            else:
                for position, wp_id in enumerate(ids):
                    wp = graph.work_packages.get(wp_id)
                    if wp is None or wp.phase_id != first_wp.phase_id:
                        raise ValidationError(
                            "All reordered work packages must belong to the same phase.",
                            code="REORDER_MIXED_PARENTS",
                        )
                    batch.work_packages.append(replace(wp, order=position))
            self._store.apply(batch, expected_revision=graph.schedule.revision)

        logger.info("Reordered %d sibling(s) in schedule %s", len(ids), schedule_id)
        self._events.schedule_changed.emit(schedule_id)
        return ScheduleUpdateResult(
            schedule_id=schedule_id,
            work_packages=list(batch.work_packages),
            phases=list(batch.phases),
            revision=graph.schedule.revision + 1,
        )
