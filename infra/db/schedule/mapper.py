from __future__ import annotations

from core.domain import Phase, Schedule, WorkPackage
from infra.db.models import PhaseORM, ScheduleORM, WorkPackageORM


def schedule_to_orm(schedule: Schedule) -> ScheduleORM:
    return ScheduleORM(
        id=schedule.id,
        owner_type=schedule.owner_type,
        owner_id=schedule.owner_id,
        name=schedule.name,
        kind=schedule.kind,
        is_baseline=schedule.is_baseline,
        version=schedule.version,
        locked=schedule.locked,
        is_active=schedule.is_active,
        source_schedule_id=schedule.source_schedule_id,
        created_by=schedule.created_by,
        created_at=schedule.created_at,
        revision=schedule.revision,
    )


def schedule_from_orm(obj: ScheduleORM) -> Schedule:
    return Schedule(
        id=obj.id,
        owner_type=obj.owner_type,
        owner_id=obj.owner_id,
        name=obj.name,
        kind=obj.kind,
        is_baseline=obj.is_baseline,
        version=obj.version,
        locked=obj.locked,
        is_active=obj.is_active,
        source_schedule_id=obj.source_schedule_id,
        created_by=obj.created_by,
        created_at=obj.created_at,
        revision=obj.revision,
    )


def phase_to_orm(phase: Phase) -> PhaseORM:
    return PhaseORM(
        id=phase.id,
        schedule_id=phase.schedule_id,
        name=phase.name,
        order=phase.order,
        start_date=phase.start_date,
        end_date=phase.end_date,
        estimated_hours=phase.estimated_hours,
        progress_percent=phase.progress_percent,
        source_phase_id=phase.source_phase_id,
    )


def phase_from_orm(obj: PhaseORM) -> Phase:
    return Phase(
        id=obj.id,
        schedule_id=obj.schedule_id,
        name=obj.name,
        order=obj.order,
        start_date=obj.start_date,
        end_date=obj.end_date,
        estimated_hours=obj.estimated_hours,
        progress_percent=obj.progress_percent,
        source_phase_id=obj.source_phase_id,
    )


def work_package_to_orm(wp: WorkPackage) -> WorkPackageORM:
    return WorkPackageORM(
        id=wp.id,
        phase_id=wp.phase_id,
        schedule_id=wp.schedule_id,
        name=wp.name,
        order=wp.order,
        planned_start=wp.planned_start,
        planned_end=wp.planned_end,
        estimated_hours=wp.estimated_hours,
        progress_percent=wp.progress_percent,
        source_work_package_id=wp.source_work_package_id,
    )


def work_package_from_orm(obj: WorkPackageORM) -> WorkPackage:
    return WorkPackage(
        id=obj.id,
        phase_id=obj.phase_id,
        schedule_id=obj.schedule_id,
        name=obj.name,
        order=obj.order,
        planned_start=obj.planned_start,
        planned_end=obj.planned_end,
        estimated_hours=obj.estimated_hours,
        progress_percent=obj.progress_percent,
        source_work_package_id=obj.source_work_package_id,
    )


__all__ = [
    "schedule_to_orm",
    "schedule_from_orm",
    "phase_to_orm",
    "phase_from_orm",
    "work_package_to_orm",
    "work_package_from_orm",
]
