from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.domain import OwnerType, Phase, Schedule, ScheduleKind, WorkPackage
from core.interfaces import PhaseRepository, ScheduleRepository, WorkPackageRepository
from infra.db.models import (
    PhaseORM,
    ScheduleORM,
    TaskDependencyORM,
    TaskORM,
    WorkPackageORM,
)
from infra.db.schedule.mapper import (
    phase_from_orm,
    phase_to_orm,
    schedule_from_orm,
    schedule_to_orm,
    work_package_from_orm,
    work_package_to_orm,
)


class SqlAlchemyScheduleRepository(ScheduleRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, schedule: Schedule) -> None:
        self.session.add(schedule_to_orm(schedule))

    def update(self, schedule: Schedule) -> None:
        self.session.merge(schedule_to_orm(schedule))

    def get(self, schedule_id: str) -> Optional[Schedule]:
        obj = self.session.get(ScheduleORM, schedule_id)
        return schedule_from_orm(obj) if obj else None

    def list_for_owner(
        self,
        owner_type: OwnerType,
        owner_id: str,
        kind: Optional[ScheduleKind] = None,
        is_baseline: Optional[bool] = None,
    ) -> List[Schedule]:
        stmt = select(ScheduleORM).where(
            ScheduleORM.owner_type == owner_type,
            ScheduleORM.owner_id == owner_id,
        )
        if kind is not None:
            stmt = stmt.where(ScheduleORM.kind == kind)
        if is_baseline is not None:
            stmt = stmt.where(ScheduleORM.is_baseline.is_(is_baseline))
        stmt = stmt.order_by(ScheduleORM.is_baseline, ScheduleORM.version, ScheduleORM.created_at)
        rows = self.session.execute(stmt).scalars().all()
        return [schedule_from_orm(row) for row in rows]

    def latest_baseline_version(self, owner_type: OwnerType, owner_id: str, kind: ScheduleKind) -> int:
        stmt = select(func.max(ScheduleORM.version)).where(
            ScheduleORM.owner_type == owner_type,
            ScheduleORM.owner_id == owner_id,
            ScheduleORM.kind == kind,
            ScheduleORM.is_baseline.is_(True),
        )
        return int(self.session.execute(stmt).scalar() or 0)

    def delete_for_owner(self, owner_type: OwnerType, owner_id: str) -> None:
        ids = select(ScheduleORM.id).where(
            ScheduleORM.owner_type == owner_type,
            ScheduleORM.owner_id == owner_id,
        )
        schedule_ids = list(self.session.execute(ids).scalars().all())
        if not schedule_ids:
            return
        # children first; sqlite does not enforce ON DELETE unless the pragma is on
        for orm_type in (TaskDependencyORM, TaskORM, WorkPackageORM, PhaseORM):
            self.session.execute(
                delete(orm_type)
                .where(orm_type.schedule_id.in_(schedule_ids))
                .execution_options(synchronize_session=False)
            )
        self.session.execute(
            delete(ScheduleORM)
            .where(ScheduleORM.id.in_(schedule_ids))
            .execution_options(synchronize_session=False)
        )


class SqlAlchemyPhaseRepository(PhaseRepository):
    def __init__(self, session: Session):
        self.session = session

    def upsert(self, phase: Phase) -> None:
        self.session.merge(phase_to_orm(phase))

    def get(self, phase_id: str) -> Optional[Phase]:
        obj = self.session.get(PhaseORM, phase_id)
        return phase_from_orm(obj) if obj else None

    def list_by_schedule(self, schedule_id: str) -> List[Phase]:
        stmt = (
            select(PhaseORM)
            .where(PhaseORM.schedule_id == schedule_id)
            .order_by(PhaseORM.order, PhaseORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [phase_from_orm(row) for row in rows]

    def list_by_ids(self, phase_ids: List[str]) -> List[Phase]:
        if not phase_ids:
            return []
        stmt = select(PhaseORM).where(PhaseORM.id.in_(phase_ids))
        rows = self.session.execute(stmt).scalars().all()
        return [phase_from_orm(row) for row in rows]


class SqlAlchemyWorkPackageRepository(WorkPackageRepository):
    def __init__(self, session: Session):
        self.session = session

    def upsert(self, work_package: WorkPackage) -> None:
        self.session.merge(work_package_to_orm(work_package))

    def get(self, work_package_id: str) -> Optional[WorkPackage]:
        obj = self.session.get(WorkPackageORM, work_package_id)
        return work_package_from_orm(obj) if obj else None

    def list_by_schedule(self, schedule_id: str) -> List[WorkPackage]:
        stmt = (
            select(WorkPackageORM)
            .where(WorkPackageORM.schedule_id == schedule_id)
            .order_by(WorkPackageORM.order, WorkPackageORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [work_package_from_orm(row) for row in rows]

    def list_by_ids(self, work_package_ids: List[str]) -> List[WorkPackage]:
        if not work_package_ids:
            return []
        stmt = select(WorkPackageORM).where(WorkPackageORM.id.in_(work_package_ids))
        rows = self.session.execute(stmt).scalars().all()
        return [work_package_from_orm(row) for row in rows]

    def list_by_phases(self, phase_ids: List[str]) -> List[WorkPackage]:
        if not phase_ids:
            return []
        stmt = (
            select(WorkPackageORM)
            .where(WorkPackageORM.phase_id.in_(phase_ids))
            .order_by(WorkPackageORM.order, WorkPackageORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [work_package_from_orm(row) for row in rows]


__all__ = [
    "SqlAlchemyScheduleRepository",
    "SqlAlchemyPhaseRepository",
    "SqlAlchemyWorkPackageRepository",
]
