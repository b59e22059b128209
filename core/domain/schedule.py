from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from core.domain.enums import OwnerType, ScheduleKind
from core.domain.identifiers import generate_id, utc_now


@dataclass
class Schedule:
    """
    A dated breakdown of work for one project or quotation ("cronograma").

    `version` numbers baselines per owner/kind; `revision` is the optimistic
    concurrency counter bumped by every committed mutation.
    """
    id: str
    owner_type: OwnerType
    owner_id: str
    name: str
    kind: ScheduleKind = ScheduleKind.COMMERCIAL
    is_baseline: bool = False
    version: int = 0
    locked: bool = False
    is_active: bool = True
    source_schedule_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    revision: int = 1

    @property
    def is_mutable(self) -> bool:
        return not (self.is_baseline or self.locked)

    @staticmethod
    def create(
        owner_type: OwnerType,
        owner_id: str,
        name: str,
        kind: ScheduleKind = ScheduleKind.COMMERCIAL,
        created_by: Optional[str] = None,
        **extra,
    ) -> "Schedule":
        return Schedule(
            id=generate_id(),
            owner_type=owner_type,
            owner_id=owner_id,
            name=name.strip() or kind.value.title(),
            kind=kind,
            created_by=created_by,
            **extra,
        )


@dataclass
class Phase:
    id: str
    schedule_id: str
    name: str
    order: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_hours: float = 0.0
    progress_percent: float = 0.0
    source_phase_id: Optional[str] = None

    @staticmethod
    def create(schedule_id: str, name: str, order: int = 0) -> "Phase":
        return Phase(id=generate_id(), schedule_id=schedule_id, name=name, order=order)


@dataclass
class WorkPackage:
    id: str
    phase_id: str
    schedule_id: str
    name: str
    order: int = 0
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None
    estimated_hours: float = 0.0
    progress_percent: float = 0.0
    source_work_package_id: Optional[str] = None

    @staticmethod
    def create(
        phase_id: str,
        schedule_id: str,
        name: str,
        order: int = 0,
        planned_start: Optional[date] = None,
        planned_end: Optional[date] = None,
    ) -> "WorkPackage":
        return WorkPackage(
            id=generate_id(),
            phase_id=phase_id,
            schedule_id=schedule_id,
            name=name,
            order=order,
            planned_start=planned_start,
            planned_end=planned_end,
        )


__all__ = ["Schedule", "Phase", "WorkPackage"]
