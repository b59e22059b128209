from infra.db.schedule.mapper import (
    phase_from_orm,
    phase_to_orm,
    schedule_from_orm,
    schedule_to_orm,
    work_package_from_orm,
    work_package_to_orm,
)
from infra.db.schedule.repository import (
    SqlAlchemyPhaseRepository,
    SqlAlchemyScheduleRepository,
    SqlAlchemyWorkPackageRepository,
)

__all__ = [
    "schedule_to_orm",
    "schedule_from_orm",
    "phase_to_orm",
    "phase_from_orm",
    "work_package_to_orm",
    "work_package_from_orm",
    "SqlAlchemyScheduleRepository",
    "SqlAlchemyPhaseRepository",
    "SqlAlchemyWorkPackageRepository",
]
