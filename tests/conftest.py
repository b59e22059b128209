# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.domain import OwnerType, ScheduleKind
from infra.config import Settings
from infra.db.base import Base
import infra.db.models  # noqa: F401
from infra.services import build_service_graph


@pytest.fixture
def settings():
    return Settings(db_url="sqlite:///:memory:")


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def services(session, settings):
    return build_service_graph(session, settings=settings).as_dict()


@pytest.fixture
def schedule(services):
    ss = services["schedule_service"]
    return ss.create_schedule(OwnerType.PROJECT, "proj-1", ScheduleKind.COMMERCIAL, "Obra Norte")


@pytest.fixture
def work_package(services, schedule):
    ss = services["schedule_service"]
    phase = ss.create_phase(schedule.id, "Engineering")
    return ss.create_work_package(phase.id, "Foundations")


@pytest.fixture
def make_task(services, work_package):
    ss = services["schedule_service"]

    def _make(name, start, end, hours=8.0, progress=0.0, wp_id=None):
        return ss.create_task(
            wp_id or work_package.id,
            name,
            start_date=start,
            end_date=end,
            estimated_hours=hours,
            progress_percent=progress,
        )

    return _make
