from datetime import date

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker

from core.domain import OwnerType
from infra.config import Settings
from infra.db.base import Base
import infra.db.models  # noqa: F401
from infra.migrate import run_migrations
from infra.services import build_service_graph


def test_upgrade_creates_the_mapped_schema(tmp_path):
    url = f"sqlite:///{(tmp_path / 'cronograma.db').as_posix()}"

    run_migrations(url)

    engine = create_engine(url, future=True)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables
        for name, table in Base.metadata.tables.items():
            migrated = {col["name"] for col in inspector.get_columns(name)}
            assert {col.name for col in table.columns} == migrated, name
        indexes = {ix["name"] for ix in inspector.get_indexes("task_dependencies")}
        assert "ux_dep_pair" in indexes
    finally:
        engine.dispose()


def test_migrated_database_runs_a_schedule_flow(tmp_path):
    url = f"sqlite:///{(tmp_path / 'flow.db').as_posix()}"
    run_migrations(url)
    engine = create_engine(url, future=True)
    session = sessionmaker(bind=engine, autoflush=False, future=True)()
    try:
        ss = build_service_graph(session, settings=Settings(db_url=url)).schedule_service
        schedule = ss.create_schedule(OwnerType.PROJECT, "p-77", name="Migrated")
        phase = ss.create_phase(schedule.id, "Phase")
        wp = ss.create_work_package(phase.id, "WP")
        a = ss.create_task(wp.id, "A", start_date=date(2026, 1, 1), end_date=date(2026, 1, 3), estimated_hours=8)
        b = ss.create_task(wp.id, "B", start_date=date(2026, 1, 1), end_date=date(2026, 1, 2))
        ss.add_dependency(a.id, b.id)
        baseline = ss.create_baseline(schedule.id)

        assert ss.get_task(b.id).start_date == date(2026, 1, 3)
        assert len(ss.get_schedule_graph(baseline.id).tasks) == 2
    finally:
        session.close()
        engine.dispose()
