from __future__ import annotations

from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from core.domain import Task, TaskDependency
from core.interfaces import DependencyRepository, TaskRepository
from infra.db.models import TaskDependencyORM, TaskORM
from infra.db.task.mapper import (
    dependency_from_orm,
    dependency_to_orm,
    task_from_orm,
    task_to_orm,
)


class SqlAlchemyTaskRepository(TaskRepository):
    def __init__(self, session: Session):
        self.session = session

    def upsert(self, task: Task) -> None:
        self.session.merge(task_to_orm(task))

    def delete(self, task_id: str) -> None:
        self.session.query(TaskORM).filter_by(id=task_id).delete()

    def get(self, task_id: str) -> Optional[Task]:
        obj = self.session.get(TaskORM, task_id)
        return task_from_orm(obj) if obj else None

    def list_by_schedule(self, schedule_id: str) -> List[Task]:
        stmt = (
            select(TaskORM)
            .where(TaskORM.schedule_id == schedule_id)
            .order_by(TaskORM.order, TaskORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [task_from_orm(row) for row in rows]

    def list_by_ids(self, task_ids: List[str]) -> List[Task]:
        if not task_ids:
            return []
        stmt = select(TaskORM).where(TaskORM.id.in_(task_ids))
        rows = self.session.execute(stmt).scalars().all()
        return [task_from_orm(row) for row in rows]

    def list_by_work_packages(self, work_package_ids: List[str]) -> List[Task]:
        if not work_package_ids:
            return []
        stmt = (
            select(TaskORM)
            .where(TaskORM.work_package_id.in_(work_package_ids))
            .order_by(TaskORM.order, TaskORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [task_from_orm(row) for row in rows]


class SqlAlchemyDependencyRepository(DependencyRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, dependency: TaskDependency) -> None:
        self.session.add(dependency_to_orm(dependency))

    def get(self, dependency_id: str) -> Optional[TaskDependency]:
        obj = self.session.get(TaskDependencyORM, dependency_id)
        return dependency_from_orm(obj) if obj else None

    def list_by_schedule(self, schedule_id: str) -> List[TaskDependency]:
        stmt = (
            select(TaskDependencyORM)
            .where(TaskDependencyORM.schedule_id == schedule_id)
            .order_by(TaskDependencyORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [dependency_from_orm(row) for row in rows]

    def delete(self, dependency_id: str) -> None:
        self.session.query(TaskDependencyORM).filter_by(id=dependency_id).delete()

    def delete_for_task(self, task_id: str) -> None:
        self.session.query(TaskDependencyORM).filter(
            or_(
                TaskDependencyORM.predecessor_task_id == task_id,
                TaskDependencyORM.successor_task_id == task_id,
            )
        ).delete(synchronize_session=False)


__all__ = [
    "SqlAlchemyTaskRepository",
    "SqlAlchemyDependencyRepository",
]
