from __future__ import annotations

from core.domain import Task, TaskDependency
from infra.db.models import TaskDependencyORM, TaskORM


def task_to_orm(task: Task) -> TaskORM:
    return TaskORM(
        id=task.id,
        work_package_id=task.work_package_id,
        schedule_id=task.schedule_id,
        name=task.name,
        description=task.description,
        start_date=task.start_date,
        end_date=task.end_date,
        estimated_hours=task.estimated_hours,
        progress_percent=task.progress_percent,
        state=task.state,
        priority=task.priority,
        order=task.order,
        source_task_id=task.source_task_id,
    )


def task_from_orm(obj: TaskORM) -> Task:
    return Task(
        id=obj.id,
        work_package_id=obj.work_package_id,
        schedule_id=obj.schedule_id,
        name=obj.name,
        description=obj.description or "",
        start_date=obj.start_date,
        end_date=obj.end_date,
        estimated_hours=obj.estimated_hours,
        progress_percent=obj.progress_percent,
        state=obj.state,
        priority=obj.priority,
        order=obj.order,
        source_task_id=obj.source_task_id,
    )


def dependency_to_orm(dependency: TaskDependency) -> TaskDependencyORM:
    return TaskDependencyORM(
        id=dependency.id,
        schedule_id=dependency.schedule_id,
        predecessor_task_id=dependency.predecessor_task_id,
        successor_task_id=dependency.successor_task_id,
        dependency_type=dependency.dependency_type,
        lag_days=dependency.lag_days,
    )


def dependency_from_orm(obj: TaskDependencyORM) -> TaskDependency:
    return TaskDependency(
        id=obj.id,
        schedule_id=obj.schedule_id,
        predecessor_task_id=obj.predecessor_task_id,
        successor_task_id=obj.successor_task_id,
        dependency_type=obj.dependency_type,
        lag_days=obj.lag_days,
    )


__all__ = [
    "task_to_orm",
    "task_from_orm",
    "dependency_to_orm",
    "dependency_from_orm",
]
