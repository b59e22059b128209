from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.domain import (
    ChangeBatch,
    DependencyType,
    Task,
    TaskDependency,
    TaskPriority,
    TaskState,
)
from core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from core.interfaces import GraphStore
from core.services.schedule.locks import ScheduleLockRegistry
from core.services.scheduling import BatchCreateResult, ScheduleUpdateResult, validate_acyclic

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    TaskState.PENDING: {TaskState.IN_PROGRESS},
    TaskState.IN_PROGRESS: {TaskState.PENDING, TaskState.DONE},
    TaskState.DONE: set(),
    TaskState.BLOCKED: set(),
}


def apply_progress(task: Task, progress: float) -> None:
    """Set progress and move the state along with it (0 pending, 100 done, in between in progress)."""
    if task.state == TaskState.BLOCKED:
        if progress >= 100:
            raise BusinessRuleError(
                f"Task '{task.name}' is blocked by conflicting dependencies and cannot be completed.",
                code="TASK_BLOCKED",
            )
        task.progress_percent = progress
        return

    task.progress_percent = progress
    if progress == 0 and task.state != TaskState.PENDING:
        task.state = TaskState.PENDING
    elif 0 < progress < 100 and task.state in (TaskState.PENDING, TaskState.DONE):
        task.state = TaskState.IN_PROGRESS
    elif progress == 100:
        task.state = TaskState.DONE


class TaskLifecycleMixin:
    _store: GraphStore
    _locks: ScheduleLockRegistry

    def create_task(
        self,
        work_package_id: str,
        name: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        duration_days: Optional[int] = None,
        estimated_hours: float = 0.0,
        progress_percent: float = 0.0,
        description: str = "",
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        wp = self._require_work_package(work_package_id)
        task = self._build_task(
            wp.id,
            wp.schedule_id,
            {
                "name": name,
                "start_date": start_date,
                "end_date": end_date,
                "duration_days": duration_days,
                "estimated_hours": estimated_hours,
                "progress_percent": progress_percent,
                "description": description,
                "priority": priority,
            },
            order=0,
        )

        with self._locks.hold(wp.schedule_id):
            graph = self._store.load_schedule_graph(wp.schedule_id)
            self._require_mutable(graph.schedule)
            task.order = len(graph.tasks_of(wp.id))
            graph.tasks[task.id] = task
            self._commit_change(graph, edited_task_ids=[task.id])

        logger.info("Created task %s - %s in work package %s", task.id, task.name, wp.id)
        return task

    def create_tasks_batch(
        self,
        work_package_id: str,
        tasks: Sequence[Mapping[str, Any]],
        dependencies: Sequence[Mapping[str, Any]] = (),
        extend_work_package_end: bool = False,
    ) -> BatchCreateResult:
        """
        Insert many tasks and their edges in one transaction.

        Each task mapping may carry a batch-local ``key``; edge endpoints
        (``predecessor`` / ``successor``) name either such a key or the id
        of an existing task of the same schedule. Nothing is written unless
        every task and edge is valid and the combined edge set is acyclic.
        """
        if not tasks:
            raise ValidationError("A batch needs at least one task.", code="BATCH_EMPTY")
        wp = self._require_work_package(work_package_id)

        with self._locks.hold(wp.schedule_id):
            graph = self._store.load_schedule_graph(wp.schedule_id)
            self._require_mutable(graph.schedule)

            by_key: Dict[str, str] = {}
            new_tasks: List[Task] = []
            next_order = len(graph.tasks_of(wp.id))
            for position, attrs in enumerate(tasks):
                task = self._build_task(wp.id, wp.schedule_id, attrs, order=next_order + position)
                key = str(attrs.get("key") or "").strip()
                if key:
                    if key in by_key:
                        raise ValidationError(f"Duplicate task key '{key}' in batch.", code="BATCH_DUPLICATE_KEY")
                    by_key[key] = task.id
                new_tasks.append(task)

            current_wp = graph.work_packages[wp.id]
            if current_wp.planned_end is not None and not extend_work_package_end:
                late = [t for t in new_tasks if t.end_date is not None and t.end_date > current_wp.planned_end]
                if late:
                    raise ValidationError(
                        f"Task '{late[0].name}' ends after work package end ({current_wp.planned_end}). "
                        "Pass extend_work_package_end to allow it.",
                        code="TASK_OUTSIDE_WORK_PACKAGE",
                    )

            for task in new_tasks:
                graph.tasks[task.id] = task

            new_edges: List[TaskDependency] = []
            pairs = {(d.predecessor_task_id, d.successor_task_id) for d in graph.dependencies}
            for attrs in dependencies:
                pred_id = self._resolve_batch_ref(attrs.get("predecessor"), by_key, graph.tasks)
                succ_id = self._resolve_batch_ref(attrs.get("successor"), by_key, graph.tasks)
                if pred_id == succ_id:
                    raise ValidationError("A task cannot depend on itself.", code="SELF_DEPENDENCY")
                if (pred_id, succ_id) in pairs:
                    raise ValidationError("Dependency already exists.", code="DUPLICATE_DEPENDENCY")
                pairs.add((pred_id, succ_id))
                new_edges.append(
                    TaskDependency.create(
                        wp.schedule_id,
                        pred_id,
                        succ_id,
                        dependency_type=DependencyType(attrs.get("dependency_type") or DependencyType.FINISH_TO_START),
                        lag_days=int(attrs.get("lag_days") or 0),
                    )
                )

            validate_acyclic(graph.dependencies + new_edges)
            graph.dependencies.extend(new_edges)

            new_ids = [t.id for t in new_tasks]
            batch = ChangeBatch(dependencies=list(new_edges))
            batch.add_tasks(new_tasks)
            update = self._commit_change(graph, roots=new_ids, edited_task_ids=new_ids, batch=batch)

        created = set(new_ids)
        logger.info(
            "Created %d task(s) and %d dependency(ies) in work package %s",
            len(new_tasks),
            len(new_edges),
            wp.id,
        )
        return BatchCreateResult(
            created_tasks=[graph.tasks[t] for t in new_ids],
            created_dependencies=new_edges,
            updated_tasks=[t for t in update.updated_tasks if t.id not in created],
        )

    def update_task_dates(
        self,
        task_id: str,
        start_date: date,
        end_date: date,
        expected_revision: Optional[int] = None,
    ) -> ScheduleUpdateResult:
        if start_date is None or end_date is None:
            raise ValidationError("Both start and end dates are required.", code="TASK_INVALID_DATE")
        return self.update_task(task_id, start_date=start_date, end_date=end_date, expected_revision=expected_revision)

    def update_task(
        self,
        task_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        estimated_hours: Optional[float] = None,
        progress_percent: Optional[float] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[TaskPriority] = None,
        expected_revision: Optional[int] = None,
    ) -> ScheduleUpdateResult:
        self._validate_hours(estimated_hours)
        self._validate_progress(progress_percent)
        cleaned_name = self._validate_name(name) if name is not None else None
        schedule_id = self._require_task(task_id).schedule_id

        with self._locks.hold(schedule_id):
            graph = self._store.load_task_subgraph(task_id)
            self._require_mutable(graph.schedule)
            self._check_expected_revision(graph.schedule, expected_revision)

            task = graph.tasks[task_id]
            new_start = start_date if start_date is not None else task.start_date
            new_end = end_date if end_date is not None else task.end_date
            self._validate_dates(new_start, new_end)

            dates_changed = (new_start, new_end) != (task.start_date, task.end_date)
            task.start_date, task.end_date = new_start, new_end
            if estimated_hours is not None:
                task.estimated_hours = float(estimated_hours)
            if progress_percent is not None:
                apply_progress(task, float(progress_percent))
            if cleaned_name is not None:
                task.name = cleaned_name
            if description is not None:
                task.description = description
            if priority is not None:
                task.priority = TaskPriority(priority)

            result = self._commit_change(
                graph,
                roots=[task_id] if dates_changed else [],
                edited_task_ids=[task_id],
            )

        logger.info("Updated task %s; %d task(s) changed", task_id, len(result.updated_tasks))
        return result

    def set_task_state(self, task_id: str, state: TaskState) -> ScheduleUpdateResult:
        target = TaskState(state)
        schedule_id = self._require_task(task_id).schedule_id

        with self._locks.hold(schedule_id):
            graph = self._store.load_task_subgraph(task_id)
            self._require_mutable(graph.schedule)
            task = graph.tasks[task_id]
            if task.state == target:
                return ScheduleUpdateResult(schedule_id=schedule_id, revision=graph.schedule.revision)
            if target not in _TRANSITIONS[task.state]:
                raise BusinessRuleError(
                    f"Task cannot move from {task.state.value} to {target.value}.",
                    code="TASK_INVALID_TRANSITION",
                )
            if target == TaskState.PENDING and (task.progress_percent or 0.0) > 0:
                raise BusinessRuleError(
                    "A task with recorded progress cannot go back to pending.",
                    code="TASK_INVALID_TRANSITION",
                )
            task.state = target
            if target == TaskState.DONE:
                task.progress_percent = 100.0
            result = self._commit_change(graph, edited_task_ids=[task_id])

        logger.info("Task %s moved to %s", task_id, target.value)
        return result

    def delete_task(self, task_id: str) -> ScheduleUpdateResult:
        task = self._require_task(task_id)

        with self._locks.hold(task.schedule_id):
            graph = self._store.load_schedule_graph(task.schedule_id)
            self._require_mutable(graph.schedule)
            successors = [d.successor_task_id for d in graph.dependencies if d.predecessor_task_id == task_id]
            graph.dependencies = [
                d for d in graph.dependencies if task_id not in (d.predecessor_task_id, d.successor_task_id)
            ]
            graph.tasks.pop(task_id, None)
            batch = ChangeBatch(deleted_task_ids=[task_id])
            result = self._commit_change(
                graph,
                work_package_ids=[task.work_package_id],
                batch=batch,
                reevaluate_task_ids=successors,
            )

        logger.info("Deleted task %s - %s", task_id, task.name)
        return result

    # ---------------- helpers ----------------

    def _build_task(
        self,
        work_package_id: str,
        schedule_id: str,
        attrs: Mapping[str, Any],
        *,
        order: int,
    ) -> Task:
        name = self._validate_name(str(attrs.get("name") or ""))
        start = attrs.get("start_date")
        end = self._resolve_end(start, attrs.get("end_date"), attrs.get("duration_days"))
        self._validate_dates(start, end)
        hours = float(attrs.get("estimated_hours") or 0.0)
        self._validate_hours(hours)
        progress = float(attrs.get("progress_percent") or 0.0)
        self._validate_progress(progress)

        task = Task.create(
            work_package_id=work_package_id,
            schedule_id=schedule_id,
            name=name,
            description=str(attrs.get("description") or ""),
            start_date=start,
            end_date=end,
            estimated_hours=hours,
            priority=TaskPriority(attrs.get("priority") or TaskPriority.MEDIUM),
            order=order,
        )
        apply_progress(task, progress)
        return task

    @staticmethod
    def _resolve_batch_ref(ref: Any, by_key: Mapping[str, str], tasks: Mapping[str, Task]) -> str:
        value = str(ref or "").strip()
        if not value:
            raise ValidationError("Dependency endpoints are required.", code="DEPENDENCY_ENDPOINT_MISSING")
        if value in by_key:
            return by_key[value]
        if value in tasks:
            return value
        raise NotFoundError(f"Task '{value}' not found in this schedule.", code="TASK_NOT_FOUND")
