from __future__ import annotations

from dataclasses import replace
from typing import Dict

from core.domain import (
    ChangeBatch,
    Schedule,
    ScheduleGraph,
    TaskDependency,
    generate_id,
)


def copy_graph_into(graph: ScheduleGraph, target: Schedule) -> ChangeBatch:
    """
    Deep copy of every phase, work package, task and edge of ``graph`` into
    ``target`` with fresh ids. Each copy keeps the id it was made from in its
    ``source_*_id`` field.
    """
    phase_ids: Dict[str, str] = {}
    wp_ids: Dict[str, str] = {}
    task_ids: Dict[str, str] = {}

    batch = ChangeBatch(schedules=[target])
    for phase in graph.phases.values():
        new_id = generate_id()
        phase_ids[phase.id] = new_id
        batch.phases.append(replace(phase, id=new_id, schedule_id=target.id, source_phase_id=phase.id))

    for wp in graph.work_packages.values():
        new_id = generate_id()
        wp_ids[wp.id] = new_id
        batch.work_packages.append(
            replace(
                wp,
                id=new_id,
                phase_id=phase_ids[wp.phase_id],
                schedule_id=target.id,
                source_work_package_id=wp.id,
            )
        )

    for task in graph.tasks.values():
        new_id = generate_id()
        task_ids[task.id] = new_id
        batch.tasks.append(
            replace(
                task,
                id=new_id,
                work_package_id=wp_ids[task.work_package_id],
                schedule_id=target.id,
                source_task_id=task.id,
            )
        )

    for dep in graph.dependencies:
        batch.dependencies.append(
            TaskDependency.create(
                target.id,
                task_ids[dep.predecessor_task_id],
                task_ids[dep.successor_task_id],
                dependency_type=dep.dependency_type,
                lag_days=dep.lag_days,
            )
        )
    return batch


__all__ = ["copy_graph_into"]
