from __future__ import annotations

import heapq
from collections import deque
from typing import Callable, Dict, Iterable, List, Optional, Set

from core.domain import TaskDependency
from core.exceptions import CycleDetectedError

SortKey = Callable[[str], object]

_VISITING = 1
_VISITED = 2


def successors_by_task(edges: Iterable[TaskDependency]) -> Dict[str, List[str]]:
    graph: Dict[str, List[str]] = {}
    for dep in edges:
        graph.setdefault(dep.predecessor_task_id, []).append(dep.successor_task_id)
    return graph


def find_cycle(edges: Iterable[TaskDependency], start: Optional[str] = None) -> Optional[List[str]]:
    """
    Depth-first search with visiting/visited marks.

    Returns the first cycle found as an ordered list of task ids closed on
    its first node (``[a, b, a]``), or None. When ``start`` is given the
    search begins there, so a cycle introduced by a new edge ``p -> start``
    is reported starting at ``start``.
    """
    graph = successors_by_task(edges)
    state: Dict[str, int] = {}

    roots = sorted(graph)
    if start is not None:
        roots.insert(0, start)

    for root in roots:
        if state.get(root):
            continue
        path: List[str] = [root]
        state[root] = _VISITING
        stack = [iter(graph.get(root, ()))]
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                state[path.pop()] = _VISITED
                continue
            mark = state.get(nxt)
            if mark == _VISITING:
                return path[path.index(nxt):] + [nxt]
            if mark is None:
                state[nxt] = _VISITING
                path.append(nxt)
                stack.append(iter(graph.get(nxt, ())))
    return None


def validate_acyclic(
    edges: Iterable[TaskDependency],
    start: Optional[str] = None,
    *,
    code: str = "DEPENDENCY_CYCLE",
) -> None:
    cycle = find_cycle(list(edges), start=start)
    if cycle is not None:
        raise CycleDetectedError(cycle, code=code)


def topological_order(
    task_ids: Iterable[str],
    edges: Iterable[TaskDependency],
    sort_key: Optional[SortKey] = None,
) -> List[str]:
    """Kahn's algorithm over the subgraph induced by ``task_ids``; ties broken by ``sort_key``."""
    nodes: Set[str] = set(task_ids)
    key = sort_key or (lambda task_id: task_id)
    induced = [d for d in edges if d.predecessor_task_id in nodes and d.successor_task_id in nodes]

    graph_succ = successors_by_task(induced)
    indegree: Dict[str, int] = {task_id: 0 for task_id in nodes}
    for dep in induced:
        indegree[dep.successor_task_id] += 1

    heap: list[tuple[object, str]] = []
    for task_id, degree in indegree.items():
        if degree == 0:
            heapq.heappush(heap, (key(task_id), task_id))

    order: List[str] = []
    while heap:
        _key, task_id = heapq.heappop(heap)
        order.append(task_id)
        for succ_id in graph_succ.get(task_id, []):
            indegree[succ_id] -= 1
            if indegree[succ_id] == 0:
                heapq.heappush(heap, (key(succ_id), succ_id))

    if len(order) != len(nodes):
        raise CycleDetectedError(find_cycle(induced) or [], code="SCHEDULE_CYCLE")
    return order


def reachable_from(task_id: str, edges: Iterable[TaskDependency]) -> Set[str]:
    graph = successors_by_task(edges)
    seen: Set[str] = set()
    queue = deque(graph.get(task_id, ()))
    while queue:
        cur = queue.popleft()
        if cur in seen:
            continue
        seen.add(cur)
        queue.extend(n for n in graph.get(cur, ()) if n not in seen)
    return seen


def downstream_closure(
    task_id: str,
    edges: Iterable[TaskDependency],
    sort_key: Optional[SortKey] = None,
) -> List[str]:
    """
    Tasks reachable from ``task_id`` along predecessor -> successor edges,
    root excluded, in topological order.
    """
    edges = list(edges)
    reach = reachable_from(task_id, edges)
    if task_id in reach:
        raise CycleDetectedError(find_cycle(edges, start=task_id) or [task_id, task_id])
    order = topological_order(reach | {task_id}, edges, sort_key)
    return [tid for tid in order if tid != task_id]


__all__ = [
    "successors_by_task",
    "find_cycle",
    "validate_acyclic",
    "topological_order",
    "reachable_from",
    "downstream_closure",
]
