from __future__ import annotations

import pytest

from core.domain import TaskDependency
from core.exceptions import CycleDetectedError
from core.services.scheduling.graph import (
    downstream_closure,
    find_cycle,
    reachable_from,
    topological_order,
    validate_acyclic,
)


def _edges(*pairs):
    return [TaskDependency.create("sched", a, b) for a, b in pairs]


def test_acyclic_edge_sets_validate():
    edges = _edges(("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"))

    assert find_cycle(edges) is None
    validate_acyclic(edges)


def test_cycle_is_reported_as_closed_path():
    edges = _edges(("A", "B"), ("B", "C"), ("C", "A"), ("C", "D"))

    assert find_cycle(edges) == ["A", "B", "C", "A"]


def test_cycle_report_starts_at_requested_node():
    edges = _edges(("A", "B"), ("B", "A"))

    assert find_cycle(edges, start="A") == ["A", "B", "A"]
    assert find_cycle(edges, start="B") == ["B", "A", "B"]


def test_validate_acyclic_raises_with_cycle_and_code():
    edges = _edges(("X", "Y"), ("Y", "Z"), ("Z", "X"))

    with pytest.raises(CycleDetectedError) as exc:
        validate_acyclic(edges, code="SCHEDULE_CYCLE")

    assert exc.value.cycle == ["X", "Y", "Z", "X"]
    assert exc.value.code == "SCHEDULE_CYCLE"


def test_self_loop_is_a_cycle():
    assert find_cycle(_edges(("A", "A"))) == ["A", "A"]


def test_downstream_closure_excludes_root_and_is_topological():
    edges = _edges(("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("E", "D"))

    closure = downstream_closure("A", edges)

    assert closure == ["B", "C", "D"]
    assert "E" not in closure


def test_downstream_closure_tie_break_uses_sort_key():
    edges = _edges(("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"))
    rank = {"C": 0, "B": 1}

    closure = downstream_closure("A", edges, sort_key=lambda tid: rank.get(tid, 9))

    assert closure == ["C", "B", "D"]


def test_downstream_closure_of_leaf_is_empty():
    edges = _edges(("A", "B"))

    assert downstream_closure("B", edges) == []


def test_downstream_closure_rejects_root_on_cycle():
    edges = _edges(("A", "B"), ("B", "A"))

    with pytest.raises(CycleDetectedError) as exc:
        downstream_closure("A", edges)

    assert exc.value.cycle == ["A", "B", "A"]


def test_topological_order_waits_for_every_predecessor():
    # D has three predecessors; it must come after all of them
    edges = _edges(("A", "D"), ("B", "D"), ("C", "D"), ("A", "B"))

    order = topological_order(["A", "B", "C", "D"], edges)

    assert order.index("D") == 3
    assert order.index("A") < order.index("B")


def test_topological_order_ignores_edges_leaving_the_subset():
    edges = _edges(("A", "B"), ("B", "C"), ("Z", "B"))

    assert topological_order(["B", "C"], edges) == ["B", "C"]


def test_topological_order_raises_on_cycle():
    edges = _edges(("A", "B"), ("B", "A"))

    with pytest.raises(CycleDetectedError) as exc:
        topological_order(["A", "B"], edges)

    assert exc.value.code == "SCHEDULE_CYCLE"


def test_reachable_from_follows_edge_direction():
    edges = _edges(("A", "B"), ("B", "C"), ("D", "A"))

    assert reachable_from("A", edges) == {"B", "C"}
    assert reachable_from("C", edges) == set()
