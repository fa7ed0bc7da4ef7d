# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the dependency graph."""

from typing import Any

import pytest

from depgraph.config.graph_config import DepGraphConfig
from depgraph.engine.dep_graph.cell import Unlocked
from depgraph.engine.dep_graph.graph import DepGraph
from depgraph.engine.dep_graph.node_index import DepNodeIndex
from depgraph.engine.errors import (
    DummyIndexMisuseError,
    NameCollisionError,
    TaskStackError,
    UnknownNodeError,
    UnsafeTaskArgumentError,
)
from depgraph.testing.stubs import raise_runtime_error, read_all, return_arg


def make_sources(graph: DepGraph[str], *names: str) -> list[DepNodeIndex]:
    """Create one named node with no predecessors per name."""
    for name in names:
        graph.with_task(name, None, None, return_arg)
    return [graph.lookup(name) for name in names]


def read_with_nested_task(graph: DepGraph[str], reads: tuple[tuple[DepNodeIndex, ...], ...]) -> DepNodeIndex:
    outer, inner = reads
    read_all(graph, outer)
    _, child = graph.with_anon_task(graph, inner, read_all)
    graph.read(child)
    return child


def read_ignoring(graph: DepGraph[str], reads: tuple[tuple[DepNodeIndex, ...], ...]) -> int:
    visible, hidden = reads
    read_all(graph, visible)
    return graph.with_ignore(lambda: read_all(graph, hidden))


def leave_frame_open(graph: DepGraph[str], arg: Any) -> None:
    graph.push_task()


# --- Init tests ---


def test_init_enabled_by_default() -> None:
    graph = DepGraph()
    assert graph.is_fully_enabled
    assert graph.node_count == 0
    assert graph.task_depth == 0


def test_from_config() -> None:
    graph = DepGraph.from_config(DepGraphConfig(enabled=False))
    assert not graph.is_fully_enabled


# --- Named node tests ---


def test_with_task_returns_result_and_registers_name(dep_graph: DepGraph[str]) -> None:
    result = dep_graph.with_task("answer", None, 42, return_arg)

    assert result == 42
    index = dep_graph.lookup("answer")
    assert index == DepNodeIndex(0)
    assert dep_graph.node_name(index) == "answer"
    assert dep_graph.predecessors(index) == ()


def test_named_node_reuse_aborts(dep_graph: DepGraph[str]) -> None:
    dep_graph.with_task("answer", None, None, return_arg)

    with pytest.raises(NameCollisionError, match="'answer' twice"):
        dep_graph.with_task("answer", None, None, return_arg)

    assert dep_graph.node_count == 1
    assert dep_graph.task_depth == 0


def test_named_nodes_with_equal_predecessors_are_distinct(dep_graph: DepGraph[str]) -> None:
    (a,) = make_sources(dep_graph, "a")
    dep_graph.with_task("r1", dep_graph, (a,), read_all)
    dep_graph.with_task("r2", dep_graph, (a,), read_all)

    assert dep_graph.lookup("r1") != dep_graph.lookup("r2")


def test_with_task_rejects_missing_name(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(ValueError, match="with_anon_task"):
        dep_graph.with_task(None, None, None, return_arg)


def test_tuple_names(dep_graph: DepGraph[tuple[str, int]]) -> None:
    dep_graph.with_task(("type_of", 3), None, None, return_arg)
    assert dep_graph.lookup(("type_of", 3)) == DepNodeIndex(0)
    assert dep_graph.lookup(("type_of", 4)) is None


# --- Anonymous node tests ---


def test_anon_tasks_with_same_reads_share_a_node(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    first, x = dep_graph.with_anon_task(dep_graph, (a, b), read_all)
    second, y = dep_graph.with_anon_task(dep_graph, (a, b), read_all)

    assert first == second == 2
    assert x == y
    assert dep_graph.node_count == 3
    assert dep_graph.node_name(x) is None


def test_anon_tasks_with_reordered_reads_get_distinct_nodes(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    _, x = dep_graph.with_anon_task(dep_graph, (a, b), read_all)
    _, y = dep_graph.with_anon_task(dep_graph, (b, a), read_all)

    assert x != y
    assert dep_graph.predecessors(x) == (a, b)
    assert dep_graph.predecessors(y) == (b, a)


def test_anon_tasks_without_reads_collapse(dep_graph: DepGraph[str]) -> None:
    _, x = dep_graph.with_anon_task(None, 1, return_arg)
    _, y = dep_graph.with_anon_task(None, 2, return_arg)

    assert x == y
    assert dep_graph.node_count == 1


def test_anon_task_does_not_reuse_named_node(dep_graph: DepGraph[str]) -> None:
    (named,) = make_sources(dep_graph, "a")
    _, anon = dep_graph.with_anon_task(None, None, return_arg)

    assert anon != named
    assert dep_graph.predecessors(anon) is dep_graph.predecessors(named)


# --- Read tests ---


def test_duplicate_reads_are_recorded_once(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    dep_graph.with_task("reader", dep_graph, (a, b, a, b, a), read_all)

    assert dep_graph.predecessors(dep_graph.lookup("reader")) == (a, b)


def test_reads_keep_first_access_order(dep_graph: DepGraph[str]) -> None:
    a, b, c = make_sources(dep_graph, "a", "b", "c")

    dep_graph.with_task("reader", dep_graph, (c, a, c, b), read_all)

    assert dep_graph.predecessors(dep_graph.lookup("reader")) == (c, a, b)


def test_top_level_read_is_ignored(dep_graph: DepGraph[str]) -> None:
    (a,) = make_sources(dep_graph, "a")

    dep_graph.read(a)

    assert dep_graph.node_count == 1
    assert dep_graph.task_depth == 0


def test_read_dummy_on_enabled_graph_aborts(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(DummyIndexMisuseError):
        dep_graph.read(DepNodeIndex.dummy())


def test_read_unknown_index_aborts(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(UnknownNodeError):
        dep_graph.read(DepNodeIndex(7))


# --- Interning tests ---


def test_equal_predecessor_lists_share_one_instance(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    dep_graph.with_task("r1", dep_graph, (a, b), read_all)
    dep_graph.with_task("r2", dep_graph, (a, b, a), read_all)

    assert dep_graph.predecessors(dep_graph.lookup("r1")) is dep_graph.predecessors(dep_graph.lookup("r2"))
    assert dep_graph.stats().interned_predecessor_lists == 2


def test_predecessor_lists_differing_in_order_are_distinct(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    dep_graph.with_task("r1", dep_graph, (a, b), read_all)
    dep_graph.with_task("r2", dep_graph, (b, a), read_all)

    first = dep_graph.predecessors(dep_graph.lookup("r1"))
    second = dep_graph.predecessors(dep_graph.lookup("r2"))
    assert first != second
    assert first is not second


# --- Nesting tests ---


def test_reads_are_attributed_to_innermost_task(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    child = dep_graph.with_task("outer", dep_graph, ((a,), (b,)), read_with_nested_task)

    assert dep_graph.predecessors(child) == (b,)
    assert dep_graph.predecessors(dep_graph.lookup("outer")) == (a, child)
    assert dep_graph.task_depth == 0


# --- Ignore tests ---


def test_with_ignore_discards_reads(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    hidden_count = dep_graph.with_task("reader", dep_graph, ((a,), (b,)), read_ignoring)

    assert hidden_count == 1
    assert dep_graph.predecessors(dep_graph.lookup("reader")) == (a,)


def test_with_ignore_creates_no_node(dep_graph: DepGraph[str]) -> None:
    (a,) = make_sources(dep_graph, "a")

    assert dep_graph.with_ignore(lambda: read_all(dep_graph, (a,))) == 1
    assert dep_graph.node_count == 1
    assert dep_graph.task_depth == 0


def test_ignore_context_manager_restores_stack_on_error(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(RuntimeError):
        with dep_graph.ignore():
            assert dep_graph.task_depth == 1
            raise RuntimeError("boom")
    assert dep_graph.task_depth == 0


# --- Low-level push/pop tests ---


def test_push_pop_task(dep_graph: DepGraph[str]) -> None:
    (a,) = make_sources(dep_graph, "a")

    dep_graph.push_task()
    dep_graph.read(a)
    index = dep_graph.pop_task("manual")

    assert dep_graph.lookup("manual") == index
    assert dep_graph.predecessors(index) == (a,)


def test_pop_without_push_aborts(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(TaskStackError):
        dep_graph.pop_task()


def test_unbalanced_task_body_aborts(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(TaskStackError, match="unbalanced"):
        dep_graph.with_anon_task(dep_graph, None, leave_frame_open)

    assert dep_graph.task_depth == 0
    assert dep_graph.node_count == 0


# --- Failure tests ---


def test_failed_task_creates_no_node(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(RuntimeError, match="task failed"):
        dep_graph.with_anon_task(None, None, raise_runtime_error)

    assert dep_graph.node_count == 0
    assert dep_graph.task_depth == 0


# --- Capability checks ---


def test_unsafe_context_is_rejected(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(UnsafeTaskArgumentError, match="context of type 'list'"):
        dep_graph.with_task("x", [1, 2], None, return_arg)
    assert dep_graph.task_depth == 0


def test_unsafe_argument_is_rejected(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(UnsafeTaskArgumentError, match="argument of type 'dict'"):
        dep_graph.with_anon_task(None, {"k": 1}, return_arg)


def test_closure_task_function_is_rejected(dep_graph: DepGraph[str]) -> None:
    leaked = [1]

    def leaky(cx: Any, arg: Any) -> int:
        return leaked[0]

    with pytest.raises(UnsafeTaskArgumentError, match="closes over"):
        dep_graph.with_anon_task(None, None, leaky)


def test_capability_checks_can_be_disabled() -> None:
    graph = DepGraph(enabled=True, check_task_arguments=False)
    result, _ = graph.with_anon_task([1, 2], {"k": 1}, return_arg)
    assert result == {"k": 1}


# --- Disabled graph tests ---


def test_disabled_graph_returns_dummy_and_allocates_nothing(disabled_dep_graph: DepGraph[str]) -> None:
    assert disabled_dep_graph.with_task("a", None, 1, return_arg) == 1
    result, index = disabled_dep_graph.with_anon_task(None, 2, return_arg)
    disabled_dep_graph.read(DepNodeIndex.dummy())
    disabled_dep_graph.push_task()

    assert result == 2
    assert index.is_dummy
    assert disabled_dep_graph.pop_task("b").is_dummy
    assert disabled_dep_graph.node_count == 0
    assert disabled_dep_graph.task_depth == 0
    assert disabled_dep_graph.lookup("a") is None


def test_disabled_graph_allows_name_reuse(disabled_dep_graph: DepGraph[str]) -> None:
    disabled_dep_graph.with_task("a", None, None, return_arg)
    disabled_dep_graph.with_task("a", None, None, return_arg)
    assert disabled_dep_graph.node_count == 0


def test_disabled_graph_rejects_real_index(disabled_dep_graph: DepGraph[str]) -> None:
    with pytest.raises(DummyIndexMisuseError):
        disabled_dep_graph.read(DepNodeIndex(0))


def test_disabled_graph_with_ignore(disabled_dep_graph: DepGraph[str]) -> None:
    assert disabled_dep_graph.with_ignore(lambda: "ok") == "ok"


# --- new_cell tests ---


def test_new_cell_is_bound_to_computing_node(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    cell = dep_graph.new_cell(dep_graph, (a, b), read_all)

    assert not cell.is_locked
    assert isinstance(cell.state, Unlocked)
    assert dep_graph.predecessors(cell.producer) == (a, b)


# --- Query tests ---


def test_dependents(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")
    dep_graph.with_task("r1", dep_graph, (a,), read_all)
    dep_graph.with_task("r2", dep_graph, (b, a), read_all)

    assert dep_graph.dependents(a) == [dep_graph.lookup("r1"), dep_graph.lookup("r2")]
    assert dep_graph.dependents(b) == [dep_graph.lookup("r2")]
    assert dep_graph.dependents(dep_graph.lookup("r2")) == []


def test_node_query_rejects_unknown_index(dep_graph: DepGraph[str]) -> None:
    with pytest.raises(UnknownNodeError):
        dep_graph.node(DepNodeIndex(0))
    with pytest.raises(UnknownNodeError):
        dep_graph.predecessors(DepNodeIndex.dummy())


def test_iter_nodes_len_and_contains(dep_graph: DepGraph[str]) -> None:
    a, b = make_sources(dep_graph, "a", "b")

    assert [index for index, _ in dep_graph.iter_nodes()] == [a, b]
    assert len(dep_graph) == 2
    assert a in dep_graph
    assert DepNodeIndex(2) not in dep_graph
    assert DepNodeIndex.dummy() not in dep_graph
    assert "a" not in dep_graph


def test_repr(dep_graph: DepGraph[str]) -> None:
    make_sources(dep_graph, "a")
    assert repr(dep_graph) == "DepGraph(enabled, nodes=1, depth=0)"
