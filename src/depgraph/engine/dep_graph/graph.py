# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Dependency graph that records which nodes each task read.

This module provides the DepGraph class. A task is started by pushing a frame
onto the graph's task stack; every read performed while the frame is on top is
recorded into it. When the task stops, the frame's predecessor list is interned
and a node is created for the task, or, for anonymous tasks, an existing node
with the same predecessor list is reused.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from depgraph.config.graph_config import DepGraphConfig, WriteReentrancy
from depgraph.engine.dep_graph.cell import TrackedCell, Unlocked, next_task_id
from depgraph.engine.dep_graph.node_index import N, DepNodeData, DepNodeIndex, PredecessorList
from depgraph.engine.dep_graph.safe import DepGraphSafe, ensure_dep_graph_safe, ensure_task_function_safe
from depgraph.engine.dep_graph.task import Task
from depgraph.engine.errors import (
    DummyIndexMisuseError,
    NameCollisionError,
    TaskStackError,
    UnknownNodeError,
)

if TYPE_CHECKING:
    from depgraph.engine.dep_graph.inspection import GraphStats

logger = logging.getLogger(__name__)

C = TypeVar("C")
A = TypeVar("A")
R = TypeVar("R")


@dataclass(slots=True)
class _TaskStackEntry:
    """Reads accumulated by one running task.

    The list keeps first-read order; the set makes duplicate reads cheap to drop.
    """

    predecessors: list[DepNodeIndex] = field(default_factory=list)
    predecessor_set: set[DepNodeIndex] = field(default_factory=set)

    def add(self, index: DepNodeIndex) -> None:
        if index not in self.predecessor_set:
            self.predecessor_set.add(index)
            self.predecessors.append(index)


class DepGraph(Generic[N]):
    """Dependency graph of completed tracked computations.

    Nodes are created when tasks stop and never change afterwards. Two interning
    tables keep the graph compact:

    - **Predecessor lists**: structurally equal lists are stored once and shared
      by every node that has them.
    - **Anonymous nodes**: an anonymous task whose predecessor list matches an
      existing anonymous node reuses that node instead of creating a new one.

    When the graph is disabled every operation is a no-op that returns the dummy
    index, and no node storage is ever allocated.

    Attributes:
        is_fully_enabled: Whether the graph is recording dependencies.
        node_count: Number of nodes created so far.
        task_depth: Number of tasks currently running (nested).

    Examples:
        >>> graph = DepGraph(enabled=True)
        >>> _, source = graph.with_anon_task(None, 1, compute_source)
        >>> graph.with_task("consumer", None, source, consume)
        >>> graph.predecessors(graph.lookup("consumer"))
        (DepNode(0),)
    """

    def __init__(
        self,
        enabled: bool = True,
        *,
        write_reentrancy: WriteReentrancy = WriteReentrancy.FORBID,
        check_task_arguments: bool = True,
    ) -> None:
        """Initialize the dependency graph.

        Args:
            enabled: Whether to record dependencies at all.
            write_reentrancy: Policy for a task re-borrowing a cell it already write-locked.
            check_task_arguments: Whether to check task functions, contexts and arguments
                against the capability marker.
        """
        self._enabled = enabled
        self._write_reentrancy = WriteReentrancy(write_reentrancy)
        self._check_task_arguments = check_task_arguments

        self._nodes: list[DepNodeData[N]] = []
        self._interned: dict[PredecessorList, PredecessorList] = {}
        self._task_stack: list[_TaskStackEntry] = []
        self._anon_nodes: dict[PredecessorList, DepNodeIndex] = {}
        self._named_nodes: dict[N, DepNodeIndex] = {}

        self._tasks_started = 0
        self._anon_reuse_count = 0

    @classmethod
    def from_config(cls, config: DepGraphConfig) -> DepGraph[N]:
        """Create a graph from a DepGraphConfig."""
        return cls(
            enabled=config.enabled,
            write_reentrancy=config.write_reentrancy,
            check_task_arguments=config.check_task_arguments,
        )

    @property
    def is_fully_enabled(self) -> bool:
        """True if we are actually building the full dependency graph."""
        return self._enabled

    @property
    def write_reentrancy(self) -> WriteReentrancy:
        return self._write_reentrancy

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def task_depth(self) -> int:
        return len(self._task_stack)

    @property
    def interned_list_count(self) -> int:
        """Number of distinct predecessor lists stored."""
        return len(self._interned)

    @property
    def anonymous_reuse_count(self) -> int:
        """Anonymous tasks that collapsed onto an existing node."""
        return self._anon_reuse_count

    @property
    def tasks_started(self) -> int:
        """Tasks started on this graph while enabled, ignore frames excluded."""
        return self._tasks_started

    # --- Task start/stop ---

    def push_task(self) -> None:
        """Start a tracked unit of work.

        Low-level primitive: nothing stops the code between `push_task` and
        `pop_task` from reading untracked state. Prefer `with_task`,
        `with_anon_task` or `cell_task`.
        """
        if self._enabled:
            self._tasks_started += 1
            self._push_frame()

    def pop_task(self, name: N | None = None) -> DepNodeIndex:
        """Stop the innermost tracked unit and create or reuse its node.

        Args:
            name: Name for the node. None creates an anonymous node.

        Returns:
            Index of the node representing the finished task, or the dummy index
            when the graph is disabled.

        Raises:
            TaskStackError: If no task is running.
            NameCollisionError: If a node with `name` already exists.
        """
        if not self._enabled:
            return DepNodeIndex.dummy()
        return self._close_frame(len(self._task_stack), name)

    def read(self, index: DepNodeIndex) -> None:
        """Record that the running task read the node at `index`.

        Repeated reads within one task are recorded once. A read with no task
        running is not observed by anything and is ignored.

        Args:
            index: The node that was read.

        Raises:
            DummyIndexMisuseError: If the dummy index is read on an enabled graph, or a
                real index on a disabled graph.
            UnknownNodeError: If `index` was not produced by this graph.
        """
        if not self._enabled:
            if not index.is_dummy:
                raise DummyIndexMisuseError(f"Disabled graph was asked to read {index!r}; expected the dummy index")
            return
        if index.is_dummy:
            raise DummyIndexMisuseError("The dummy index cannot be read while dependency tracking is enabled")
        if not 0 <= index.index < len(self._nodes):
            raise UnknownNodeError(f"{index!r} does not belong to this graph ({len(self._nodes)} nodes)")
        if self._task_stack:
            self._task_stack[-1].add(index)

    # --- Task wrappers ---

    def with_task(self, name: N, cx: C, arg: A, task: Callable[[C, A], R]) -> R:
        """Run `task(cx, arg)` as a named task.

        Dependency tasks receive exactly two pieces of outside state, the context
        `cx` and the argument `arg`, so that nothing tracked can leak into the
        task without being read through the graph. Use `None` or `()` for an
        unused slot and a tuple to pass several values.

        Args:
            name: Unique name of the node this task produces.
            cx: Task context (must be DepGraphSafe).
            arg: Task argument (must be DepGraphSafe).
            task: Module-level function taking `(cx, arg)`.

        Returns:
            The task function's result.

        Raises:
            NameCollisionError: If a node named `name` already exists.
            UnsafeTaskArgumentError: If `task`, `cx` or `arg` fails the capability check.
        """
        if name is None:
            raise ValueError("Named tasks need a name; use with_anon_task for anonymous tasks")
        self._check_task_inputs(task, cx, arg)
        result, _ = self._run_task(name, lambda: task(cx, arg))
        return result

    def with_anon_task(self, cx: C, arg: A, task: Callable[[C, A], R]) -> tuple[R, DepNodeIndex]:
        """Run `task(cx, arg)` as an anonymous task.

        An anonymous node can only be referred to through its index. Anonymous
        tasks that read the same nodes in the same order share one node.

        Returns:
            A tuple of (result, node index).

        Raises:
            UnsafeTaskArgumentError: If `task`, `cx` or `arg` fails the capability check.
        """
        self._check_task_inputs(task, cx, arg)
        return self._run_task(None, lambda: task(cx, arg))

    def cell_task(
        self,
        cx: C,
        arg: A,
        task: Callable[[C, A, Task], R],
        *,
        name: N | None = None,
    ) -> tuple[R, DepNodeIndex]:
        """Run `task(cx, arg, handle)` with a Task handle for cell access.

        When the task function returns, every cell it locked is unlocked and
        bound to the node the task produced.

        Args:
            cx: Task context (must be DepGraphSafe).
            arg: Task argument (must be DepGraphSafe).
            task: Module-level function taking `(cx, arg, task_handle)`.
            name: Optional node name. Anonymous when omitted.

        Returns:
            A tuple of (result, node index).

        Raises:
            LockConflictError: If the task borrows a cell in a conflicting way.
            NameCollisionError: If `name` is given and already exists.
            UnsafeTaskArgumentError: If `task`, `cx` or `arg` fails the capability check.
        """
        self._check_task_inputs(task, cx, arg)
        handle = Task(self, next_task_id(), self._write_reentrancy)
        return self._run_task(name, lambda: task(cx, arg, handle), handle)

    def new_cell(self, cx: C, arg: A, task: Callable[[C, A], R]) -> TrackedCell[R]:
        """Compute a value in an anonymous task and wrap it in an unlocked cell.

        The cell is bound to the node of that task, so the first task to borrow
        it depends on whatever the computation read.
        """
        value, node = self.with_anon_task(cx, arg, task)
        return TrackedCell(value, Unlocked(node))

    def with_ignore(self, op: Callable[[], R]) -> R:
        """Run `op` with dependency recording suspended.

        Reads performed by `op` are discarded instead of being attributed to the
        running task. Use with care: this is an escape hatch for state known not
        to need tracking.
        """
        with self.ignore():
            return op()

    @contextmanager
    def ignore(self) -> Iterator[None]:
        """Context manager form of `with_ignore`."""
        if not self._enabled:
            yield
            return
        depth = self._push_frame()
        try:
            yield
        finally:
            self._abort_frame(depth)

    # --- Queries ---

    def node(self, index: DepNodeIndex) -> DepNodeData[N]:
        """Get the stored record for a node.

        Raises:
            UnknownNodeError: If `index` is the dummy index or out of range.
        """
        if index.is_dummy or not 0 <= index.index < len(self._nodes):
            raise UnknownNodeError(f"{index!r} does not belong to this graph ({len(self._nodes)} nodes)")
        return self._nodes[index.index]

    def predecessors(self, index: DepNodeIndex) -> PredecessorList:
        """The interned predecessor list of a node, in first-read order."""
        return self.node(index).predecessors

    def node_name(self, index: DepNodeIndex) -> N | None:
        """The name of a node, or None if it is anonymous."""
        return self.node(index).name

    def lookup(self, name: N) -> DepNodeIndex | None:
        """Find the named node called `name`, if any."""
        return self._named_nodes.get(name)

    def dependents(self, index: DepNodeIndex) -> list[DepNodeIndex]:
        """Get the nodes that read `index`, in creation order.

        This is the reverse of `predecessors` and is what an invalidation pass
        walks after an input changes. Computed by scanning all nodes.
        """
        self.node(index)
        return [DepNodeIndex(i) for i, data in enumerate(self._nodes) if index in data.predecessors]

    def iter_nodes(self) -> Iterator[tuple[DepNodeIndex, DepNodeData[N]]]:
        """Iterate over (index, record) pairs in creation order."""
        for i, data in enumerate(self._nodes):
            yield DepNodeIndex(i), data

    def stats(self) -> GraphStats:
        """Summary counters for this graph."""
        from depgraph.engine.dep_graph.inspection import GraphStats

        return GraphStats.from_graph(self)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, index: object) -> bool:
        return isinstance(index, DepNodeIndex) and not index.is_dummy and 0 <= index.index < len(self._nodes)

    def __repr__(self) -> str:
        state = "enabled" if self._enabled else "disabled"
        return f"DepGraph({state}, nodes={len(self._nodes)}, depth={len(self._task_stack)})"

    # --- Internals ---

    def _check_task_inputs(self, task: Callable[..., Any], cx: Any, arg: Any) -> None:
        if not self._check_task_arguments:
            return
        ensure_task_function_safe(task)
        ensure_dep_graph_safe(cx, "context")
        ensure_dep_graph_safe(arg, "argument")

    def _run_task(
        self,
        name: N | None,
        body: Callable[[], R],
        handle: Task | None = None,
    ) -> tuple[R, DepNodeIndex]:
        """Run `body` inside a fresh frame and close it into a node.

        If `body` raises, the frame is discarded without creating a node and the
        error propagates. Cells locked by a failed task stay locked to it.
        """
        if not self._enabled:
            try:
                result = body()
            except BaseException:
                if handle is not None:
                    handle._abandon()
                raise
            node = DepNodeIndex.dummy()
        else:
            self._tasks_started += 1
            depth = self._push_frame()
            if handle is not None:
                handle._frame_depth = depth
            try:
                result = body()
                node = self._close_frame(depth, name)
            except BaseException:
                self._abort_frame(depth)
                if handle is not None:
                    handle._abandon()
                raise
        if handle is not None:
            handle._release(node)
        return result, node

    def _push_frame(self) -> int:
        self._task_stack.append(_TaskStackEntry())
        depth = len(self._task_stack)
        logger.debug(f"Started task at depth {depth}")
        return depth

    def _abort_frame(self, depth: int) -> None:
        """Drop the frame at `depth` and anything left above it, recording nothing."""
        del self._task_stack[depth - 1 :]

    def _close_frame(self, depth: int, name: N | None) -> DepNodeIndex:
        """Pop the frame at `depth` and create or reuse the node for it."""
        if len(self._task_stack) != depth or depth == 0:
            raise TaskStackError(
                f"Task stack is unbalanced: expected to stop the task at depth {depth}, "
                f"found depth {len(self._task_stack)}"
            )
        entry = self._task_stack.pop()
        predecessors = self._intern(tuple(entry.predecessors))

        if name is None:
            existing = self._anon_nodes.get(predecessors)
            if existing is not None:
                self._anon_reuse_count += 1
                logger.debug(f"Reused anonymous node {existing!r} for {len(predecessors)} predecessor(s)")
                return existing
        elif name in self._named_nodes:
            logger.error(f"Named node {name!r} was created twice")
            raise NameCollisionError(f"Created named node {name!r} twice (first as {self._named_nodes[name]!r})")

        index = DepNodeIndex(len(self._nodes))
        self._nodes.append(DepNodeData(name=name, predecessors=predecessors))
        if name is None:
            self._anon_nodes[predecessors] = index
        else:
            self._named_nodes[name] = index
        logger.debug(f"Created node {index!r} (name={name!r}) with {len(predecessors)} predecessor(s)")
        return index

    def _intern(self, predecessors: PredecessorList) -> PredecessorList:
        """Return the shared instance of a predecessor list, registering it if new."""
        return self._interned.setdefault(predecessors, predecessors)


DepGraphSafe.register(DepGraph)
