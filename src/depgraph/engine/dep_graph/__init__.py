# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Dependency graph and tracked cells for incremental recomputation.

This package records, for every tracked unit of work (a task), exactly which
previously computed nodes it read, and builds the resulting dependency graph.
Mutable tracked state lives in cells whose access is mediated by a task, so an
access can never bypass the graph.

Example:
    >>> from depgraph.engine.dep_graph import DepGraph
    >>>
    >>> def make_counter(cx, arg, task):
    ...     cell, view = task.cell(0)
    ...     return cell
    >>>
    >>> def increment(cell, amount, task):
    ...     task.borrow_mut(cell).update(lambda v: v + amount)
    >>>
    >>> graph = DepGraph(enabled=True)
    >>> counter, created = graph.cell_task(None, None, make_counter)
    >>> _, incremented = graph.cell_task(counter, 5, increment)
    >>> graph.predecessors(incremented) == (created,)
    True
"""

from depgraph.engine.dep_graph.cell import LockState, ReadLocked, TaskId, TrackedCell, Unlocked, WriteLocked
from depgraph.engine.dep_graph.graph import DepGraph
from depgraph.engine.dep_graph.inspection import GraphStats, display_nodes_table, nodes_to_dataframe, to_mermaid
from depgraph.engine.dep_graph.node_index import DepNodeData, DepNodeIndex, DepNodeName, PredecessorList
from depgraph.engine.dep_graph.safe import AssertDepGraphSafe, DepGraphSafe, is_dep_graph_safe
from depgraph.engine.dep_graph.task import CellMut, CellRef, Task

__all__ = [
    # Node identification
    "DepNodeIndex",
    "DepNodeData",
    "DepNodeName",
    "PredecessorList",
    # Graph
    "DepGraph",
    # Tasks and cells
    "Task",
    "TaskId",
    "CellRef",
    "CellMut",
    "TrackedCell",
    "LockState",
    "Unlocked",
    "ReadLocked",
    "WriteLocked",
    # Capability marker
    "DepGraphSafe",
    "AssertDepGraphSafe",
    "is_dep_graph_safe",
    # Inspection
    "GraphStats",
    "to_mermaid",
    "nodes_to_dataframe",
    "display_nodes_table",
]
