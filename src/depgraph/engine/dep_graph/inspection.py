# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Read-only views of a dependency graph for debugging.

None of these views can be loaded back into a graph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.console import Console, Group
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from depgraph import lazy_imports

if TYPE_CHECKING:
    import pandas as pd

    from depgraph.engine.dep_graph.graph import DepGraph

_MAX_PREDECESSORS_DISPLAYED = 8


class GraphStats(BaseModel):
    enabled: bool
    node_count: int = 0
    named_node_count: int = 0
    anonymous_node_count: int = 0
    edge_count: int = 0
    interned_predecessor_lists: int = 0
    anonymous_reuse_count: int = 0  # Anonymous tasks that collapsed onto an existing node
    tasks_started: int = 0

    @classmethod
    def from_graph(cls, graph: DepGraph[Any]) -> GraphStats:
        named = sum(1 for _, data in graph.iter_nodes() if not data.is_anonymous)
        return cls(
            enabled=graph.is_fully_enabled,
            node_count=graph.node_count,
            named_node_count=named,
            anonymous_node_count=graph.node_count - named,
            edge_count=sum(len(data.predecessors) for _, data in graph.iter_nodes()),
            interned_predecessor_lists=graph.interned_list_count,
            anonymous_reuse_count=graph.anonymous_reuse_count,
            tasks_started=graph.tasks_started,
        )

    @property
    def summary(self) -> dict:
        return self.model_dump()


def _node_label(index: int, name: Any) -> str:
    return f"#{index}" if name is None else f"#{index} {name}"


def to_mermaid(graph: DepGraph[Any]) -> str:
    """Mermaid flowchart of the graph, with edges pointing from predecessor to reader."""
    lines = ["graph TD"]
    for index, data in graph.iter_nodes():
        label = _node_label(index.index, data.name).replace('"', "'")
        lines.append(f'    n{index.index}["{label}"]')
    for index, data in graph.iter_nodes():
        for pred in data.predecessors:
            lines.append(f"    n{pred.index} --> n{index.index}")
    return "\n".join(lines)


def nodes_to_dataframe(graph: DepGraph[Any]) -> pd.DataFrame:
    """One row per node: index, name, whether anonymous, and its predecessor indices."""
    records = [
        {
            "index": index.index,
            "name": data.name,
            "anonymous": data.is_anonymous,
            "predecessors": [pred.index for pred in data.predecessors],
            "num_predecessors": len(data.predecessors),
        }
        for index, data in graph.iter_nodes()
    ]
    return lazy_imports.pd.DataFrame(records, columns=["index", "name", "anonymous", "predecessors", "num_predecessors"])


def display_nodes_table(graph: DepGraph[Any], console: Console | None = None, title: str | None = None) -> None:
    """Print the graph's nodes as a rich table."""
    console = console or Console()
    table = Table(expand=True)
    table.add_column("Index", justify="right")
    table.add_column("Name")
    table.add_column("Predecessors")

    for index, data in graph.iter_nodes():
        preds = [str(pred.index) for pred in data.predecessors]
        if len(preds) > _MAX_PREDECESSORS_DISPLAYED:
            hidden = len(preds) - _MAX_PREDECESSORS_DISPLAYED
            preds = preds[:_MAX_PREDECESSORS_DISPLAYED] + [f"... (+{hidden})"]
        name = Text("(anonymous)", style="dim") if data.is_anonymous else Text(str(data.name))
        table.add_row(str(index.index), name, ", ".join(preds))

    group_args: list = [Rule(title=title or "Dependency Graph"), table]
    if graph.node_count == 0:
        reason = "tracking is disabled" if not graph.is_fully_enabled else "no task has finished yet"
        group_args.insert(1, Text(f"No nodes: {reason}", style="dim", justify="center"))
    console.print(Group(*group_args))
