# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Node identification types for the dependency graph.

- DepNodeIndex: dense integer handle into a graph's node storage
- DepNodeData: the immutable record stored for each node
- PredecessorList: the interned, ordered tuple of nodes a node read

Frozen dataclasses with slots=True keep per-node overhead low, since every
tracked computation in a run produces (or reuses) one node.
"""

from __future__ import annotations

import sys
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

_DUMMY_INDEX = sys.maxsize

DepNodeName: TypeAlias = Hashable
"""Any hashable value can name a node (a string, a tuple key, an enum member...)."""

N = TypeVar("N", bound=Hashable)


@dataclass(frozen=True, slots=True, order=True)
class DepNodeIndex:
    """Handle to a node in a dependency graph.

    Indices are allocated densely from 0 in creation order. The reserved dummy
    index stands for "tracking disabled" and is what a disabled graph hands out
    for every task.

    Attributes:
        index: Position of the node in the graph's node storage.
    """

    index: int

    @classmethod
    def dummy(cls) -> DepNodeIndex:
        """The reserved index returned when tracking is disabled."""
        return cls(_DUMMY_INDEX)

    @property
    def is_dummy(self) -> bool:
        return self.index == _DUMMY_INDEX

    def __repr__(self) -> str:
        if self.is_dummy:
            return "DepNode(dummy)"
        return f"DepNode({self.index})"


PredecessorList: TypeAlias = tuple[DepNodeIndex, ...]
"""Ordered, duplicate-free predecessors of a node, in first-read order."""


@dataclass(frozen=True, slots=True)
class DepNodeData(Generic[N]):
    """Immutable record of one completed tracked computation.

    Attributes:
        name: Stable name for named nodes, None for anonymous ones.
        predecessors: Interned predecessor list. Nodes with equal lists share the
            same tuple instance.
    """

    name: N | None
    predecessors: PredecessorList

    @property
    def is_anonymous(self) -> bool:
        return self.name is None
