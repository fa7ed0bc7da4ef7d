# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Tracked cells and their lock-state machine.

A TrackedCell holds a value whose every access must go through a Task. The
cell's lock state records who may touch it right now:

- Unlocked(producer): nobody holds it; `producer` is the node of the task that
  last released it, so the next borrower depends on that node.
- ReadLocked(holder): one task holds shared access.
- WriteLocked(holder): one task holds exclusive access.

The states are not mutual exclusion (execution is single-threaded). They exist
so that an access pattern that would leave an edge out of the graph fails
immediately instead of silently producing an unsound graph.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

from depgraph.engine.dep_graph.node_index import DepNodeIndex
from depgraph.engine.dep_graph.safe import DepGraphSafe
from depgraph.engine.errors import ReleaseInvariantError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Shared by every graph so that lock holders never compare equal across graphs.
_task_counter = itertools.count(1)


@dataclass(frozen=True, slots=True, order=True)
class TaskId:
    """Identity of one task invocation, used as the lock holder of a cell."""

    value: int

    def __repr__(self) -> str:
        return f"Task#{self.value}"


def next_task_id() -> TaskId:
    """Allocate a fresh, monotonically increasing task identity."""
    return TaskId(next(_task_counter))


@dataclass(frozen=True, slots=True)
class Unlocked:
    producer: DepNodeIndex


@dataclass(frozen=True, slots=True)
class ReadLocked:
    holder: TaskId


@dataclass(frozen=True, slots=True)
class WriteLocked:
    holder: TaskId


LockState: TypeAlias = Unlocked | ReadLocked | WriteLocked


class TrackedCell(Generic[T]):
    """Mutable state whose reads and writes are mediated by a Task.

    Cells are created either by `Task.cell` (write-locked to the creating task
    from birth) or by `DepGraph.new_cell` (unlocked and bound to the node that
    computed the initial value). A cell may be referenced from any number of
    places, but at most one task holds its lock at a time.

    There is deliberately no public accessor for the value: borrow it through
    `Task.borrow` or `Task.borrow_mut`.
    """

    __slots__ = ("_state", "_value")

    def __init__(self, value: T, state: LockState) -> None:
        self._value = value
        self._state: LockState = state

    @property
    def state(self) -> LockState:
        """The current lock state."""
        return self._state

    @property
    def is_locked(self) -> bool:
        return not isinstance(self._state, Unlocked)

    @property
    def producer(self) -> DepNodeIndex | None:
        """Node that last released this cell, or None while it is locked."""
        if isinstance(self._state, Unlocked):
            return self._state.producer
        return None

    def _release(self, holder: TaskId, produced: DepNodeIndex) -> None:
        """Unlock the cell on behalf of `holder`, stamping it with `produced`.

        Raises:
            ReleaseInvariantError: If the cell is not currently held by `holder`.
        """
        state = self._state
        if isinstance(state, Unlocked):
            logger.error(f"{holder!r} tried to release a cell that is already unlocked ({state!r})")
            raise ReleaseInvariantError(f"{holder!r} released a cell that was already unlocked")
        if state.holder != holder:
            logger.error(f"{holder!r} tried to release a cell held by {state.holder!r}")
            raise ReleaseInvariantError(f"{holder!r} released a cell held by {state.holder!r}")
        self._state = Unlocked(produced)

    def __repr__(self) -> str:
        return f"TrackedCell({self._state!r})"


DepGraphSafe.register(TrackedCell)
