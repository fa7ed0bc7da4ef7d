# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Task handles and the cell views they hand out.

A Task is created by `DepGraph.cell_task` and passed to the task function. It
is only valid while that function runs: when the function returns, the task
releases every cell it locked, stamping each with the node the task produced,
and from then on the task and every view it returned raise TaskExpiredError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from depgraph.config.graph_config import WriteReentrancy
from depgraph.engine.dep_graph.cell import ReadLocked, TaskId, TrackedCell, Unlocked, WriteLocked
from depgraph.engine.dep_graph.node_index import DepNodeIndex
from depgraph.engine.errors import LockConflictError, TaskExpiredError, TaskStackError

if TYPE_CHECKING:
    from depgraph.engine.dep_graph.graph import DepGraph

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CellRef(Generic[T]):
    """Shared view of a cell's value, valid until the borrowing task ends."""

    __slots__ = ("_cell", "_task")

    def __init__(self, cell: TrackedCell[T], task: Task) -> None:
        self._cell = cell
        self._task = task

    @property
    def cell(self) -> TrackedCell[T]:
        return self._cell

    @property
    def value(self) -> T:
        self._task._ensure_active()
        return self._cell._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._cell!r}, task={self._task.task_id!r})"


class CellMut(CellRef[T]):
    """Exclusive view of a cell's value, valid until the borrowing task ends.

    Assign to `value` to replace the stored value, or mutate it in place.
    """

    __slots__ = ()

    @property
    def value(self) -> T:
        self._task._ensure_active()
        return self._cell._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._task._ensure_active()
        self._cell._value = new_value

    def update(self, fn: Callable[[T], T]) -> T:
        """Replace the value with `fn(value)` and return the new value."""
        self.value = fn(self.value)
        return self.value


class Task:
    """Handle for one running task, mediating all of its cell access.

    Every borrow of an unlocked cell records a read of the node that last
    produced the cell's value. The cells the task locks are kept on an explicit
    list so they can be released when the task ends.

    Attributes:
        task_id: Fresh identity of this invocation, used as the lock holder.
        is_active: Whether the task function is still running.
    """

    def __init__(
        self,
        graph: DepGraph[Any],
        task_id: TaskId,
        write_reentrancy: WriteReentrancy = WriteReentrancy.FORBID,
    ) -> None:
        self._graph = graph
        self._task_id = task_id
        self._write_reentrancy = write_reentrancy
        self._locked: list[TrackedCell[Any]] = []
        self._active = True
        # Depth of this task's frame on an enabled graph, set when the frame is pushed.
        self._frame_depth: int | None = None

    @property
    def task_id(self) -> TaskId:
        return self._task_id

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def locked_cells(self) -> list[TrackedCell[Any]]:
        """Cells currently locked by this task, in locking order."""
        return self._locked.copy()

    def cell(self, value: T) -> tuple[TrackedCell[T], CellMut[T]]:
        """Create a new cell, write-locked to this task.

        No read is recorded: nothing has produced the value yet. When the task
        ends the cell is unlocked and bound to the node this task produced.

        Args:
            value: Initial value of the cell.

        Returns:
            The persistent cell handle and a mutable view valid for this task.
        """
        self._ensure_current()
        cell = TrackedCell(value, WriteLocked(self._task_id))
        self._locked.append(cell)
        return cell, CellMut(cell, self)

    def borrow_mut(self, cell: TrackedCell[T]) -> CellMut[T]:
        """Acquire exclusive access to `cell` for the rest of this task.

        Args:
            cell: The cell to write.

        Returns:
            A mutable view of the cell's value.

        Raises:
            LockConflictError: If the cell is already locked, including by this task
                unless the graph allows re-entrant writes.
        """
        self._ensure_current()
        state = cell._state
        if isinstance(state, Unlocked):
            self._graph.read(state.producer)
            cell._state = WriteLocked(self._task_id)
            self._locked.append(cell)
        elif not self._holds_write_lock(state):
            self._conflict("write", cell)
        return CellMut(cell, self)

    def borrow(self, cell: TrackedCell[T]) -> CellRef[T]:
        """Acquire shared access to `cell` for the rest of this task.

        Borrowing a cell this task already read-locked is allowed and records no
        new edge.

        Args:
            cell: The cell to read.

        Returns:
            A read-only view of the cell's value.

        Raises:
            LockConflictError: If the cell is read-locked by another task or
                write-locked by any task (the holder itself excepted when the
                graph allows re-entrant writes).
        """
        self._ensure_current()
        state = cell._state
        if isinstance(state, Unlocked):
            self._graph.read(state.producer)
            cell._state = ReadLocked(self._task_id)
            self._locked.append(cell)
        elif isinstance(state, ReadLocked) and state.holder == self._task_id:
            pass
        elif not self._holds_write_lock(state):
            self._conflict("read", cell)
        return CellRef(cell, self)

    def _holds_write_lock(self, state: ReadLocked | WriteLocked) -> bool:
        return (
            self._write_reentrancy == WriteReentrancy.ALLOW
            and isinstance(state, WriteLocked)
            and state.holder == self._task_id
        )

    def _conflict(self, access: str, cell: TrackedCell[Any]) -> None:
        state = cell._state
        holder = "this task" if state.holder == self._task_id else repr(state.holder)
        kind = "read-locked" if isinstance(state, ReadLocked) else "write-locked"
        logger.error(f"{self._task_id!r} cannot {access} a cell {kind} by {holder}")
        raise LockConflictError(f"Cannot {access} -- cell is {kind} by {holder} ({self._task_id!r} requested it)")

    def _ensure_active(self) -> None:
        if not self._active:
            raise TaskExpiredError(f"{self._task_id!r} has ended; its handle and cell views can no longer be used")

    def _ensure_current(self) -> None:
        """Require that this task is running and is the innermost task of its graph.

        Raises:
            TaskExpiredError: If the task has ended.
            TaskStackError: If the handle is used from inside a nested task, whose frame
                would otherwise receive this task's reads.
        """
        self._ensure_active()
        if self._frame_depth is not None and self._graph.task_depth != self._frame_depth:
            logger.error(
                f"{self._task_id!r} was used at task depth {self._graph.task_depth}, "
                f"but its own frame is at depth {self._frame_depth}"
            )
            raise TaskStackError(
                f"{self._task_id!r} can only borrow or create cells from its own task body, "
                f"not from a task nested inside it (depth {self._graph.task_depth} != {self._frame_depth})"
            )

    def _release(self, produced: DepNodeIndex) -> None:
        """Unlock every cell this task locked, stamping each with `produced`."""
        self._active = False
        for cell in self._locked:
            cell._release(self._task_id, produced)
        logger.debug(f"{self._task_id!r} released {len(self._locked)} cell(s) as {produced!r}")
        self._locked.clear()

    def _abandon(self) -> None:
        """End a task whose function raised, leaving its cells locked to it."""
        self._active = False
        if self._locked:
            logger.error(
                f"{self._task_id!r} failed while holding {len(self._locked)} cell(s); "
                "they stay locked and any later access to them will fail"
            )

    def __repr__(self) -> str:
        status = "active" if self._active else "ended"
        return f"Task({self._task_id!r}, {status}, locked={len(self._locked)})"
