# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Capability marker for values that may be threaded into a task.

A task body only sees two pieces of outside state: its context `cx` and its
argument `arg`. Both must be values that cannot hand the task tracked state
without going through a cell or the graph, otherwise the task could read it
without an edge being recorded.

A value is safe when:

- it is an instance of a class registered with, or derived from, `DepGraphSafe`
  (unit values, scalars, node indices, cells and graphs are registered here);
- it is a tuple whose components are all safe (the empty tuple included);
- it is wrapped in `AssertDepGraphSafe`, the explicit opt-out. Every use of the
  wrapper should carry a comment saying why the wrapped value cannot leak.

Mutable containers such as lists and dicts are not safe on their own. Give the
owning context class the `DepGraphSafe` base instead, or wrap the value.
"""

from __future__ import annotations

import functools
from abc import ABC
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Generic, TypeVar

from depgraph.engine.dep_graph.node_index import DepNodeIndex
from depgraph.engine.errors import UnsafeTaskArgumentError

T = TypeVar("T")


class DepGraphSafe(ABC):  # noqa: B024
    """Marker base for values that are safe to pass into a task.

    Subclass it for context objects whose tracked state is only reachable through
    cells, or register third-party types with `DepGraphSafe.register(cls)`.
    """

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class AssertDepGraphSafe(Generic[T]):
    """Asserts that an arbitrary value is safe to pass into a task.

    Example:
        >>> # Read-only lookup table, never mutated after start-up.
        >>> graph.with_anon_task(AssertDepGraphSafe(SYMBOLS), key, lookup)
    """

    value: T


for _safe_type in (type(None), bool, int, float, complex, str, bytes, DepNodeIndex):
    DepGraphSafe.register(_safe_type)


def is_dep_graph_safe(value: Any) -> bool:
    """Check a value against the capability marker.

    Args:
        value: The candidate task context or argument.

    Returns:
        True if the value, or every component of a tuple value, is safe.
    """
    if isinstance(value, AssertDepGraphSafe):
        return True
    if isinstance(value, tuple):
        return all(is_dep_graph_safe(item) for item in value)
    return isinstance(value, DepGraphSafe)


def ensure_dep_graph_safe(value: Any, role: str) -> None:
    """Raise if a value fails the capability check.

    Args:
        value: The candidate task context or argument.
        role: What the value is used as ("context" or "argument"), for the error message.

    Raises:
        UnsafeTaskArgumentError: If the value is not safe.
    """
    if not is_dep_graph_safe(value):
        raise UnsafeTaskArgumentError(
            f"Task {role} of type {type(value).__name__!r} is not DepGraphSafe. Subclass DepGraphSafe, "
            "register the type with DepGraphSafe.register(), or wrap the value in AssertDepGraphSafe."
        )


def ensure_task_function_safe(fn: Any) -> None:
    """Reject task functions that carry hidden state.

    A task function should be a plain module-level function (or a static method),
    so that `cx` and `arg` are the only state it sees. Closures over local
    variables and methods bound to unsafe instances would let tracked state in
    through the back door.

    Args:
        fn: The task function.

    Raises:
        UnsafeTaskArgumentError: If `fn` closes over variables, is bound to an unsafe instance,
            or is a partial whose pre-bound arguments are not safe.
    """
    if isinstance(fn, functools.partial):
        ensure_task_function_safe(fn.func)
        for value in (*fn.args, *fn.keywords.values()):
            if not is_dep_graph_safe(value):
                raise UnsafeTaskArgumentError(
                    f"Task function partial({getattr(fn.func, '__qualname__', fn.func)!r}, ...) pre-binds a value of "
                    f"type {type(value).__name__!r}, which is not DepGraphSafe."
                )
        return
    closure = getattr(fn, "__closure__", None)
    if closure:
        free_vars = ", ".join(fn.__code__.co_freevars)
        raise UnsafeTaskArgumentError(
            f"Task function {fn.__qualname__!r} closes over ({free_vars}). Pass that state through the "
            "task context or argument instead."
        )
    bound_to = getattr(fn, "__self__", None)
    if bound_to is None or isinstance(bound_to, (type, ModuleType)):
        return
    if not is_dep_graph_safe(bound_to):
        raise UnsafeTaskArgumentError(
            f"Task function {getattr(fn, '__qualname__', fn)!r} is bound to an instance of "
            f"{type(bound_to).__name__!r}, which is not DepGraphSafe."
        )
