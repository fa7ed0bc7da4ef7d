# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Errors raised by the dependency graph engine.

Every error here signals a programming mistake that would make the dependency
graph unsound if execution continued. None of them is meant to be caught and
retried.
"""

from depgraph.errors import DepGraphError


class DepGraphEngineError(DepGraphError):
    """Base exception for dependency graph engine errors."""


class NameCollisionError(DepGraphEngineError):
    """A named node was created under a name the graph already holds."""


class LockConflictError(DepGraphEngineError):
    """A cell was borrowed in a way incompatible with its current lock state."""


class ReleaseInvariantError(DepGraphEngineError):
    """A task released a cell it no longer holds. Indicates a bug in depgraph itself."""


class DummyIndexMisuseError(DepGraphEngineError):
    """The dummy node index was read on an enabled graph, or a real index on a disabled one."""


class TaskStackError(DepGraphEngineError):
    """A task was stopped out of nesting order, or a task handle was used from a nested task."""


class TaskExpiredError(DepGraphEngineError):
    """A task handle or cell view was used after its task ended."""


class UnsafeTaskArgumentError(DepGraphEngineError):
    """A task context or argument does not satisfy the capability marker."""


class UnknownNodeError(DepGraphEngineError):
    """A node index was queried that this graph never produced."""
