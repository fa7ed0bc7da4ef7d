# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from depgraph.config import DepGraphConfig, WriteReentrancy
from depgraph.engine.dep_graph import (
    AssertDepGraphSafe,
    CellMut,
    CellRef,
    DepGraph,
    DepGraphSafe,
    DepNodeIndex,
    Task,
    TrackedCell,
)
from depgraph.engine.errors import (
    DummyIndexMisuseError,
    LockConflictError,
    NameCollisionError,
    ReleaseInvariantError,
    TaskExpiredError,
    TaskStackError,
    UnknownNodeError,
    UnsafeTaskArgumentError,
)
from depgraph.errors import DepGraphError
from depgraph.logging import LoggingConfig, configure_logging

__version__ = "0.1.0"

__all__ = [
    "AssertDepGraphSafe",
    "CellMut",
    "CellRef",
    "DepGraph",
    "DepGraphConfig",
    "DepGraphError",
    "DepGraphSafe",
    "DepNodeIndex",
    "DummyIndexMisuseError",
    "LockConflictError",
    "LoggingConfig",
    "NameCollisionError",
    "ReleaseInvariantError",
    "Task",
    "TaskExpiredError",
    "TaskStackError",
    "TrackedCell",
    "UnknownNodeError",
    "UnsafeTaskArgumentError",
    "WriteReentrancy",
    "configure_logging",
]
