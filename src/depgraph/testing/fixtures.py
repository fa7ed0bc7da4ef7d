# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Pytest fixtures for dependency graph testing."""

from __future__ import annotations

import pytest

from depgraph.config.graph_config import DepGraphConfig, WriteReentrancy
from depgraph.engine.dep_graph.graph import DepGraph
from depgraph.testing.stubs import StubCompilerContext


@pytest.fixture
def dep_graph() -> DepGraph[str]:
    """An enabled graph with the default (strict) locking policy."""
    return DepGraph(enabled=True)


@pytest.fixture
def disabled_dep_graph() -> DepGraph[str]:
    """A graph with dependency tracking turned off."""
    return DepGraph(enabled=False)


@pytest.fixture
def reentrant_dep_graph() -> DepGraph[str]:
    """An enabled graph that lets a task re-borrow cells it write-locked."""
    return DepGraph.from_config(DepGraphConfig(write_reentrancy=WriteReentrancy.ALLOW))


@pytest.fixture
def stub_context() -> StubCompilerContext:
    """A context owning an enabled graph and one freshly created counter cell."""
    cx = StubCompilerContext()
    cx.add_counter()
    return cx
