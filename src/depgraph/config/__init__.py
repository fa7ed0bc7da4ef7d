# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from depgraph.config.base import ConfigBase
from depgraph.config.errors import InvalidConfigError, InvalidFileFormatError, InvalidFilePathError
from depgraph.config.graph_config import DepGraphConfig, WriteReentrancy

__all__ = [
    "ConfigBase",
    "DepGraphConfig",
    "InvalidConfigError",
    "InvalidFileFormatError",
    "InvalidFilePathError",
    "WriteReentrancy",
]
