# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from depgraph.errors import DepGraphError


class InvalidConfigError(DepGraphError):
    """Exception for invalid configuration values."""


class InvalidFilePathError(DepGraphError):
    """Exception for configuration file paths that do not exist."""


class InvalidFileFormatError(DepGraphError):
    """Exception for configuration files that cannot be parsed."""
