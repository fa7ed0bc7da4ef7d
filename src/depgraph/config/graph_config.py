# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from depgraph.config.base import ConfigBase
from depgraph.config.errors import InvalidConfigError
from depgraph.config.utils.constants import TRACKING_DISABLED_ENV_VAR_NAME
from depgraph.config.utils.io_helpers import load_config_file, save_config_file

logger = logging.getLogger(__name__)


class WriteReentrancy(str, Enum):
    """Policy for a task re-acquiring a write lock it already holds.

    Attributes:
        FORBID: Any second lock request against a write-locked cell is a conflict,
            even when it comes from the holding task.
        ALLOW: The holding task may borrow the cell again (mutably or shared)
            without recording a new edge.
    """

    FORBID = "forbid"
    ALLOW = "allow"


class DepGraphConfig(ConfigBase):
    """Configuration for a dependency graph.

    Attributes:
        enabled (bool): Whether dependency tracking is on. When False every graph
            operation is a no-op that returns the dummy node index. Defaults to True.
        write_reentrancy (WriteReentrancy): Policy for a task re-borrowing a cell it has
            already write-locked. Defaults to WriteReentrancy.FORBID.
        check_task_arguments (bool): Whether task context and argument values are checked
            against the capability marker when a task starts. Defaults to True.

    Examples:
        >>> DepGraphConfig(enabled=False)
        >>> DepGraphConfig.from_yaml(Path("depgraph.yaml"))
    """

    enabled: bool = True
    write_reentrancy: WriteReentrancy = WriteReentrancy.FORBID
    check_task_arguments: bool = True

    @classmethod
    def default(cls) -> DepGraphConfig:
        """Build the default config, honouring the tracking-disabled environment variable."""
        disabled = os.getenv(TRACKING_DISABLED_ENV_VAR_NAME, "false").lower() == "true"
        if disabled:
            logger.info(f"Dependency tracking disabled via {TRACKING_DISABLED_ENV_VAR_NAME!r}")
        return cls(enabled=not disabled)

    @classmethod
    def from_yaml(cls, file_path: Path) -> DepGraphConfig:
        """Load a config from a YAML file.

        Args:
            file_path: Path to a YAML file holding the config fields at the top level.

        Returns:
            The validated config.

        Raises:
            InvalidFilePathError: If the file does not exist.
            InvalidFileFormatError: If the file is not valid YAML.
            InvalidConfigError: If the file is empty or holds invalid values.
        """
        content = load_config_file(file_path)
        try:
            return cls.model_validate(content)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid dependency graph config in {file_path}: {e}") from e

    def to_yaml(self, file_path: Path) -> None:
        """Write this config to a YAML file."""
        save_config_file(file_path, self.model_dump(mode="json"))
