# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from depgraph.config.errors import InvalidConfigError, InvalidFileFormatError, InvalidFilePathError
from depgraph.config.utils.constants import VALID_CONFIG_FILE_EXTENSIONS

logger = logging.getLogger(__name__)


def load_config_file(file_path: Path) -> dict:
    """Load a YAML configuration file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        InvalidFilePathError: If file doesn't exist or has an unsupported extension
        InvalidFileFormatError: If YAML is malformed or is not a mapping
        InvalidConfigError: If file is empty
    """
    if not file_path.exists():
        raise InvalidFilePathError(f"Configuration file not found: {file_path}")
    if file_path.suffix.lower() not in VALID_CONFIG_FILE_EXTENSIONS:
        raise InvalidFilePathError(
            f"Unsupported configuration file extension {file_path.suffix!r}, "
            f"expected one of {sorted(VALID_CONFIG_FILE_EXTENSIONS)}"
        )

    try:
        with open(file_path) as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidFileFormatError(f"Invalid YAML format in {file_path}: {e}")

    if content is None:
        raise InvalidConfigError(f"Configuration file is empty: {file_path}")
    if not isinstance(content, dict):
        raise InvalidFileFormatError(f"Configuration file must contain a mapping: {file_path}")

    logger.debug(f"Loaded configuration from {str(file_path)!r}")
    return content


def save_config_file(file_path: Path, config: dict) -> None:
    """Save configuration to a YAML file.

    Args:
        file_path: Path where to save the file
        config: Configuration dictionary to save

    Raises:
        IOError: If file cannot be written
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w") as f:
        yaml.safe_dump(
            config,
            f,
            default_flow_style=False,
            sort_keys=False,
            indent=2,
            allow_unicode=True,
        )
