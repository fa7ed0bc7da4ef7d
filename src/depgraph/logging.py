# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field
from rich.logging import RichHandler

from depgraph.config.base import ConfigBase

ROOT_LOGGER_NAME = "depgraph"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(ConfigBase):
    """Logging configuration for the `depgraph` logger hierarchy.

    Attributes:
        level (LogLevel): Level applied to the `depgraph` logger. Defaults to "WARNING".
        use_rich (bool): Render records with rich's handler instead of a plain stream handler.
            Defaults to True.
        fmt (str): Format string for the plain stream handler. Ignored when `use_rich` is True.
    """

    level: LogLevel = "WARNING"
    use_rich: bool = True
    fmt: str = Field(default="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    @classmethod
    def default(cls) -> LoggingConfig:
        return cls()

    @classmethod
    def debug(cls) -> LoggingConfig:
        """Verbose config that logs every task start/stop and node allocation."""
        return cls(level="DEBUG")


def configure_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach a single handler to the `depgraph` logger.

    Calling this more than once replaces the handler installed by the previous call
    instead of stacking duplicates.

    Args:
        config: Logging configuration. Uses `LoggingConfig.default()` when omitted.

    Returns:
        The configured `depgraph` logger.
    """
    config = config or LoggingConfig.default()
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in list(logger.handlers):
        if getattr(handler, "_depgraph_handler", False):
            logger.removeHandler(handler)

    if config.use_rich:
        handler: logging.Handler = RichHandler(show_path=False, rich_tracebacks=True)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.fmt))
    handler._depgraph_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(config.level)
    return logger
