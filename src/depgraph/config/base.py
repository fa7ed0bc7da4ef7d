# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ConfigBase(BaseModel):
    """Base class for all depgraph configuration models.

    Config objects are immutable once validated and reject unknown fields, so a
    typo in a YAML file surfaces as a validation error instead of being ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)
