# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

TRACKING_DISABLED_ENV_VAR_NAME = "DEPGRAPH_TRACKING_DISABLED"

VALID_CONFIG_FILE_EXTENSIONS = {".yaml", ".yml"}
