# SPDX-FileCopyrightText: Copyright (c) 2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Lazy imports facade for heavy third-party dependencies.

pandas is only needed by the inspection helpers, so it is imported on first
access instead of when depgraph itself is imported.

Usage:
    from depgraph import lazy_imports

    df = lazy_imports.pd.DataFrame(...)
"""


def __getattr__(name: str) -> object:
    """Lazily import heavy third-party dependencies when accessed.

    Supported imports:
        - pd: pandas module
    """
    if name == "pd":
        import pandas as pd

        return pd

    raise AttributeError(f"module 'depgraph.lazy_imports' has no attribute {name!r}")


# For type checking
def __dir__() -> list[str]:
    """Return list of available lazy imports."""
    return ["pd"]
