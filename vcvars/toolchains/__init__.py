# SPDX-License-Identifier: MIT
"""Toolchain discovery (MSVC)."""

from vcvars.toolchains.msvc import (
    ArchSelector,
    ToolchainLocation,
    find_installation,
    run_vcvarsall,
)

__all__ = [
    "ArchSelector",
    "ToolchainLocation",
    "find_installation",
    "run_vcvarsall",
]
