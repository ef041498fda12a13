# SPDX-License-Identifier: MIT
"""
vcvars: MSVC environment variables for Python build steps.

Runs Microsoft's vcvarsall.bat once, captures the environment it sets up
(INCLUDE, LIB, LIBPATH, VisualStudioVersion, ...) and caches individual
values on disk so later build steps don't have to run it again.
"""

from __future__ import annotations

from vcvars.core.cache import CacheStore, FileCacheStore, VarCache
from vcvars.core.envdump import SEPARATOR, parse_environment_dump
from vcvars.core.errors import (
    CacheFailedError,
    CouldntRunError,
    MissingEnvVarDependencyError,
    ToolchainFileNotFoundError,
    UnsupportedArchError,
    VarNotFoundError,
    VcvarsError,
    VcvarsFailedError,
)
from vcvars.core.resolver import ResolverState, Vcvars
from vcvars.toolchains.msvc import ArchSelector
from vcvars.util.paths import safe_filename
from vcvars.util.shell import cmd_escape

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Resolver
    "Vcvars",
    "ResolverState",
    # Disk cache
    "CacheStore",
    "FileCacheStore",
    "VarCache",
    # Helpers
    "ArchSelector",
    "SEPARATOR",
    "parse_environment_dump",
    "cmd_escape",
    "safe_filename",
    # Errors
    "VcvarsError",
    "MissingEnvVarDependencyError",
    "ToolchainFileNotFoundError",
    "UnsupportedArchError",
    "CouldntRunError",
    "VcvarsFailedError",
    "CacheFailedError",
    "VarNotFoundError",
]
