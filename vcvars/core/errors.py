# SPDX-License-Identifier: MIT
"""Custom exceptions for vcvars.

All vcvars exceptions inherit from VcvarsError, so a build step can catch
every resolution failure with a single except clause and report its
message.
"""

from __future__ import annotations

from pathlib import Path


class VcvarsError(Exception):
    """Base class for all vcvars exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingEnvVarDependencyError(VcvarsError):
    """A required environment variable is not set.

    Attributes:
        variable: The name of the missing variable.
    """

    def __init__(self, variable: str) -> None:
        self.variable = variable
        super().__init__(
            f"env var `{variable}` isn't set, which is a dependency to run vcvars"
        )


class ToolchainFileNotFoundError(VcvarsError):
    """An expected file is missing at a computed path.

    Attributes:
        path: The path that was looked up.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"couldn't find file `{self.path}`")


class UnsupportedArchError(VcvarsError):
    """No vcvarsall.bat argument exists for the host/target pair."""

    def __init__(self, host: str, target: str) -> None:
        self.host = host
        self.target = target
        super().__init__(
            f"unsupported host or target architecture (host={host}, target={target})"
        )


class CouldntRunError(VcvarsError):
    """A subprocess could not be spawned.

    Attributes:
        program: Path of the program that failed to start.
        cause: The underlying OS error.
    """

    def __init__(self, program: Path | str, cause: OSError) -> None:
        self.program = str(program)
        self.cause = cause
        super().__init__(f"couldn't run `{self.program}`: {cause}")


class VcvarsFailedError(VcvarsError):
    """vcvarsall.bat ran but reported an error.

    Attributes:
        output: The script output, lines joined with a literal ``\\n``.
    """

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(f"`vcvarsall.bat` failed: {output}")


class CacheFailedError(VcvarsError):
    """An I/O operation on the cache directory or a cache file failed.

    Attributes:
        path: The cache path involved.
        cause: The underlying error.
    """

    def __init__(self, path: Path | str, cause: Exception) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(
            f"I/O operation regarding cache path `{self.path}` failed: {cause}"
        )


class VarNotFoundError(VcvarsError):
    """The resolved environment has no such variable.

    Attributes:
        variable: The variable name as originally requested.
    """

    def __init__(self, variable: str) -> None:
        self.variable = variable
        super().__init__(f"variable `{variable}` not found in vcvars environment")
