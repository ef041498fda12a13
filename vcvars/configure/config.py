# SPDX-License-Identifier: MIT
"""Configuration inputs for vcvars.

vcvars does not read config files. Its inputs are environment variables
that the surrounding build sets, with explicit arguments taking
precedence over them.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from vcvars.core.errors import MissingEnvVarDependencyError

PROGRAM_FILES_X86_VAR = "ProgramFiles(x86)"
WINDIR_VAR = "WINDIR"
TARGET_ARCH_VAR = "VCVARS_TARGET_ARCH"
OUT_DIR_VAR = "VCVARS_OUT_DIR"


def lookup_env(environ: Mapping[str, str], name: str) -> str | None:
    """Look up an environment variable, ignoring case.

    Windows treats variable names case-insensitively; an injected mapping
    (or os.environ on other platforms) does not, so fall back to a scan.
    """
    value = environ.get(name)
    if value is not None:
        return value
    upper = name.upper()
    for key, candidate in environ.items():
        if key.upper() == upper:
            return candidate
    return None


@dataclass
class VcvarsConfig:
    """Settings for one resolver.

    Attributes:
        target_arch: Explicit target architecture; VCVARS_TARGET_ARCH otherwise.
        out_dir: Explicit base output directory for the disk cache;
            VCVARS_OUT_DIR otherwise.
        vswhere_args: Arguments passed to vswhere.exe instead of ``-latest``.
        prefer_x86_host_tools: Use x86-hosted vcvarsall.bat tokens on an
            x86_64 host.
        environ: Environment the inputs are read from.
    """

    target_arch: str | None = None
    out_dir: Path | None = None
    vswhere_args: tuple[str, ...] | None = None
    prefer_x86_host_tools: bool = False
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @classmethod
    def create(
        cls,
        *,
        target_arch: str | None = None,
        out_dir: Path | str | None = None,
        vswhere_args: Sequence[str] | None = None,
        prefer_x86_host_tools: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> VcvarsConfig:
        """Build a config from explicit arguments.

        Unset inputs are looked up in ``environ`` when they are required,
        not here, so a later fix to the environment is seen on retry.
        """
        return cls(
            target_arch=target_arch,
            out_dir=Path(out_dir) if out_dir is not None else None,
            vswhere_args=tuple(vswhere_args) if vswhere_args is not None else None,
            prefer_x86_host_tools=prefer_x86_host_tools,
            environ=os.environ if environ is None else environ,
        )

    def require(self, name: str) -> str:
        """Return an environment variable or raise if it is unset.

        Raises:
            MissingEnvVarDependencyError: If the variable is unset or empty.
        """
        value = lookup_env(self.environ, name)
        if not value:
            raise MissingEnvVarDependencyError(name)
        return value

    def require_target_arch(self) -> str:
        if self.target_arch:
            return self.target_arch
        return self.require(TARGET_ARCH_VAR)

    def require_out_dir(self) -> Path:
        """Return the cache base directory.

        A missing or nonexistent directory means the build step is set up
        wrong, so this raises ValueError rather than a VcvarsError.
        """
        out_dir = self.out_dir
        if out_dir is None:
            env_out_dir = lookup_env(self.environ, OUT_DIR_VAR)
            if not env_out_dir:
                raise ValueError(
                    f"env var `{OUT_DIR_VAR}` should be set, or out_dir passed explicitly"
                )
            out_dir = Path(env_out_dir)
        if not out_dir.is_dir():
            raise ValueError(
                f"output directory `{out_dir}` should be an existing directory"
            )
        return out_dir
