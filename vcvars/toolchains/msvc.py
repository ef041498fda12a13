# SPDX-License-Identifier: MIT
"""MSVC toolchain discovery (Windows only).

Locates vswhere.exe, asks it for the Visual Studio installation, finds
vcvarsall.bat inside it and runs it in a throwaway cmd.exe to capture
the environment it produces.

Usage of vcvarsall.bat is documented at
https://learn.microsoft.com/en-us/cpp/build/building-on-the-command-line#vcvarsall-syntax
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from vcvars.configure.config import PROGRAM_FILES_X86_VAR, WINDIR_VAR, VcvarsConfig
from vcvars.configure.platform import normalize_arch
from vcvars.core.envdump import SEPARATOR, check_for_error
from vcvars.core.errors import (
    CouldntRunError,
    ToolchainFileNotFoundError,
    UnsupportedArchError,
)
from vcvars.util.shell import cmd_escape

logger = logging.getLogger(__name__)

# Microsoft: "This is a fixed location that will be maintained."
# https://github.com/Microsoft/vswhere/wiki/Installing
VSWHERE_SUBPATH = ("Microsoft Visual Studio", "Installer", "vswhere.exe")
CMD_EXE_SUBPATH = ("System32", "cmd.exe")
VCVARSALL_SUBPATH = ("VC", "Auxiliary", "Build", "vcvarsall.bat")

DEFAULT_VSWHERE_SELECTOR: tuple[str, ...] = ("-latest",)


@dataclass(frozen=True)
class ToolchainLocation:
    """Paths involved in running vcvarsall.bat.

    Attributes:
        vswhere: Path to vswhere.exe.
        cmd_exe: Path to cmd.exe.
        installation: Visual Studio installation root, once discovered.
        vcvarsall: Path to vcvarsall.bat, once discovered.
    """

    vswhere: Path
    cmd_exe: Path
    installation: Path | None = None
    vcvarsall: Path | None = None

    @classmethod
    def from_config(cls, config: VcvarsConfig) -> ToolchainLocation:
        """Compute the fixed tool paths from ProgramFiles(x86) and WINDIR.

        Raises:
            MissingEnvVarDependencyError: If either variable is unset.
            ToolchainFileNotFoundError: If vswhere.exe is not a file.
        """
        program_files_x86 = config.require(PROGRAM_FILES_X86_VAR)
        windir = config.require(WINDIR_VAR)

        vswhere = Path(program_files_x86).joinpath(*VSWHERE_SUBPATH)
        if not vswhere.is_file():
            raise ToolchainFileNotFoundError(vswhere)

        return cls(vswhere=vswhere, cmd_exe=Path(windir).joinpath(*CMD_EXE_SUBPATH))

    def with_installation(self, installation: Path) -> ToolchainLocation:
        """Return a copy pointing at vcvarsall.bat inside ``installation``.

        Raises:
            ToolchainFileNotFoundError: If vcvarsall.bat is not a file.
        """
        vcvarsall = installation.joinpath(*VCVARSALL_SUBPATH)
        if not vcvarsall.is_file():
            raise ToolchainFileNotFoundError(vcvarsall)
        return replace(self, installation=installation, vcvarsall=vcvarsall)


class ArchSelector:
    """Maps (host, target) architectures to the vcvarsall.bat argument.

    For an x86_64 host the usage table allows both the x64-hosted tokens
    (``x64_x86``, ``x64``, ...) and the x86-hosted ones (``x86``,
    ``x86_x64``, ...). The x64-hosted tools are used by default;
    ``prefer_x86_host_tools`` switches to the x86-hosted ones.
    """

    ARCH_ARGS: dict[str, dict[str, str]] = {
        "x86": {
            "x86": "x86",
            "x86_64": "x86_x64",
            "arm": "x86_arm",
            "aarch64": "x86_arm64",
        },
        "x86_64": {
            "x86": "x64_x86",
            "x86_64": "x64",
            "arm": "x64_arm",
            "aarch64": "x64_arm64",
        },
        "aarch64": {
            "x86": "arm64_x86",
            "x86_64": "arm64_x64",
            "arm": "arm64_arm",
            "aarch64": "arm64",
        },
    }

    def __init__(self, *, prefer_x86_host_tools: bool = False) -> None:
        self.prefer_x86_host_tools = prefer_x86_host_tools

    def select(self, host: str, target: str) -> str:
        """Return the vcvarsall.bat argument for the pair.

        Raises:
            UnsupportedArchError: If the pair has no mapping.
        """
        host_key = normalize_arch(host)
        target_key = normalize_arch(target)
        if self.prefer_x86_host_tools and host_key == "x86_64":
            host_key = "x86"

        arg = self.ARCH_ARGS.get(host_key, {}).get(target_key)
        if arg is None:
            raise UnsupportedArchError(host, target)
        return arg


def vswhere_command(
    vswhere: Path, selector_args: Sequence[str] | None = None
) -> list[str]:
    """Build the vswhere.exe command line.

    ``selector_args`` replaces ``-latest`` entirely, e.g.
    ``["-version", "[15.0,16.0)"]`` to pin Visual Studio 2017. Run
    ``vswhere -help`` for the available options.
    """
    selector = DEFAULT_VSWHERE_SELECTOR if selector_args is None else selector_args
    return [
        str(vswhere),
        "-prerelease",  # Allow Visual Studio Preview.
        *selector,
        "-property",
        "installationPath",
        "-utf8",
    ]


def find_installation(
    location: ToolchainLocation, selector_args: Sequence[str] | None = None
) -> Path:
    """Ask vswhere.exe for the Visual Studio installation root.

    Raises:
        CouldntRunError: If vswhere.exe cannot be started.
        UnicodeDecodeError: If vswhere.exe violates its ``-utf8`` contract.
    """
    cmd = vswhere_command(location.vswhere, selector_args)
    logger.debug("Running %s", cmd)
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as err:
        raise CouldntRunError(location.vswhere, err) from err

    # vswhere guarantees UTF-8 with -utf8; anything else is a bug, not a
    # condition to recover from.
    installation = result.stdout.decode("utf-8").strip()
    logger.info("Found Visual Studio installation: %s", installation)
    return Path(installation)


def vcvarsall_command(location: ToolchainLocation, arch_arg: str) -> list[str]:
    """Build the cmd.exe command line that runs vcvarsall.bat and dumps the env."""
    if location.vcvarsall is None:
        raise ValueError("vcvarsall.bat has not been located yet")
    return [
        str(location.cmd_exe),
        "/C",
        cmd_escape(str(location.vcvarsall)),
        arch_arg,
        "&&",
        f"echo.{SEPARATOR}",
        "&&",
        "set",
    ]


def run_vcvarsall(location: ToolchainLocation, arch_arg: str) -> str:
    """Run vcvarsall.bat and return the captured output.

    vcvarsall.bat exits with code 0 even when it fails, so failure is
    detected from the output's error marker instead.

    Raises:
        CouldntRunError: If cmd.exe cannot be started.
        VcvarsFailedError: If vcvarsall.bat reported an error.
    """
    cmd = vcvarsall_command(location, arch_arg)
    logger.info(
        "Running vcvarsall.bat %s from %s", arch_arg, location.installation
    )
    logger.debug("Running %s", cmd)
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as err:
        raise CouldntRunError(location.cmd_exe, err) from err
    logger.debug("cmd.exe exited with code %s", result.returncode)

    output = result.stdout.decode("utf-8", errors="replace")
    check_for_error(output)
    return output
