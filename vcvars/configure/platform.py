# SPDX-License-Identifier: MIT
"""Host platform detection.

The host architecture is taken from the running interpreter's own build
(``sysconfig.get_platform()``), not from the machine: a 32-bit Python on
a 64-bit Windows reports ``x86``.
"""

from __future__ import annotations

import platform as _platform
import sysconfig
from dataclasses import dataclass
from functools import lru_cache

# Aliases -> canonical architecture names used throughout vcvars.
ARCH_ALIASES: dict[str, str] = {
    "x86": "x86",
    "i386": "x86",
    "i686": "x86",
    "win32": "x86",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm": "arm",
    "arm32": "arm",
    "armv7": "arm",
    "armv7l": "arm",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


def normalize_arch(arch: str) -> str:
    """Return the canonical name for an architecture alias.

    Unknown names are returned lowercased, unchanged otherwise.
    """
    lowered = arch.strip().lower()
    return ARCH_ALIASES.get(lowered, lowered)


@dataclass(frozen=True)
class Platform:
    """Description of the host platform.

    Attributes:
        arch: Canonical architecture of the running interpreter.
    """

    arch: str


def _interpreter_arch() -> str:
    plat = sysconfig.get_platform()
    if plat == "win32":
        return "x86"
    if plat.startswith("win-"):
        return normalize_arch(plat[len("win-") :])
    return normalize_arch(_platform.machine())


@lru_cache(maxsize=1)
def get_platform() -> Platform:
    """Detect the host platform (cached)."""
    return Platform(arch=_interpreter_arch())
