# SPDX-License-Identifier: MIT
"""Parsing of the environment dump printed by ``cmd.exe``.

The captured output has three parts:

1. Whatever vcvarsall.bat prints (discarded).
2. A separator line echoed after the script succeeded.
3. The output of ``set``: one ``NAME=value`` line per variable.

Everything here is pure text processing so it can be tested against
fixture text without spawning a process.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from vcvars.core.errors import VcvarsFailedError

EnvironmentMap = Mapping[str, str]

SEPARATOR = "=" * 20 + "_unique_separator_by_python_package_that_utilizes_vcvars"

# vcvarsall.bat prints this when it fails, but still exits with code 0.
ERROR_MARKER = "[ERROR:"

# Literal backslash-n, so a multi-line failure reads as one log line.
ERROR_LINE_JOINER = r"\n"


def split_lines(text: str) -> list[str]:
    """Split text on ``\\n``, dropping a trailing ``\\r`` from each line.

    Unlike str.splitlines(), only ``\\n`` ends a line; a final newline does
    not produce a trailing empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def check_for_error(text: str) -> None:
    """Raise VcvarsFailedError if the output starts with the error marker.

    Raises:
        VcvarsFailedError: With all output lines joined by a literal ``\\n``.
    """
    if text.startswith(ERROR_MARKER):
        raise VcvarsFailedError(ERROR_LINE_JOINER.join(split_lines(text)))


def parse_environment_dump(text: str, separator: str = SEPARATOR) -> EnvironmentMap:
    """Parse captured ``cmd.exe`` output into an environment map.

    Lines are skipped until one starts with the separator (``cmd.exe`` may
    append a space to the echoed line). Every following line is split on
    its first ``=``; the name is uppercased. Lines without ``=`` are
    ignored. If the separator never appears the map is empty.

    Args:
        text: Decoded subprocess output.
        separator: The sentinel line marking the start of the dump.

    Returns:
        A read-only mapping from uppercase variable name to value.
    """
    env: dict[str, str] = {}
    collecting = False

    for line in split_lines(text):
        if collecting:
            name, sep, value = line.partition("=")
            if sep:
                env[name.upper()] = value
        elif line.startswith(separator):
            collecting = True

    return MappingProxyType(env)
