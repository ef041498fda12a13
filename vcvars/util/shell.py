# SPDX-License-Identifier: MIT
"""Escaping rules for arguments passed through ``cmd.exe /C``."""

from __future__ import annotations

# Order matters: carets must be doubled before new ones are introduced.
CMD_ESCAPES: tuple[tuple[str, str], ...] = (
    ("^", "^^"),
    ("&", "^&"),
)


def cmd_escape(arg: str) -> str:
    """Escape cmd.exe metacharacters in a single argument.

    ``^`` is doubled and ``&`` is caret-escaped so that neither is taken
    as an escape or command separator.

    ``%`` cannot be escaped this way: ``%%`` is not understood outside
    batch files, so a path containing ``%NAME%`` of an existing variable
    is still expanded by the shell.
    """
    for char, replacement in CMD_ESCAPES:
        arg = arg.replace(char, replacement)
    return arg
