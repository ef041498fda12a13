# SPDX-License-Identifier: MIT
"""Filesystem-safe filenames.

Cache files are named after the variables they hold. The names must be
legal on every platform so one cache directory can be shared, e.g. on a
network drive or in a CI cache.
"""

from __future__ import annotations

import re

# Characters reserved on Windows plus ASCII control characters.
_RESERVED_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

_WINDOWS_RESERVED_NAMES = re.compile(r"^(con|prn|aux|nul|com\d|lpt\d)$", re.IGNORECASE)

MAX_FILENAME_LENGTH = 255


def safe_filename(name: str, replacement: str = "!") -> str:
    """Turn an arbitrary string into a valid filename.

    Reserved characters become ``replacement`` (consecutive ones collapse
    into a single replacement), trailing dots and spaces are replaced,
    and Windows device names such as ``CON`` get the replacement
    appended to their stem. The result is at most 255 characters.

    Distinct names can map to the same filename (``a:b`` and ``a?b``).

    Example:
        >>> safe_filename("ProgramFiles(x86).txt")
        'ProgramFiles(x86).txt'
        >>> safe_filename("a<b>.txt")
        'a!b!.txt'
    """
    result = _RESERVED_CHARS.sub(replacement, name)
    if replacement:
        result = re.sub(f"(?:{re.escape(replacement)}){{2,}}", replacement, result)

    if result in ("", ".", ".."):
        return replacement

    stripped = result.rstrip(". ")
    if stripped != result:
        result = stripped + replacement

    stem, dot, ext = result.partition(".")
    if _WINDOWS_RESERVED_NAMES.match(stem):
        result = stem + replacement + dot + ext

    if len(result) > MAX_FILENAME_LENGTH:
        _, dot, ext = result.rpartition(".")
        if dot and len(ext) < MAX_FILENAME_LENGTH - 1:
            keep = MAX_FILENAME_LENGTH - len(ext) - 1
            result = result[:keep] + "." + ext
        else:
            result = result[:MAX_FILENAME_LENGTH]

    return result
