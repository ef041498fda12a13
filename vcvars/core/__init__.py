# SPDX-License-Identifier: MIT
"""Core resolver, parsing, caching and errors."""
