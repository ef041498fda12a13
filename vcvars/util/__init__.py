# SPDX-License-Identifier: MIT
"""Small pure helpers."""
