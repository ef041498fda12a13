# SPDX-License-Identifier: MIT
"""Platform detection and configuration inputs."""
