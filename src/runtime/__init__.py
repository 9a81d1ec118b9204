# SPDX-License-Identifier: MIT
"""Process-wide runtime state: settings and the active schema registry."""

from .environment import RuntimeEnv
from .settings import Settings, load_settings

__all__ = ["RuntimeEnv", "Settings", "load_settings"]
