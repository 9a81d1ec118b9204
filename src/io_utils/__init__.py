"""Input and output helpers for configuration, parameter and token files.

Exports:
    load_app_config: Read ``config/app.yaml`` into :class:`models.AppConfig`.
    load_params_file: Read a parameter set from JSON or YAML.
    load_provenance_file: Read provenance metadata from JSON or YAML.
    read_tokens: Return the tokens listed in a file.
    atomic_write: Write files atomically.
"""

from __future__ import annotations

from .loader import load_app_config, load_params_file, load_provenance_file
from .persistence import atomic_write, read_tokens

__all__ = [
    "load_app_config",
    "load_params_file",
    "load_provenance_file",
    "read_tokens",
    "atomic_write",
]
