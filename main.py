# SPDX-License-Identifier: MIT
"""Convenience launcher for the artwork token CLI from a source checkout."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from cli.main import main  # noqa: E402

if __name__ == "__main__":
    main()
