# SPDX-License-Identifier: MIT
"""Token list files: atomic writes and tolerant reads.

Token files hold one token per line. Blank lines and ``#`` comments are
ignored on read so hand-edited batches stay usable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

import logfire


def read_tokens(path: Path) -> List[str]:
    """Return the tokens listed in ``path``.

    Missing files yield an empty list.
    """
    with logfire.span("fs.read_tokens", attributes={"path": str(path)}):
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            logfire.debug("Token file not found", path=str(path))
            return []
        tokens = [
            line.strip()
            for line in lines
            if line.strip() and not line.lstrip().startswith("#")
        ]
        logfire.debug("Read tokens", path=str(path), count=len(tokens))
        return tokens


def atomic_write(path: Path, lines: Iterable[str]) -> None:
    """Replace ``path`` with ``lines`` in a single rename.

    Lines are written to a ``.tmp`` sibling and synced to disk before
    :func:`os.replace` swaps it into place.
    """
    with logfire.span("fs.atomic_write", attributes={"path": str(path)}):
        tmp_path = Path(f"{path}.tmp")
        tmp_path.parent.mkdir(parents=True, exist_ok=True)
        count = 0
        with open(tmp_path, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(f"{line}\n")
                count += 1
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
        logfire.debug("Atomic write complete", path=str(path), lines=count)


__all__ = ["atomic_write", "read_tokens"]
