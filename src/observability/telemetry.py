# SPDX-License-Identifier: MIT
"""Aggregate codec metrics for end-of-run reporting."""

from __future__ import annotations

from dataclasses import dataclass
import sys
from typing import DefaultDict, TextIO


@dataclass
class VersionMetrics:
    """Metrics collected for a single token version."""

    encoded: int = 0
    decoded: int = 0
    rejected: int = 0
    total_latency: float = 0.0

    @property
    def average_latency(self) -> float:
        """Return the average decode latency for the version."""

        if not self.decoded:
            return 0.0
        return self.total_latency / self.decoded


_metrics: DefaultDict[str, VersionMetrics] = DefaultDict(VersionMetrics)
_rejections: DefaultDict[str, int] = DefaultDict(int)


def record_encode(version: str) -> None:
    """Record a token issued in ``version`` format."""

    _metrics[version].encoded += 1


def record_decode(version: str, *, latency: float) -> None:
    """Record a successful decode of a ``version`` token."""

    data = _metrics[version]
    data.decoded += 1
    data.total_latency += latency


def record_rejection(reason: str, version: str | None = None) -> None:
    """Record a rejected token and the ``reason`` it was rejected."""

    _rejections[reason] += 1
    if version is not None:
        _metrics[version].rejected += 1


def rejection_counts() -> dict[str, int]:
    """Return a copy of the rejection counters keyed by reason."""

    return dict(_rejections)


def version_metrics(version: str) -> VersionMetrics:
    """Return the collected metrics for ``version``."""

    return _metrics[version]


def reset() -> None:
    """Clear all recorded metrics."""

    _metrics.clear()
    _rejections.clear()


def print_summary(stream: TextIO | None = None) -> None:
    """Write a summary of collected metrics to ``stream`` (default ``stdout``)."""

    out = stream or sys.stdout

    if not _metrics and not _rejections:
        return
    for version, data in sorted(_metrics.items()):
        print(
            f"{version}: encoded={data.encoded} decoded={data.decoded} "
            f"rejected={data.rejected} "
            f"avg_latency={data.average_latency * 1000:.2f}ms",
            file=out,
        )
    if _rejections:
        reasons = " ".join(f"{k}={v}" for k, v in sorted(_rejections.items()))
        print(f"Rejections: {reasons}", file=out)


__all__ = [
    "VersionMetrics",
    "record_encode",
    "record_decode",
    "record_rejection",
    "rejection_counts",
    "version_metrics",
    "print_summary",
    "reset",
]
