"""
health.collectors.cpu
AUTHOR: carter-vin

CPU collector
- two-sample delta over per-core tick counters (psutil)
- non-blocking sampling window (asyncio.sleep)
- always returns a finite percentage in [0, 100]
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

import psutil

DEFAULT_SAMPLE_S = 0.1


@dataclass(frozen=True)
class CpuTicks:
    user: float
    nice: float
    sys: float
    idle: float

    @property
    def total(self) -> float:
        return self.user + self.nice + self.sys + self.idle


def read_cpu_ticks() -> list[CpuTicks]:
    """
    Snapshot per-core tick counters

    'nice' does not exist on Windows; treat it as zero there
    """
    return [
        CpuTicks(
            user=times.user,
            nice=getattr(times, "nice", 0.0),
            sys=times.system,
            idle=times.idle,
        )
        for times in psutil.cpu_times(percpu=True)
    ]


def _core_usage(start: CpuTicks, end: CpuTicks) -> float:
    total_delta = end.total - start.total
    if total_delta <= 0:
        # No ticks elapsed for this core; count it as idle
        return 0.0
    idle_delta = end.idle - start.idle
    usage = (1 - idle_delta / total_delta) * 100
    return min(100.0, max(0.0, usage))


def cpu_usage_from_samples(start: Sequence[CpuTicks], end: Sequence[CpuTicks]) -> float:
    """
    Unweighted mean of per-core utilization between two snapshots
    """
    per_core = [_core_usage(s, e) for s, e in zip(start, end)]
    if not per_core:
        return 0.0
    return sum(per_core) / len(per_core)


async def get_cpu_usage(
    sample_s: float = DEFAULT_SAMPLE_S,
    *,
    read_ticks: Callable[[], Sequence[CpuTicks]] = read_cpu_ticks,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> float:
    """
    Estimate CPU utilization over a short sampling window

    Only the calling task is suspended between the two snapshots.
    """
    start = read_ticks()
    await sleep(sample_s)
    end = read_ticks()
    return cpu_usage_from_samples(start, end)
