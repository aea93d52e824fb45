"""
health.collectors.host
AUTHOR: carter-vin

Host collector
- uptime in seconds (psutil boot time)
- 1/5/15 minute load averages; zeros where the platform has none
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class HostResult:
    uptime: float
    loadavg: tuple[float, float, float]


def _loadavg() -> tuple[float, float, float]:
    try:
        one, five, fifteen = os.getloadavg()
    except (OSError, AttributeError):
        return (0.0, 0.0, 0.0)
    return (one, five, fifteen)


def collect_host() -> HostResult:
    """
    Collect uptime and load averages
    """
    uptime = max(0.0, time.time() - psutil.boot_time())
    return HostResult(uptime=uptime, loadavg=_loadavg())
