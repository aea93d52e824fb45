"""
health.collectors.memory
AUTHOR: carter-vin

Memory collector
- totals via psutil.virtual_memory
- 'free' is the memory available to new processes (MemAvailable on Linux)
"""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class MemoryResult:
    total: int
    free: int

    @property
    def used(self) -> int:
        return self.total - self.free

    @property
    def used_percent(self) -> float:
        if self.total <= 0:
            raise RuntimeError("total memory reported as zero")
        return (self.used / self.total) * 100.0


def collect_memory() -> MemoryResult:
    """
    Collect total and free memory in bytes
    """
    vm = psutil.virtual_memory()
    return MemoryResult(total=int(vm.total), free=int(vm.available))
