"""
health.evaluate
AUTHOR: carter-vin

Threshold evaluation based on collector signals
"""

from __future__ import annotations

from health.config import ThresholdConfig

STATUS_HEALTHY = "healthy"
STATUS_WARNING = "warning"
STATUS_ERROR = "error"


def evaluate_thresholds(
    memory_pct: float,
    cpu_pct: float,
    disk_pct: float,
    thresholds: ThresholdConfig,
) -> tuple[str, list[str]]:
    """
    Evaluate status and warnings from usage percentages

    Check order is fixed (memory, cpu, disk) and every breach is kept.
    """
    warnings: list[str] = []

    if memory_pct > thresholds.memory_threshold:
        warnings.append(f"High memory usage: {memory_pct:.2f}%")

    if cpu_pct > thresholds.cpu_threshold:
        warnings.append(f"High CPU usage: {cpu_pct:.2f}%")

    if disk_pct > thresholds.disk_space_threshold:
        warnings.append(f"High disk usage: {disk_pct:.2f}%")

    if warnings:
        return STATUS_WARNING, warnings
    return STATUS_HEALTHY, warnings
