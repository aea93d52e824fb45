"""
health.model
AUTHOR: carter-vin

Report schema + deterministic serialization primitives.

Design goals:
- Explicit structure (no accidental serialization via __dict__)
- Two shapes only: a full HealthReport, or a terminal ErrorReport
- Wire keys follow the public JSON contract (camelCase where published)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from health.collectors.disk import DiskResult
from health.collectors.host import HostResult
from health.collectors.memory import MemoryResult
from health.evaluate import STATUS_ERROR, STATUS_HEALTHY, STATUS_WARNING

# Valid report status values
VALID_STATUS = {STATUS_HEALTHY, STATUS_WARNING, STATUS_ERROR}

# Valid per-service status values
SERVICE_HEALTHY = "healthy"
SERVICE_UNHEALTHY = "unhealthy"
SERVICE_ERROR = "error"
VALID_SERVICE_STATUS = {SERVICE_HEALTHY, SERVICE_UNHEALTHY, SERVICE_ERROR}


# Components
@dataclass(frozen=True)
class MemoryInfo:
    total: int
    free: int
    used: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "free": self.free,
            "used": self.used,
        }


@dataclass(frozen=True)
class DiskInfo:
    filesystem: str
    size: str
    used: str
    available: str
    used_percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "filesystem": self.filesystem,
            "size": self.size,
            "used": self.used,
            "available": self.available,
            "usedPercentage": self.used_percentage,
        }


@dataclass(frozen=True)
class SystemMetrics:
    """
    Host metrics block
    - uptime: seconds
    - loadavg: 1/5/15 minute averages
    - cpu: percentage 0-100
    """

    uptime: float
    loadavg: tuple[float, float, float]
    memory: MemoryInfo
    cpu: float
    disk: DiskInfo

    def to_dict(self) -> dict[str, Any]:
        return {
            "uptime": self.uptime,
            "loadavg": list(self.loadavg),
            "memory": self.memory.to_dict(),
            "cpu": self.cpu,
            "disk": self.disk.to_dict(),
        }


@dataclass(frozen=True)
class ServiceStatus:
    """
    Outcome of probing one dependent service
    - response_time_ms only when a response arrived
    - error only when the request failed to complete
    """

    status: str
    last_checked: str
    response_time_ms: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "lastChecked": self.last_checked,
        }
        if self.status == SERVICE_ERROR:
            payload["error"] = self.error or ""
        else:
            payload["responseTime"] = self.response_time_ms
        return payload


@dataclass(frozen=True)
class HealthReport:
    """
    Top-level report for a successful collection
    - status: "healthy" | "warning"
    - warnings: emitted only when non-empty, in check order
    """

    timestamp: str
    status: str
    system: SystemMetrics
    services: dict[str, ServiceStatus] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "timestamp": self.timestamp,
            "status": self.status,
            "services": {name: svc.to_dict() for name, svc in self.services.items()},
            "system": self.system.to_dict(),
        }
        if self.warnings:
            payload["warnings"] = list(self.warnings)
        return payload


@dataclass(frozen=True)
class ErrorReport:
    """
    Terminal failure shape; partial metrics are never attached
    """

    timestamp: str
    error: str
    status: str = STATUS_ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "error": self.error,
        }


Report = Union[HealthReport, ErrorReport]


# -----------------------------
# Helpers
# -----------------------------
def utc_now_iso() -> str:
    """
    Current time in ISO 8601 (UTC)
    """
    return datetime.now(timezone.utc).isoformat()


def report_to_json(report: Report) -> str:
    """
    Serialize a report

    Rules:
    - sort_keys=True ensures stable key order
    - separators remove whitespace to avoid formatting drift
    - allow_nan=False; non-finite metrics are a bug, not output
    """
    return json.dumps(
        report.to_dict(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def validate_report(report: HealthReport) -> None:
    """
    Validate report structure + content

    Raises ValueError on invalid
    """
    if report.status not in (STATUS_HEALTHY, STATUS_WARNING):
        raise ValueError(f"status must be one of: {[STATUS_HEALTHY, STATUS_WARNING]}")
    if not report.timestamp:
        raise ValueError("timestamp is empty")

    # Warning status and warnings list must agree
    if (report.status == STATUS_WARNING) != bool(report.warnings):
        raise ValueError("warnings must be present exactly when status is 'warning'")

    cpu = report.system.cpu
    if not math.isfinite(cpu) or not 0.0 <= cpu <= 100.0:
        raise ValueError(f"system.cpu must be a finite percentage, got {cpu!r}")

    if len(report.system.loadavg) != 3:
        raise ValueError("system.loadavg must have 3 entries")

    for name, svc in report.services.items():
        if svc.status not in VALID_SERVICE_STATUS:
            raise ValueError(f"services.{name}.status must be: {sorted(VALID_SERVICE_STATUS)}")


def build_report_from_collectors(
    host: HostResult,
    memory: MemoryResult,
    cpu: float,
    disk: DiskResult,
    *,
    timestamp: str,
    status: str,
    warnings: list[str] | None = None,
    services: dict[str, ServiceStatus] | None = None,
) -> HealthReport:
    """
    Assemble a HealthReport from collector results
    """
    report = HealthReport(
        timestamp=timestamp,
        status=status,
        services=dict(services or {}),
        warnings=list(warnings or []),
        system=SystemMetrics(
            uptime=host.uptime,
            loadavg=host.loadavg,
            memory=MemoryInfo(
                total=memory.total,
                free=memory.free,
                used=memory.used,
            ),
            cpu=cpu,
            disk=DiskInfo(
                filesystem=disk.filesystem,
                size=disk.size,
                used=disk.used,
                available=disk.available,
                used_percentage=disk.used_percentage,
            ),
        ),
    )

    # validate before returning
    validate_report(report)
    return report
