"""
Contract test for system health aggregation
"""

import json

import pytest

from health import aggregator as aggregator_module
from health.aggregator import HealthAggregator
from health.collectors.disk import DiskCheckError, DiskResult
from health.collectors.host import HostResult
from health.collectors.memory import MemoryResult
from health.config import ServiceDescriptor, ThresholdConfig
from health.model import ServiceStatus, report_to_json


def _install_collectors(monkeypatch, *, memory_pct: float, cpu: float, disk_pct: int) -> None:
    total = 1000
    used = int(total * memory_pct / 100)

    async def fake_cpu(sample_s):
        return cpu

    async def fake_disk(path, *, timeout_s):
        return DiskResult(
            filesystem="/dev/sda1",
            size="100G",
            used=f"{disk_pct}G",
            available=f"{100 - disk_pct}G",
            used_percentage=disk_pct,
        )

    monkeypatch.setattr(
        aggregator_module,
        "collect_host",
        lambda: HostResult(uptime=1234.5, loadavg=(0.5, 0.4, 0.3)),
    )
    monkeypatch.setattr(
        aggregator_module,
        "collect_memory",
        lambda: MemoryResult(total=total, free=total - used),
    )
    monkeypatch.setattr(aggregator_module, "get_cpu_usage", fake_cpu)
    monkeypatch.setattr(aggregator_module, "check_disk_space", fake_disk)


async def test_healthy_report_shape(monkeypatch) -> None:
    """
    Below all thresholds: healthy, full system block, no warnings key
    """
    _install_collectors(monkeypatch, memory_pct=40, cpu=12.5, disk_pct=50)

    report = await HealthAggregator().check_system_health()
    payload = report.to_dict()

    assert payload["status"] == "healthy"
    assert "warnings" not in payload
    assert "error" not in payload
    assert payload["services"] == {}
    assert payload["system"] == {
        "uptime": 1234.5,
        "loadavg": [0.5, 0.4, 0.3],
        "memory": {"total": 1000, "free": 600, "used": 400},
        "cpu": 12.5,
        "disk": {
            "filesystem": "/dev/sda1",
            "size": "100G",
            "used": "50G",
            "available": "50G",
            "usedPercentage": 50,
        },
    }


async def test_high_memory_yields_warning(monkeypatch) -> None:
    _install_collectors(monkeypatch, memory_pct=95, cpu=10, disk_pct=10)

    report = await HealthAggregator().check_system_health()

    assert report.status == "warning"
    assert any("High memory usage" in warning for warning in report.warnings)


async def test_memory_and_disk_breaches_are_ordered(monkeypatch) -> None:
    """
    Simultaneous breaches are all listed, memory before disk
    """
    _install_collectors(monkeypatch, memory_pct=95, cpu=10, disk_pct=95)

    report = await HealthAggregator().check_system_health()

    assert report.status == "warning"
    assert report.warnings == ["High memory usage: 95.00%", "High disk usage: 95.00%"]


async def test_injected_thresholds_change_outcome(monkeypatch) -> None:
    _install_collectors(monkeypatch, memory_pct=40, cpu=60, disk_pct=10)

    report = await HealthAggregator(ThresholdConfig(cpu_threshold=50)).check_system_health()

    assert report.status == "warning"
    assert report.warnings == ["High CPU usage: 60.00%"]


async def test_disk_failure_yields_error_shape_only(monkeypatch) -> None:
    """
    A collector fault discards metrics and returns the error shape
    """
    _install_collectors(monkeypatch, memory_pct=95, cpu=10, disk_pct=10)

    async def failing_disk(path, *, timeout_s):
        raise DiskCheckError("command 'df -hP /' exited with status 1")

    monkeypatch.setattr(aggregator_module, "check_disk_space", failing_disk)

    report = await HealthAggregator().check_system_health()
    payload = report.to_dict()

    assert set(payload.keys()) == {"status", "timestamp", "error"}
    assert payload["status"] == "error"
    assert payload["error"].startswith("Failed to check disk space: ")


async def test_memory_failure_yields_error(monkeypatch) -> None:
    _install_collectors(monkeypatch, memory_pct=10, cpu=10, disk_pct=10)

    def failing_memory():
        raise RuntimeError("memory metrics unavailable")

    monkeypatch.setattr(aggregator_module, "collect_memory", failing_memory)

    report = await HealthAggregator().check_system_health()

    assert report.status == "error"
    assert report.error == "memory metrics unavailable"


async def test_services_are_reported_without_changing_status(monkeypatch) -> None:
    """
    Configured services land in 'services'; failures do not alter status
    """
    _install_collectors(monkeypatch, memory_pct=10, cpu=10, disk_pct=10)

    async def fake_services(services, *, timeout_s):
        return {
            svc.name: ServiceStatus(status="error", error="refused", last_checked="t")
            for svc in services
        }

    monkeypatch.setattr(aggregator_module, "check_services", fake_services)

    aggregator = HealthAggregator(services=(ServiceDescriptor(name="api", url="http://x"),))
    report = await aggregator.check_system_health()
    payload = json.loads(report_to_json(report))

    assert payload["status"] == "healthy"
    assert payload["services"] == {
        "api": {"status": "error", "error": "refused", "lastChecked": "t"}
    }


@pytest.mark.parametrize("cpu", [0.0, 100.0])
async def test_cpu_bounds_serialize(monkeypatch, cpu: float) -> None:
    _install_collectors(monkeypatch, memory_pct=10, cpu=cpu, disk_pct=10)

    report = await HealthAggregator().check_system_health()

    assert json.loads(report_to_json(report))["system"]["cpu"] == cpu
