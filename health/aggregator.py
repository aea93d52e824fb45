"""
health.aggregator
AUTHOR: carter-vin

System health aggregation

Flow (in order):
- host uptime + load averages
- memory totals
- CPU utilization (sampling window)
- disk usage
- threshold evaluation
- optional dependent service probes

Failure semantics:
- any collector failure yields an ErrorReport; partial metrics are discarded
- service probe outcomes never change the report status
"""

from __future__ import annotations

from health.collectors.cpu import DEFAULT_SAMPLE_S, get_cpu_usage
from health.collectors.disk import DEFAULT_DISK_TIMEOUT_S, check_disk_space
from health.collectors.host import collect_host
from health.collectors.memory import collect_memory
from health.config import ServiceDescriptor, Settings, ThresholdConfig
from health.evaluate import evaluate_thresholds
from health.model import ErrorReport, Report, build_report_from_collectors, utc_now_iso
from health.services import DEFAULT_SERVICE_TIMEOUT_S, check_services


class HealthAggregator:
    """
    Produces health reports against an injected, immutable ThresholdConfig.

    Holds no mutable state; one instance may serve concurrent checks.
    """

    def __init__(
        self,
        thresholds: ThresholdConfig | None = None,
        *,
        disk_path: str = "/",
        disk_timeout_s: float = DEFAULT_DISK_TIMEOUT_S,
        cpu_sample_s: float = DEFAULT_SAMPLE_S,
        services: tuple[ServiceDescriptor, ...] = (),
        service_timeout_s: float = DEFAULT_SERVICE_TIMEOUT_S,
    ) -> None:
        self.thresholds = thresholds or ThresholdConfig()
        self.disk_path = disk_path
        self.disk_timeout_s = disk_timeout_s
        self.cpu_sample_s = cpu_sample_s
        self.services = tuple(services)
        self.service_timeout_s = service_timeout_s

    @classmethod
    def from_settings(cls, settings: Settings) -> "HealthAggregator":
        return cls(
            settings.thresholds,
            disk_path=settings.disk_path,
            disk_timeout_s=settings.disk_timeout_s,
            cpu_sample_s=settings.cpu_sample_s,
            services=settings.services,
            service_timeout_s=settings.service_timeout_s,
        )

    async def check_system_health(self) -> Report:
        """
        Collect metrics and evaluate them against thresholds
        """
        timestamp = utc_now_iso()
        try:
            host = collect_host()
            memory = collect_memory()
            cpu = await get_cpu_usage(self.cpu_sample_s)
            disk = await check_disk_space(self.disk_path, timeout_s=self.disk_timeout_s)

            status, warnings = evaluate_thresholds(
                memory.used_percent,
                cpu,
                disk.used_percentage,
                self.thresholds,
            )

            services = await check_services(self.services, timeout_s=self.service_timeout_s)

            return build_report_from_collectors(
                host,
                memory,
                cpu,
                disk,
                timestamp=timestamp,
                status=status,
                warnings=warnings,
                services=services,
            )
        except Exception as e:
            return ErrorReport(timestamp=utc_now_iso(), error=str(e) or type(e).__name__)


async def check_system_health(thresholds: ThresholdConfig | None = None) -> Report:
    """
    One-off check with default collector settings
    """
    return await HealthAggregator(thresholds).check_system_health()
