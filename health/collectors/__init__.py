"""health.collectors package exports."""

from health.collectors.cpu import get_cpu_usage
from health.collectors.disk import check_disk_space
from health.collectors.host import collect_host
from health.collectors.memory import collect_memory

__all__ = [
    "check_disk_space",
    "collect_host",
    "collect_memory",
    "get_cpu_usage",
]
