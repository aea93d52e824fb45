"""
health.config
AUTHOR: carter-vin

Threshold and runtime settings

- ThresholdConfig: immutable limits injected into the aggregator and middleware
- Settings: thresholds + server/collector knobs
- Environment (and optional .env file) overrides
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Mapping

from dotenv import load_dotenv

# Env var names
PORT_ENV = "PORT"
HOST_ENV = "HEALTH_HOST"
DISK_PATH_ENV = "HEALTH_DISK_PATH"
DISK_TIMEOUT_ENV = "HEALTH_DISK_TIMEOUT_S"
CPU_SAMPLE_ENV = "HEALTH_CPU_SAMPLE_MS"
SERVICE_TIMEOUT_ENV = "HEALTH_SERVICE_TIMEOUT_S"
DISK_THRESHOLD_ENV = "HEALTH_DISK_THRESHOLD"
MEMORY_THRESHOLD_ENV = "HEALTH_MEMORY_THRESHOLD"
CPU_THRESHOLD_ENV = "HEALTH_CPU_THRESHOLD"
RESPONSE_TIME_THRESHOLD_ENV = "HEALTH_RESPONSE_TIME_THRESHOLD_MS"
SERVICES_ENV = "HEALTH_SERVICES"

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Static health thresholds
    - percentages for disk/memory/cpu (breach when strictly greater)
    - response time in milliseconds
    """

    disk_space_threshold: float = 90
    memory_threshold: float = 90
    cpu_threshold: float = 90
    response_time_threshold_ms: float = 500


@dataclass(frozen=True)
class ServiceDescriptor:
    name: str
    url: str


@dataclass(frozen=True)
class Settings:
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    disk_path: str = "/"
    disk_timeout_s: float = 5.0
    cpu_sample_s: float = 0.1
    service_timeout_s: float = 5.0
    services: tuple[ServiceDescriptor, ...] = ()


def parse_service(value: str) -> ServiceDescriptor:
    """
    Parse a single 'name=url' service entry
    """
    name, sep, url = value.partition("=")
    name = name.strip()
    url = url.strip()
    if not sep or not name or not url:
        raise ValueError(f"invalid service entry (expected name=url): {value!r}")
    return ServiceDescriptor(name=name, url=url)


def parse_services(value: str) -> tuple[ServiceDescriptor, ...]:
    """
    Parse a comma separated list of 'name=url' entries
    """
    entries = [item for item in (part.strip() for part in value.split(",")) if item]
    services = tuple(parse_service(item) for item in entries)

    names = [service.name for service in services]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate service names in {SERVICES_ENV}")

    return services


def _number(
    env: Mapping[str, str],
    name: str,
    default: float,
    *,
    positive: bool = False,
) -> float:
    """
    Read a finite number; positive=True also rejects zero and negatives
    """
    raw = env.get(name)
    if raw is None or not raw.strip():
        return float(default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw!r}")
    if positive and value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {raw!r}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables

    When env is None, a .env file (if present) is loaded first and
    os.environ is used.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    defaults = ThresholdConfig()
    thresholds = ThresholdConfig(
        disk_space_threshold=_number(env, DISK_THRESHOLD_ENV, defaults.disk_space_threshold),
        memory_threshold=_number(env, MEMORY_THRESHOLD_ENV, defaults.memory_threshold),
        cpu_threshold=_number(env, CPU_THRESHOLD_ENV, defaults.cpu_threshold),
        response_time_threshold_ms=_number(
            env, RESPONSE_TIME_THRESHOLD_ENV, defaults.response_time_threshold_ms
        ),
    )

    port = _number(env, PORT_ENV, DEFAULT_PORT)
    if not port.is_integer() or not 0 < port < 65536:
        raise ValueError(f"{PORT_ENV} must be a valid TCP port, got {env.get(PORT_ENV)!r}")

    return Settings(
        thresholds=thresholds,
        host=env.get(HOST_ENV) or DEFAULT_HOST,
        port=int(port),
        disk_path=env.get(DISK_PATH_ENV) or "/",
        disk_timeout_s=_number(env, DISK_TIMEOUT_ENV, 5.0, positive=True),
        cpu_sample_s=_number(env, CPU_SAMPLE_ENV, 100, positive=True) / 1000.0,
        service_timeout_s=_number(env, SERVICE_TIMEOUT_ENV, 5.0, positive=True),
        services=parse_services(env.get(SERVICES_ENV, "")),
    )
