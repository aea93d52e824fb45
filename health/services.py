"""
health.services
AUTHOR: carter-vin

HTTP probes for dependent services

- GET the service URL with a bounded request timeout
- 2xx -> healthy, other status -> unhealthy, no response -> error
"""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, Optional

import aiohttp

from health import SERVICE_VERSION
from health.config import ServiceDescriptor
from health.logging import emit_event
from health.model import (
    SERVICE_ERROR,
    SERVICE_HEALTHY,
    SERVICE_UNHEALTHY,
    ServiceStatus,
    utc_now_iso,
)

DEFAULT_SERVICE_TIMEOUT_S = 5.0


async def check_service_health(
    service: ServiceDescriptor,
    *,
    timeout_s: float = DEFAULT_SERVICE_TIMEOUT_S,
    session: Optional[aiohttp.ClientSession] = None,
) -> ServiceStatus:
    """
    Probe one service and classify the outcome

    A caller-provided session is reused and left open.
    """
    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await check_service_health(service, timeout_s=timeout_s, session=own_session)

    start = time.monotonic()
    try:
        async with session.get(
            service.url,
            timeout=aiohttp.ClientTimeout(total=timeout_s),
        ) as response:
            response_time_ms = int((time.monotonic() - start) * 1000)
            status = SERVICE_HEALTHY if 200 <= response.status < 300 else SERVICE_UNHEALTHY
            return ServiceStatus(
                status=status,
                response_time_ms=response_time_ms,
                last_checked=utc_now_iso(),
            )
    except asyncio.TimeoutError:
        message = f"request timed out after {timeout_s}s"
    except (aiohttp.ClientError, ValueError) as e:
        message = str(e) or type(e).__name__

    emit_event(
        "service_check_failed",
        service_version=SERVICE_VERSION,
        service=service.name,
        url=service.url,
        message=message,
    )
    return ServiceStatus(status=SERVICE_ERROR, error=message, last_checked=utc_now_iso())


async def check_services(
    services: Iterable[ServiceDescriptor],
    *,
    timeout_s: float = DEFAULT_SERVICE_TIMEOUT_S,
) -> dict[str, ServiceStatus]:
    """
    Probe all services concurrently over one shared session
    """
    services = list(services)
    if not services:
        return {}

    async with aiohttp.ClientSession() as session:
        results = await asyncio.gather(
            *(check_service_health(svc, timeout_s=timeout_s, session=session) for svc in services)
        )

    return {svc.name: result for svc, result in zip(services, results)}
