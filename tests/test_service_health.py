"""
Contract test for dependent service probes
"""

import asyncio
import json
import socket

from aiohttp import web

from health.config import ServiceDescriptor
from health.services import check_service_health, check_services


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def _probe_target(aiohttp_server):
    async def ok(request):
        return web.json_response({"ok": True})

    async def broken(request):
        return web.json_response({"ok": False}, status=503)

    async def slow(request):
        await asyncio.sleep(1)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/broken", broken)
    app.router.add_get("/slow", slow)
    return await aiohttp_server(app)


async def test_ok_response_is_healthy(aiohttp_server) -> None:
    server = await _probe_target(aiohttp_server)

    result = await check_service_health(ServiceDescriptor(name="api", url=str(server.make_url("/ok"))))
    payload = result.to_dict()

    assert payload["status"] == "healthy"
    assert isinstance(payload["responseTime"], int)
    assert payload["responseTime"] >= 0
    assert "lastChecked" in payload
    assert "error" not in payload


async def test_non_ok_response_is_unhealthy(aiohttp_server) -> None:
    server = await _probe_target(aiohttp_server)

    result = await check_service_health(
        ServiceDescriptor(name="api", url=str(server.make_url("/broken")))
    )

    assert result.status == "unhealthy"
    assert result.response_time_ms is not None
    assert result.error is None


async def test_unreachable_service_is_error(capsys) -> None:
    """
    Connection failure yields error status with message and lastChecked
    """
    url = f"http://127.0.0.1:{_closed_port()}/health"

    result = await check_service_health(ServiceDescriptor(name="down", url=url))
    payload = result.to_dict()

    assert set(payload.keys()) == {"status", "error", "lastChecked"}
    assert payload["status"] == "error"
    assert payload["error"]

    event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert event["event_type"] == "service_check_failed"
    assert event["service"] == "down"


async def test_slow_service_times_out(aiohttp_server) -> None:
    server = await _probe_target(aiohttp_server)

    result = await check_service_health(
        ServiceDescriptor(name="slow", url=str(server.make_url("/slow"))),
        timeout_s=0.2,
    )

    assert result.status == "error"
    assert result.error == "request timed out after 0.2s"


async def test_check_services_keys_by_name(aiohttp_server) -> None:
    server = await _probe_target(aiohttp_server)

    results = await check_services(
        [
            ServiceDescriptor(name="api", url=str(server.make_url("/ok"))),
            ServiceDescriptor(name="cdn", url=str(server.make_url("/broken"))),
        ]
    )

    assert {name: result.status for name, result in results.items()} == {
        "api": "healthy",
        "cdn": "unhealthy",
    }


async def test_check_services_empty_list() -> None:
    assert await check_services([]) == {}
