from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pygeotraser._transport import HttpTransport
from pygeotraser.collector import HttpCollector
from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import DeliveryError
from pygeotraser.models.historic import HistoricRecord


class _RecordingTransport:
    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.calls: list[tuple[str, dict[str, Any], float]] = []

    async def post_json(self, endpoint: str, payload: Mapping[str, Any], *, timeout: float) -> int:
        self.calls.append((endpoint, dict(payload), timeout))
        if not 200 <= self.status < 300:
            raise DeliveryError(f"HTTP {self.status}", status_code=self.status, endpoint=endpoint)
        return self.status


class _DeadTransport:
    async def post_json(self, endpoint: str, payload: Mapping[str, Any], *, timeout: float) -> int:
        raise DeliveryError("connection refused", endpoint=endpoint)


def _config(base_url: str = "http://collector.invalid") -> GeotraserConfig:
    return GeotraserConfig(user_id="swimmer 7", base_url=base_url, position_timeout=15.0, historic_timeout=20.0)


@pytest.mark.asyncio
async def test_collector_endpoints_and_payloads() -> None:
    transport = _RecordingTransport()
    collector = HttpCollector(_config(), transport)
    record = HistoricRecord(
        user_id="swimmer 7",
        session_id="S-1",
        local_date="2026-01-02",
        local_date_time="2026-01-02T03:04:05.678",
        sequence=1,
        latitude=-34.9,
        longitude=-56.16,
    )

    await collector.submit_position("swimmer 7", -34.9, -56.16)
    await collector.submit_historic_point(record)
    assert await collector.submit_emergency("swimmer 7", True) is True
    await collector.terminate_tracking("swimmer 7")

    assert transport.calls == [
        ("/nadadorposicion/agregar", {"usuarioid": "swimmer 7", "nadadorlat": -34.9, "nadadorlng": -56.16}, 15.0),
        ("/nadadorhistoricorutas/agregar", record.to_payload(), 20.0),
        ("/nadadorposicion/emergency/swimmer%207", {"emergency": True}, 15.0),
        ("/nadadorposicion/eliminar/swimmer%207", {}, 15.0),
    ]


@pytest.mark.asyncio
async def test_emergency_non_2xx_is_not_acknowledged() -> None:
    collector = HttpCollector(_config(), _RecordingTransport(status=503))

    assert await collector.submit_emergency("swimmer 7", True) is False


@pytest.mark.asyncio
async def test_emergency_without_response_raises() -> None:
    collector = HttpCollector(_config(), _DeadTransport())

    with pytest.raises(DeliveryError):
        await collector.submit_emergency("swimmer 7", True)


@pytest.mark.asyncio
async def test_http_transport_posts_json_and_returns_status() -> None:
    received: list[dict[str, Any]] = []

    async def _handler(request: web.Request) -> web.Response:
        received.append(await request.json())
        assert request.headers["content-type"].startswith("application/json")
        return web.json_response({"ok": True}, status=201)

    app = web.Application()
    app.router.add_post("/nadadorposicion/agregar", _handler)

    async with TestServer(app) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(f"http://{server.host}:{server.port}"), http)
        status = await transport.post_json("/nadadorposicion/agregar", {"usuarioid": "u", "nadadorlat": 1.5}, timeout=5)

    assert status == 201
    assert received == [{"usuarioid": "u", "nadadorlat": 1.5}]


@pytest.mark.asyncio
async def test_http_transport_maps_error_status() -> None:
    async def _handler(_request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_post("/nadadorhistoricorutas/agregar", _handler)

    async with TestServer(app) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(f"http://{server.host}:{server.port}"), http)
        with pytest.raises(DeliveryError) as excinfo:
            await transport.post_json("/nadadorhistoricorutas/agregar", {}, timeout=5)

    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == "/nadadorhistoricorutas/agregar"
    assert "boom" in str(excinfo.value)


@pytest.mark.asyncio
async def test_http_transport_maps_timeout() -> None:
    async def _handler(_request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.Response(status=200)

    app = web.Application()
    app.router.add_post("/slow", _handler)

    async with TestServer(app) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(f"http://{server.host}:{server.port}"), http)
        with pytest.raises(DeliveryError) as excinfo:
            await transport.post_json("/slow", {}, timeout=0.05)

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_http_transport_maps_connection_failure() -> None:
    async with aiohttp.ClientSession() as http:
        transport = HttpTransport(_config("http://127.0.0.1:1"), http)
        with pytest.raises(DeliveryError) as excinfo:
            await transport.post_json("/nadadorposicion/agregar", {}, timeout=2)

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, aiohttp.ClientError)
