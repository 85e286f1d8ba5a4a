from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest
from conftest import FakeCollector, make_sample

from pygeotraser.client import GeotraserClient
from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import LocationPermissionError
from pygeotraser.models.authorization import AuthorizationState
from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import SequencedSample
from pygeotraser.provider import ProviderBridge
from pygeotraser.providers.replay import ReplayLocationProvider, read_route_csv


def _bridge(loop: asyncio.AbstractEventLoop, seen: list[tuple[str, object, int]]) -> ProviderBridge:
    def _record(kind: str):
        return lambda value: seen.append((kind, value, threading.get_ident()))

    return ProviderBridge(
        loop=loop,
        on_sample=_record("sample"),
        on_authorization_changed=_record("auth"),
        on_error=_record("error"),
    )


@pytest.mark.asyncio
async def test_callbacks_from_worker_thread_run_on_loop_thread() -> None:
    loop = asyncio.get_running_loop()
    seen: list[tuple[str, object, int]] = []
    bridge = _bridge(loop, seen)
    cause = OSError("signal lost")

    def _worker() -> None:
        bridge.on_sample(make_sample())
        bridge.on_authorization_changed("denied")  # type: ignore[arg-type]
        bridge.on_error(cause)

    thread = threading.Thread(target=_worker)
    thread.start()
    await asyncio.to_thread(thread.join)
    for _ in range(5):
        await asyncio.sleep(0)

    assert [kind for kind, _value, _ident in seen] == ["sample", "auth", "error"]
    assert {ident for _kind, _value, ident in seen} == {threading.get_ident()}
    assert seen[1][1] is AuthorizationState.DENIED
    assert seen[2][1] is cause


@pytest.mark.asyncio
async def test_closed_bridge_drops_callbacks_even_if_already_scheduled() -> None:
    seen: list[tuple[str, object, int]] = []
    bridge = _bridge(asyncio.get_running_loop(), seen)

    bridge.on_sample(make_sample())
    bridge.close()
    bridge.on_sample(make_sample())
    await asyncio.sleep(0)

    assert bridge.closed
    assert seen == []


def test_callback_after_loop_closed_is_dropped() -> None:
    loop = asyncio.new_event_loop()
    seen: list[tuple[str, object, int]] = []
    bridge = _bridge(loop, seen)
    loop.close()

    bridge.on_sample(make_sample())

    assert seen == []


def test_read_route_csv_skips_header_and_blank_rows(tmp_path: Path) -> None:
    route = tmp_path / "route.csv"
    route.write_text("lat,lon\n-34.90,-56.16\n\n-34.91,-56.17\n", encoding="utf-8")

    assert read_route_csv(route) == [(-34.90, -56.16), (-34.91, -56.17)]


def test_read_route_csv_rejects_bad_row(tmp_path: Path) -> None:
    route = tmp_path / "route.csv"
    route.write_text("-34.90,-56.16\nnorth,west\n", encoding="utf-8")

    with pytest.raises(ValueError, match="row 2"):
        read_route_csv(route)


def test_replay_provider_requires_points() -> None:
    with pytest.raises(ValueError):
        ReplayLocationProvider([])


@pytest.mark.asyncio
async def test_replayed_route_is_recorded_in_order(config: GeotraserConfig, collector: FakeCollector) -> None:
    points = [(-34.90, -56.16), (-34.91, -56.17), (-34.92, -56.18)]
    provider = ReplayLocationProvider(points, interval=0.01)
    accepted: list[SequencedSample] = []
    done = asyncio.Event()

    def _on_sample(sequenced: SequencedSample) -> None:
        accepted.append(sequenced)
        if sequenced.sequence == len(points):
            done.set()

    async with GeotraserClient(config, provider, collector=collector, on_sample=_on_sample) as client:
        await client.start_session()
        assert provider.background_delivery is True
        await asyncio.wait_for(done.wait(), timeout=2.0)
        await client.stop_session()
        assert provider.background_delivery is False

    assert [s.sequence for s in accepted] == [1, 2, 3]
    assert [(s.sample.latitude, s.sample.longitude) for s in accepted] == points
    assert sorted(r.sequence for r in collector.historic) == [1, 2, 3]
    assert not provider.is_updating


@pytest.mark.asyncio
async def test_replay_one_shot_acquisition(config: GeotraserConfig, collector: FakeCollector) -> None:
    provider = ReplayLocationProvider([(10.0, 20.0)], interval=0.01)

    async with GeotraserClient(config, provider, collector=collector) as client:
        sample = await client.acquire_once(timeout=1.0)

    assert isinstance(sample, LocationSample)
    assert (sample.latitude, sample.longitude) == (10.0, 20.0)


@pytest.mark.asyncio
async def test_replay_one_shot_without_permission_fails(config: GeotraserConfig, collector: FakeCollector) -> None:
    provider = ReplayLocationProvider(
        [(10.0, 20.0)],
        authorization=AuthorizationState.UNDETERMINED,
        grant_on_request=None,
    )

    async with GeotraserClient(config, provider, collector=collector) as client:
        with pytest.raises(LocationPermissionError):
            await client.acquire_once(timeout=1.0)
