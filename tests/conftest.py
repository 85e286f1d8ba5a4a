from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import DeliveryError
from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.historic import HistoricRecord
from pygeotraser.models.sample import LocationSample
from pygeotraser.provider import ProviderCallbacks


def make_sample(lat: float = -34.9011, lon: float = -56.1645) -> LocationSample:
    return LocationSample(latitude=lat, longitude=lon, captured_at=datetime(2026, 1, 1, tzinfo=UTC))


async def flush(rounds: int = 10) -> None:
    """Let call_soon_threadsafe hops and freshly spawned tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass
class FakeProvider:
    state: AuthorizationState = AuthorizationState.AUTHORIZED_ALWAYS
    answer_permission_with: AuthorizationState | None = None
    fail_start: bool = False
    callbacks: ProviderCallbacks | None = None
    permission_requests: list[PermissionLevel] = field(default_factory=list)
    one_shot_requests: int = 0
    start_calls: int = 0
    stop_calls: int = 0
    background: bool = False
    updating: bool = False

    def set_callbacks(self, callbacks: ProviderCallbacks | None) -> None:
        self.callbacks = callbacks

    def current_authorization_state(self) -> AuthorizationState:
        return self.state

    def request_permission(self, level: PermissionLevel) -> None:
        self.permission_requests.append(level)
        if self.answer_permission_with is not None:
            self.change_authorization(self.answer_permission_with)

    def start_continuous_updates(self) -> None:
        self.start_calls += 1
        if self.fail_start:
            raise RuntimeError("location services off")
        self.updating = True

    def stop_continuous_updates(self) -> None:
        self.stop_calls += 1
        self.updating = False

    def set_background_delivery(self, enabled: bool) -> None:
        self.background = enabled

    def request_one_shot_sample(self) -> None:
        self.one_shot_requests += 1

    # -- test drivers ---------------------------------------------------

    def emit_sample(self, sample: LocationSample) -> None:
        assert self.callbacks is not None
        self.callbacks.on_sample(sample)

    def emit_error(self, cause: BaseException) -> None:
        assert self.callbacks is not None
        self.callbacks.on_error(cause)

    def change_authorization(self, state: AuthorizationState) -> None:
        self.state = state
        if self.callbacks is not None:
            self.callbacks.on_authorization_changed(state)


@dataclass
class FakeCollector:
    positions: list[tuple[str, float, float]] = field(default_factory=list)
    historic: list[HistoricRecord] = field(default_factory=list)
    historic_completed: list[int] = field(default_factory=list)
    historic_delays: dict[int, float] = field(default_factory=dict)
    emergency_calls: list[tuple[str, bool]] = field(default_factory=list)
    emergency_acks: list[bool] = field(default_factory=list)
    emergency_unreachable: bool = False
    terminated: list[str] = field(default_factory=list)
    fail_historic: bool = False
    fail_positions: bool = False

    async def submit_position(self, user_id: str, latitude: float, longitude: float) -> int:
        self.positions.append((user_id, latitude, longitude))
        if self.fail_positions:
            raise DeliveryError("HTTP 502", status_code=502, endpoint="/nadadorposicion/agregar")
        return 200

    async def submit_historic_point(self, record: HistoricRecord) -> int:
        self.historic.append(record)
        delay = self.historic_delays.get(record.sequence, 0.0)
        if delay:
            await asyncio.sleep(delay)
        if self.fail_historic:
            raise DeliveryError("HTTP 500", status_code=500, endpoint="/nadadorhistoricorutas/agregar")
        self.historic_completed.append(record.sequence)
        return 201

    async def submit_emergency(self, user_id: str, active: bool) -> bool:
        self.emergency_calls.append((user_id, active))
        if self.emergency_unreachable:
            raise DeliveryError("Request failed: connection reset", endpoint="/nadadorposicion/emergency")
        return self.emergency_acks.pop(0) if self.emergency_acks else True

    async def terminate_tracking(self, user_id: str) -> int:
        self.terminated.append(user_id)
        return 200


@pytest.fixture
def config() -> GeotraserConfig:
    return GeotraserConfig(user_id="swimmer-7", permission_grace_seconds=0.05, shutdown_drain_timeout=1.0)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def collector() -> FakeCollector:
    return FakeCollector()
