"""High-level async client tying provider, session machine and collector together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pygeotraser._tasks import BackgroundTasks
from pygeotraser._transport import HttpTransport
from pygeotraser.acquisition import AcquisitionCoordinator
from pygeotraser.authorization import AuthorizationTracker
from pygeotraser.collector import HttpCollector, RemoteCollector
from pygeotraser.config import GeotraserConfig
from pygeotraser.emergency import EmergencyToggle
from pygeotraser.exceptions import GeotraserError
from pygeotraser.links import visualization_url
from pygeotraser.models.authorization import AuthorizationState
from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import SequencedSample, SessionHandle, SessionState, TrackingSession
from pygeotraser.provider import LocationProvider, ProviderBridge
from pygeotraser.recorder import HistoricRouteRecorder
from pygeotraser.stream import LocationUpdateStream
from pygeotraser.tracker import TrackingSessionMachine

_logger = logging.getLogger(__name__)


class GeotraserClient:
    """Async location-tracking client.

    Usage::

        async with GeotraserClient(config, provider) as client:
            handle = await client.start_session()
            ...
            await client.stop_session()

    All methods must be called from the event loop that entered the
    context; the provider may call back from any thread.
    """

    def __init__(
        self,
        config: GeotraserConfig,
        provider: LocationProvider,
        *,
        session: aiohttp.ClientSession | None = None,
        collector: RemoteCollector | None = None,
        on_sample: Callable[[SequencedSample], None] | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._external_session = session is not None
        self._http_session = session
        self._collector = collector
        self._on_sample = on_sample

        self._tasks = BackgroundTasks()
        self._stream = LocationUpdateStream()
        self._bridge: ProviderBridge | None = None
        self._authorization: AuthorizationTracker | None = None
        self._acquisition: AcquisitionCoordinator | None = None
        self._recorder: HistoricRouteRecorder | None = None
        self._emergency: EmergencyToggle | None = None
        self._machine: TrackingSessionMachine | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GeotraserClient:
        loop = asyncio.get_running_loop()
        collector = self._collector
        if collector is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            collector = HttpCollector(self._config, HttpTransport(self._config, self._http_session))

        authorization = AuthorizationTracker(self._provider)
        self._authorization = authorization
        self._acquisition = AcquisitionCoordinator(
            provider=self._provider,
            authorization=authorization,
            stream=self._stream,
            default_timeout=self._config.acquire_timeout,
        )
        self._recorder = HistoricRouteRecorder(collector, self._tasks)
        self._emergency = EmergencyToggle(collector, self._config.user_id)
        self._machine = TrackingSessionMachine(
            config=self._config,
            provider=self._provider,
            authorization=authorization,
            stream=self._stream,
            recorder=self._recorder,
            collector=collector,
            emergency=self._emergency,
            tasks=self._tasks,
        )
        if self._on_sample is not None:
            self._machine.add_listener(self._on_sample)

        self._bridge = ProviderBridge(
            loop=loop,
            on_sample=self._stream.publish_sample,
            on_authorization_changed=authorization.handle_authorization_changed,
            on_error=self._stream.publish_error,
        )
        self._provider.set_callbacks(self._bridge)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._machine is not None and self._machine.state is SessionState.ACTIVE:
            await self._machine.stop()
        if self._acquisition is not None:
            self._acquisition.cancel()

        self._provider.set_callbacks(None)
        if self._bridge is not None:
            self._bridge.close()
            self._bridge = None

        cancelled = await self._tasks.drain(self._config.shutdown_drain_timeout)
        if cancelled:
            _logger.debug("%d submission(s) still in flight at shutdown were cancelled", cancelled)

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._machine = None
        self._acquisition = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_machine(self) -> TrackingSessionMachine:
        if self._machine is None:
            raise GeotraserError("Client not initialized. Use 'async with GeotraserClient(...) as client:'")
        return self._machine

    def _require_acquisition(self) -> AcquisitionCoordinator:
        if self._acquisition is None:
            raise GeotraserError("Client not initialized. Use 'async with GeotraserClient(...) as client:'")
        return self._acquisition

    def _require_emergency(self) -> EmergencyToggle:
        if self._emergency is None:
            raise GeotraserError("Client not initialized. Use 'async with GeotraserClient(...) as client:'")
        return self._emergency

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def acquire_once(self, timeout: float | None = None) -> LocationSample:
        """Acquire exactly one position, independent of any session."""
        return await self._require_acquisition().acquire_once(timeout)

    def cancel_acquisition(self) -> bool:
        """Cancel a pending :meth:`acquire_once`; returns whether one was pending."""
        return self._require_acquisition().cancel()

    async def start_session(self) -> SessionHandle:
        """Start tracking.  See :meth:`TrackingSessionMachine.start`."""
        return await self._require_machine().start()

    async def stop_session(self) -> None:
        await self._require_machine().stop()

    async def set_emergency(self, active: bool) -> bool:
        """Raise or clear the SOS flag; returns whether the collector acknowledged."""
        return await self._require_emergency().set(active)

    def add_sample_listener(self, listener: Callable[[SequencedSample], None]) -> Callable[[], None]:
        return self._require_machine().add_listener(listener)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session_state(self) -> SessionState:
        if self._machine is None:
            return SessionState.IDLE
        return self._machine.state

    @property
    def session(self) -> TrackingSession | None:
        return self._machine.session if self._machine is not None else None

    @property
    def emergency_active(self) -> bool:
        return self._emergency.active if self._emergency is not None else False

    @property
    def authorization_state(self) -> AuthorizationState:
        if self._authorization is None:
            return AuthorizationState(self._provider.current_authorization_state())
        return self._authorization.current_state

    @property
    def last_location(self) -> LocationSample | None:
        return self._stream.last_location

    @property
    def last_error(self) -> BaseException | None:
        return self._stream.last_error

    @property
    def recorder(self) -> HistoricRouteRecorder | None:
        return self._recorder

    @property
    def visualization_url(self) -> str | None:
        """Live map page for the configured group, if it has one."""
        return visualization_url(self._config.group_id)
