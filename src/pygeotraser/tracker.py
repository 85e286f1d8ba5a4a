"""Tracking session state machine.

``idle -> starting -> active -> stopping -> idle``.  Owns the session
identifier, the sequence counter and the provider's continuous-update
subscription.  Every method runs on the client's event loop; remote writes
are spawned and never awaited here.
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from collections.abc import Callable

from pygeotraser._constants import POSITION_ENDPOINT
from pygeotraser._tasks import BackgroundTasks
from pygeotraser.authorization import AuthorizationTracker
from pygeotraser.collector import RemoteCollector
from pygeotraser.config import GeotraserConfig
from pygeotraser.emergency import EmergencyToggle
from pygeotraser.exceptions import DeliveryError, LocationPermissionError, ProviderError
from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.delivery import DeliveryOutcome
from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import SequencedSample, SessionHandle, SessionState, TrackingSession
from pygeotraser.provider import LocationProvider
from pygeotraser.recorder import HistoricRouteRecorder
from pygeotraser.stream import LocationUpdateStream

_logger = logging.getLogger(__name__)

SampleListener = Callable[[SequencedSample], None]


def _new_session_id() -> str:
    return str(uuid.uuid4()).upper()


class TrackingSessionMachine:
    def __init__(
        self,
        *,
        config: GeotraserConfig,
        provider: LocationProvider,
        authorization: AuthorizationTracker,
        stream: LocationUpdateStream,
        recorder: HistoricRouteRecorder,
        collector: RemoteCollector,
        emergency: EmergencyToggle,
        tasks: BackgroundTasks,
        session_id_factory: Callable[[], str] = _new_session_id,
    ) -> None:
        self._config = config
        self._provider = provider
        self._authorization = authorization
        self._stream = stream
        self._recorder = recorder
        self._collector = collector
        self._emergency = emergency
        self._tasks = tasks
        self._session_id_factory = session_id_factory

        self._state = SessionState.IDLE
        self._session: TrackingSession | None = None
        self._last_session: TrackingSession | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[SampleListener] = []
        self._last_error: BaseException | None = None
        self._last_position_outcome: DeliveryOutcome | None = None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> TrackingSession | None:
        """The running session (``None`` while idle)."""
        return self._session

    @property
    def last_session(self) -> TrackingSession | None:
        """The most recently stopped session."""
        return self._last_session

    @property
    def last_error(self) -> BaseException | None:
        """Latest provider error seen while active.  Diagnostic only."""
        return self._last_error

    @property
    def last_position_outcome(self) -> DeliveryOutcome | None:
        return self._last_position_outcome

    def add_listener(self, listener: SampleListener) -> Callable[[], None]:
        """Observe accepted samples; returns a callable that removes *listener*."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self) -> SessionHandle:
        """Start a new session.

        No-op returning the current handle when a session is already
        starting or running.

        Raises
        ------
        LocationPermissionError
            Location access is denied or restricted.  The machine is idle
            again and the provider was not started.
        ProviderError
            The provider refused to start continuous updates.
        """
        if self._state is not SessionState.IDLE:
            assert self._session is not None  # noqa: S101
            _logger.debug("start ignored in state %s", self._state)
            return self._session.handle()

        self._state = SessionState.STARTING
        session = TrackingSession(session_id=self._session_id_factory(), user_id=self._config.user_id)
        self._session = session
        self._last_error = None
        self._emergency.reset()

        background_enabled = False
        try:
            self._authorization.request_permission(PermissionLevel.ALWAYS)
            state = self._authorization.current_state
            if state is AuthorizationState.UNDETERMINED:
                self._authorization.request_permission(PermissionLevel.WHEN_IN_USE)
                # Best effort: the prompt may still be open when this returns.
                state = await self._authorization.wait_for_change(self._config.permission_grace_seconds)
            if state.is_denied:
                raise LocationPermissionError(f"Location permission not granted ({state})")

            self._provider.set_background_delivery(True)
            background_enabled = True
            try:
                self._provider.start_continuous_updates()
            except Exception as exc:
                raise ProviderError(f"Could not start location updates: {exc}", cause=exc) from exc
        except BaseException:
            # Covers cancellation while waiting for the permission answer.
            if background_enabled:
                self._provider.set_background_delivery(False)
            self._abort_start()
            raise

        self._unsubscribe = self._stream.subscribe(on_sample=self._on_sample, on_error=self._on_error)
        session.active = True
        self._state = SessionState.ACTIVE
        _logger.debug("Session %s active for user %s", session.session_id, session.user_id)
        return session.handle()

    async def stop(self) -> None:
        """Stop the running session.  No-op while idle.

        The terminate notification is sent after the machine is already
        idle; in-flight submissions are left to finish on their own.
        """
        if self._state is SessionState.IDLE:
            _logger.debug("stop ignored, no session running")
            return
        if self._state is SessionState.STARTING:
            _logger.debug("stop ignored while session is starting")
            return

        self._state = SessionState.STOPPING
        session = self._session
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        try:
            self._provider.stop_continuous_updates()
        finally:
            self._provider.set_background_delivery(False)
            if session is not None:
                session.active = False
            self._last_session = session
            self._session = None
            self._state = SessionState.IDLE

        user_id = self._config.user_id
        _logger.debug("Session %s stopped", session.session_id if session else None)
        self._tasks.spawn(self._terminate(user_id), name=f"terminate-{user_id}")

    def _abort_start(self) -> None:
        self._session = None
        self._state = SessionState.IDLE

    # ------------------------------------------------------------------
    # Stream handlers
    # ------------------------------------------------------------------

    def _on_sample(self, sample: LocationSample) -> None:
        session = self._session
        if self._state is not SessionState.ACTIVE or session is None:
            return

        self._last_error = None
        sequenced = session.accept(sample)
        self._recorder.record(sample, session)
        self._tasks.spawn(
            self._submit_position(session.user_id, sample),
            name=f"position-{session.session_id}-{sequenced.sequence}",
        )

        for listener in list(self._listeners):
            try:
                listener(sequenced)
            except Exception:
                _logger.warning("Sample listener failed", exc_info=True)

    def _on_error(self, cause: BaseException) -> None:
        self._last_error = cause
        _logger.warning("Provider error during session: %s", cause)

    # ------------------------------------------------------------------
    # Fire-and-forget writes
    # ------------------------------------------------------------------

    async def _submit_position(self, user_id: str, sample: LocationSample) -> None:
        try:
            status = await self._collector.submit_position(user_id, sample.latitude, sample.longitude)
        except DeliveryError as exc:
            self._last_position_outcome = DeliveryOutcome(
                endpoint=exc.endpoint or POSITION_ENDPOINT,
                ok=False,
                status_code=exc.status_code,
                error=str(exc),
            )
            _logger.warning("Current position not delivered: %s", exc)
            return
        self._last_position_outcome = DeliveryOutcome(endpoint=POSITION_ENDPOINT, ok=True, status_code=status)

    async def _terminate(self, user_id: str) -> None:
        try:
            await self._collector.terminate_tracking(user_id)
        except DeliveryError as exc:
            _logger.warning("Terminate tracking not delivered: %s", exc)
