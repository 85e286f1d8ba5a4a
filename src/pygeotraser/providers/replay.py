"""Provider that replays a recorded route.

Samples are emitted from a worker thread, the same way a platform location
service calls back from its own thread, so everything downstream goes
through the bridge's loop hop.
"""

from __future__ import annotations

import csv
import logging
import threading
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from pygeotraser.exceptions import LocationPermissionError
from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.sample import LocationSample
from pygeotraser.provider import ProviderCallbacks

_logger = logging.getLogger(__name__)


def read_route_csv(path: str | Path) -> list[tuple[float, float]]:
    """Read ``lat,lon`` rows.  A non-numeric first row is treated as a header."""
    points: list[tuple[float, float]] = []
    with open(path, newline="", encoding="utf-8") as fh:
        for index, row in enumerate(csv.reader(fh)):
            if not row or not "".join(row).strip():
                continue
            try:
                lat, lon = float(row[0]), float(row[1])
            except (ValueError, IndexError):
                if index == 0:
                    continue
                raise ValueError(f"{path}: row {index + 1} is not a lat,lon pair: {row!r}") from None
            points.append((lat, lon))
    return points


class ReplayLocationProvider:
    """:class:`~pygeotraser.provider.LocationProvider` over a fixed list of points.

    Parameters
    ----------
    points
        ``(latitude, longitude)`` pairs, replayed in order.
    interval
        Seconds between continuous samples.
    authorization
        Initial authorization state.
    grant_on_request
        State reported after a permission request while undetermined.
        ``None`` leaves the request unanswered.
    repeat
        Start over at the first point once the route is exhausted.
    """

    def __init__(
        self,
        points: Sequence[tuple[float, float]],
        *,
        interval: float = 1.0,
        authorization: AuthorizationState = AuthorizationState.AUTHORIZED_ALWAYS,
        grant_on_request: AuthorizationState | None = AuthorizationState.AUTHORIZED_ALWAYS,
        repeat: bool = False,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        if not points:
            raise ValueError("route must contain at least one point")
        self._points = list(points)
        self._interval = interval
        self._state = authorization
        self._grant_on_request = grant_on_request
        self._repeat = repeat
        self._clock = clock

        self._lock = threading.Lock()
        self._cursor = 0
        self._callbacks: ProviderCallbacks | None = None
        self._worker: threading.Thread | None = None
        self._stop = threading.Event()
        self._background = False

    @property
    def background_delivery(self) -> bool:
        return self._background

    @property
    def is_updating(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_alive()

    def set_callbacks(self, callbacks: ProviderCallbacks | None) -> None:
        self._callbacks = callbacks

    def current_authorization_state(self) -> AuthorizationState:
        return self._state

    def request_permission(self, level: PermissionLevel) -> None:
        if self._state is not AuthorizationState.UNDETERMINED and not (
            level is PermissionLevel.ALWAYS and self._state is AuthorizationState.AUTHORIZED_WHEN_IN_USE
        ):
            return
        if self._grant_on_request is None:
            return
        self._state = self._grant_on_request
        callbacks = self._callbacks
        if callbacks is not None:
            callbacks.on_authorization_changed(self._state)

    def set_background_delivery(self, enabled: bool) -> None:
        self._background = enabled

    def start_continuous_updates(self) -> None:
        if self.is_updating:
            return
        self._stop.clear()
        worker = threading.Thread(target=self._run, name="replay-provider", daemon=True)
        self._worker = worker
        worker.start()

    def stop_continuous_updates(self) -> None:
        self._stop.set()
        worker = self._worker
        self._worker = None
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=max(self._interval, 0.1) * 2)

    def request_one_shot_sample(self) -> None:
        threading.Thread(target=self._emit_one_shot, name="replay-one-shot", daemon=True).start()

    def _emit_one_shot(self) -> None:
        callbacks = self._callbacks
        if callbacks is None:
            return
        if not self._state.is_authorized:
            callbacks.on_error(LocationPermissionError(f"Location permission not granted ({self._state})"))
            return
        with self._lock:
            lat, lon = self._points[min(self._cursor, len(self._points) - 1)]
        callbacks.on_sample(LocationSample(latitude=lat, longitude=lon, captured_at=self._clock()))

    def _next_point(self) -> tuple[float, float] | None:
        with self._lock:
            if self._cursor >= len(self._points):
                if not self._repeat:
                    return None
                self._cursor = 0
            point = self._points[self._cursor]
            self._cursor += 1
            return point

    def _run(self) -> None:
        _logger.debug("Replay started with %d point(s)", len(self._points))
        while not self._stop.is_set():
            point = self._next_point()
            if point is None:
                _logger.debug("Replay route exhausted")
                return
            callbacks = self._callbacks
            if callbacks is not None:
                lat, lon = point
                callbacks.on_sample(LocationSample(latitude=lat, longitude=lon, captured_at=self._clock()))
            if self._stop.wait(self._interval):
                return
