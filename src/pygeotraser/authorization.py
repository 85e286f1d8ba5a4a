"""Mirror of the device's location permission state."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.provider import LocationProvider

_logger = logging.getLogger(__name__)

AuthorizationListener = Callable[[AuthorizationState], None]


class AuthorizationTracker:
    """Observable authorization state plus permission requests.

    The state only changes through :meth:`handle_authorization_changed`,
    which the provider bridge calls on the event loop.
    """

    def __init__(self, provider: LocationProvider) -> None:
        self._provider = provider
        self._state = AuthorizationState(provider.current_authorization_state())
        self._listeners: list[AuthorizationListener] = []
        self._waiters: list[asyncio.Future[AuthorizationState]] = []

    @property
    def current_state(self) -> AuthorizationState:
        return self._state

    def request_permission(self, level: PermissionLevel) -> None:
        """Ask the provider for *level* unless it is already granted.

        Denied/restricted states are left alone since the platform will not
        prompt again.  Never raises; the answer arrives through the state
        callback.
        """
        state = self._state
        if state.satisfies(level):
            return
        if state.is_denied:
            _logger.debug("Permission %s not requested, state is %s", level, state)
            return
        try:
            self._provider.request_permission(level)
        except Exception:
            _logger.warning("Permission request for %s failed", level, exc_info=True)

    def handle_authorization_changed(self, state: AuthorizationState) -> None:
        previous = self._state
        self._state = state
        _logger.debug("Authorization changed %s -> %s", previous, state)

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(state)

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                _logger.warning("Authorization listener failed", exc_info=True)

    def add_listener(self, listener: AuthorizationListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    async def wait_for_change(self, timeout: float) -> AuthorizationState:
        """Wait up to *timeout* seconds for the next state change.

        Returns the current state either way; a timeout is not an error.
        """
        if timeout <= 0:
            return self._state
        waiter: asyncio.Future[AuthorizationState] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout)
        except TimeoutError:
            return self._state
        finally:
            with contextlib.suppress(ValueError):
                self._waiters.remove(waiter)
