"""Location provider capability and the bridge that marshals its callbacks.

Providers wrap a platform location service and may deliver callbacks on
any thread.  :class:`ProviderBridge` is the object handed to the provider;
it forwards every callback onto the owning asyncio loop with
``call_soon_threadsafe`` so all shared state is only touched from there.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.sample import LocationSample

_logger = logging.getLogger(__name__)


class ProviderCallbacks(Protocol):
    """Callback channels a provider reports into."""

    def on_sample(self, sample: LocationSample) -> None:
        ...

    def on_authorization_changed(self, state: AuthorizationState) -> None:
        ...

    def on_error(self, cause: BaseException) -> None:
        ...


class LocationProvider(Protocol):
    """Device location capability.

    ``request_permission`` and ``request_one_shot_sample`` are asynchronous
    in nature: their outcome arrives later through the callbacks.  A
    permission failure should be reported through ``on_error`` as a
    :class:`~pygeotraser.exceptions.LocationPermissionError`.
    """

    def current_authorization_state(self) -> AuthorizationState:
        ...

    def request_permission(self, level: PermissionLevel) -> None:
        ...

    def start_continuous_updates(self) -> None:
        ...

    def stop_continuous_updates(self) -> None:
        ...

    def set_background_delivery(self, enabled: bool) -> None:
        ...

    def request_one_shot_sample(self) -> None:
        ...

    def set_callbacks(self, callbacks: ProviderCallbacks | None) -> None:
        ...


class ProviderBridge:
    """Thread-safe :class:`ProviderCallbacks` that hops onto *loop*."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_sample: Callable[[LocationSample], None],
        on_authorization_changed: Callable[[AuthorizationState], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        self._loop = loop
        self._on_sample = on_sample
        self._on_authorization_changed = on_authorization_changed
        self._on_error = on_error
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Drop every callback that arrives from now on."""
        self._closed = True

    def on_sample(self, sample: LocationSample) -> None:
        self._dispatch(self._on_sample, sample)

    def on_authorization_changed(self, state: AuthorizationState) -> None:
        self._dispatch(self._on_authorization_changed, AuthorizationState(state))

    def on_error(self, cause: BaseException) -> None:
        self._dispatch(self._on_error, cause)

    def _dispatch(self, handler: Callable[[Any], None], arg: Any) -> None:
        if self._closed:
            _logger.debug("Provider callback after close dropped: %r", arg)
            return
        try:
            self._loop.call_soon_threadsafe(self._deliver, handler, arg)
        except RuntimeError:
            # Loop already closed (interpreter or client shutting down).
            _logger.debug("Provider callback dropped, event loop is closed", exc_info=True)

    def _deliver(self, handler: Callable[[Any], None], arg: Any) -> None:
        # Re-checked on the loop: close() may have happened after scheduling.
        if self._closed:
            return
        handler(arg)
