"""Single-shot location acquisition.

``acquire_once`` races the next provider sample against a timer.  Every
producer (sample, provider error, permission denial, timer, cancellation)
tries to settle the same :class:`ResultSlot`; only the first attempt counts
and the slot's release tears down the subscriptions and the timer so the
next call can proceed immediately.
"""

from __future__ import annotations

import asyncio
import logging

from pygeotraser.authorization import AuthorizationTracker
from pygeotraser.exceptions import (
    AcquisitionCancelledError,
    AcquisitionInProgressError,
    AcquisitionTimeoutError,
    LocationPermissionError,
    ProviderError,
)
from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.sample import LocationSample
from pygeotraser.provider import LocationProvider
from pygeotraser.stream import LocationUpdateStream

_logger = logging.getLogger(__name__)


def _as_acquisition_error(cause: BaseException) -> BaseException:
    if isinstance(cause, (LocationPermissionError, ProviderError)):
        return cause
    return ProviderError(f"Location provider failed: {cause}", cause=cause)


class ResultSlot:
    """Settle-once result cell for one pending acquisition.

    Each ``settle_*`` method returns ``True`` only for the attempt that
    actually settled the slot; later attempts are no-ops returning
    ``False``.
    """

    def __init__(self, future: asyncio.Future[LocationSample]) -> None:
        self._future = future

    @property
    def future(self) -> asyncio.Future[LocationSample]:
        return self._future

    @property
    def settled(self) -> bool:
        return self._future.done()

    def settle_sample(self, sample: LocationSample) -> bool:
        if self._future.done():
            return False
        self._future.set_result(sample)
        return True

    def settle_error(self, exc: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(exc)
        return True

    def cancel(self) -> bool:
        return self.settle_error(AcquisitionCancelledError("Location acquisition cancelled"))


class AcquisitionCoordinator:
    """Runs at most one one-shot acquisition at a time.

    Only asks the provider for a single sample; the continuous-update
    subscription belongs to the tracking state machine and is never
    touched here.
    """

    def __init__(
        self,
        *,
        provider: LocationProvider,
        authorization: AuthorizationTracker,
        stream: LocationUpdateStream,
        default_timeout: float,
    ) -> None:
        self._provider = provider
        self._authorization = authorization
        self._stream = stream
        self._default_timeout = default_timeout
        self._slot: ResultSlot | None = None

    @property
    def in_progress(self) -> bool:
        return self._slot is not None

    def cancel(self) -> bool:
        """Settle the pending acquisition with :class:`AcquisitionCancelledError`.

        Returns whether there was an unsettled acquisition to cancel.
        """
        slot = self._slot
        if slot is None:
            return False
        return slot.cancel()

    async def acquire_once(self, timeout: float | None = None) -> LocationSample:
        """Wait for exactly one location sample.

        Parameters
        ----------
        timeout
            Seconds to wait.  Falls back to ``config.acquire_timeout``.

        Returns
        -------
        LocationSample
            The first sample delivered after the call.

        Raises
        ------
        AcquisitionInProgressError
            Another acquisition is pending.
        LocationPermissionError
            Location access is denied or restricted.
        AcquisitionTimeoutError
            No sample within *timeout*.
        ProviderError
            The provider reported a failure.
        AcquisitionCancelledError
            :meth:`cancel` was called before a sample arrived.
        """
        effective_timeout = self._default_timeout if timeout is None else timeout
        if effective_timeout <= 0:
            raise ValueError(f"timeout must be positive, got {effective_timeout}")
        if self._slot is not None:
            raise AcquisitionInProgressError("Another location request is already in progress")

        state = self._authorization.current_state
        if state.is_denied:
            raise LocationPermissionError(f"Location permission not granted ({state})")

        loop = asyncio.get_running_loop()
        slot = ResultSlot(loop.create_future())
        self._slot = slot
        unsubscribe = self._stream.subscribe(
            on_sample=slot.settle_sample,
            on_error=lambda cause: slot.settle_error(_as_acquisition_error(cause)),
        )

        def _on_authorization(new_state: AuthorizationState) -> None:
            if new_state.is_denied:
                slot.settle_error(LocationPermissionError(f"Location permission not granted ({new_state})"))

        remove_listener = self._authorization.add_listener(_on_authorization)
        timer = loop.call_later(
            effective_timeout,
            slot.settle_error,
            AcquisitionTimeoutError(
                f"Timed out after {effective_timeout}s waiting for a location",
                timeout=effective_timeout,
            ),
        )
        try:
            if state is AuthorizationState.UNDETERMINED:
                # Proceed regardless; a denial or a sample, whichever comes first, settles the slot.
                self._authorization.request_permission(PermissionLevel.WHEN_IN_USE)
            try:
                self._provider.request_one_shot_sample()
            except Exception as exc:
                slot.settle_error(_as_acquisition_error(exc))
            return await slot.future
        finally:
            timer.cancel()
            unsubscribe()
            remove_listener()
            if self._slot is slot:
                self._slot = None
            _logger.debug("One-shot acquisition released (cancelled=%s)", slot.future.cancelled())
