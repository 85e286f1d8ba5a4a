"""Location update stream.

Republishes provider samples and errors to subscribers, and keeps the
most recent of each for diagnostics.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass

from pygeotraser.models.sample import LocationSample

_logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class _Subscription:
    on_sample: Callable[[LocationSample], None] | None
    on_error: Callable[[BaseException], None] | None


class LocationUpdateStream:
    """Fan-out of provider samples/errors.  Must be driven from the event loop."""

    def __init__(self) -> None:
        self._last_location: LocationSample | None = None
        self._last_error: BaseException | None = None
        self._subscriptions: list[_Subscription] = []

    @property
    def last_location(self) -> LocationSample | None:
        return self._last_location

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        *,
        on_sample: Callable[[LocationSample], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> Callable[[], None]:
        """Register handlers; returns an idempotent unsubscribe callable."""
        subscription = _Subscription(on_sample=on_sample, on_error=on_error)
        self._subscriptions.append(subscription)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscriptions.remove(subscription)

        return _unsubscribe

    def publish_sample(self, sample: LocationSample) -> None:
        self._last_location = sample
        self._last_error = None
        # Snapshot: handlers may unsubscribe while we iterate.
        for subscription in list(self._subscriptions):
            if subscription.on_sample is None:
                continue
            try:
                subscription.on_sample(sample)
            except Exception:
                _logger.warning("Sample subscriber failed", exc_info=True)

    def publish_error(self, cause: BaseException) -> None:
        self._last_error = cause
        _logger.debug("Provider error published: %r", cause)
        for subscription in list(self._subscriptions):
            if subscription.on_error is None:
                continue
            try:
                subscription.on_error(cause)
            except Exception:
                _logger.warning("Error subscriber failed", exc_info=True)
