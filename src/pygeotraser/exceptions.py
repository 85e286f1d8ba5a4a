"""Custom exception hierarchy for pygeotraser."""

from __future__ import annotations

from typing import Any


class GeotraserError(Exception):
    """Base exception for all pygeotraser errors."""


class GeotraserConfigError(GeotraserError):
    """Invalid or missing configuration."""


class AcquisitionError(GeotraserError):
    """A one-shot location acquisition did not produce a sample."""


class LocationPermissionError(AcquisitionError):
    """Location permission is denied or restricted.

    Terminal for the attempted operation: starting a session or acquiring a
    position will not succeed until the user grants access again.  Also
    raised by :meth:`GeotraserClient.start_session`, hence the shared
    :class:`AcquisitionError` base is only a convenience for one-shot callers.
    """


class AcquisitionTimeoutError(AcquisitionError):
    """No sample arrived within the requested duration."""

    def __init__(self, message: str, *, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(message)


class AcquisitionCancelledError(AcquisitionError):
    """The pending acquisition was cancelled before it settled."""


class AcquisitionInProgressError(AcquisitionError):
    """Another one-shot acquisition is already pending (calls are not queued)."""


class ProviderError(AcquisitionError):
    """The location provider reported a non-permission failure."""

    def __init__(self, message: str, *, cause: Any = None) -> None:
        self.cause = cause
        super().__init__(message)


class DeliveryError(GeotraserError):
    """A remote submission failed (network, timeout, non-2xx).

    Fire-and-forget paths log this and move on; it never unwinds session
    state and is never retried.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
