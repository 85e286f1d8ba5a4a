"""pygeotraser - Async location-tracking session coordinator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygeotraser")
except PackageNotFoundError:
    __version__ = "0+local"
from pygeotraser.client import GeotraserClient
from pygeotraser.collector import HttpCollector, RemoteCollector
from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import (
    AcquisitionCancelledError,
    AcquisitionError,
    AcquisitionInProgressError,
    AcquisitionTimeoutError,
    DeliveryError,
    GeotraserConfigError,
    GeotraserError,
    LocationPermissionError,
    ProviderError,
)
from pygeotraser.models import (
    AuthorizationState,
    DeliveryOutcome,
    HistoricRecord,
    LocationSample,
    PermissionLevel,
    SequencedSample,
    SessionHandle,
    SessionState,
    TrackingSession,
)
from pygeotraser.provider import LocationProvider, ProviderCallbacks

__all__ = [
    "__version__",
    "AcquisitionCancelledError",
    "AcquisitionError",
    "AcquisitionInProgressError",
    "AcquisitionTimeoutError",
    "AuthorizationState",
    "DeliveryError",
    "DeliveryOutcome",
    "GeotraserClient",
    "GeotraserConfig",
    "GeotraserConfigError",
    "GeotraserError",
    "HistoricRecord",
    "HttpCollector",
    "LocationPermissionError",
    "LocationProvider",
    "LocationSample",
    "PermissionLevel",
    "ProviderCallbacks",
    "ProviderError",
    "RemoteCollector",
    "SequencedSample",
    "SessionHandle",
    "SessionState",
    "TrackingSession",
]
