"""Data models for pygeotraser."""

from pygeotraser.models.authorization import AuthorizationState, PermissionLevel
from pygeotraser.models.delivery import DeliveryOutcome
from pygeotraser.models.historic import HistoricRecord, format_local_date, format_local_date_time
from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import SequencedSample, SessionHandle, SessionState, TrackingSession

__all__ = [
    "AuthorizationState",
    "DeliveryOutcome",
    "HistoricRecord",
    "LocationSample",
    "PermissionLevel",
    "SequencedSample",
    "SessionHandle",
    "SessionState",
    "TrackingSession",
    "format_local_date",
    "format_local_date_time",
]
