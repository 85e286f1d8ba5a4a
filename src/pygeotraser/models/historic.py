"""Historic route record, the per-sample wire entity of a session."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import TrackingSession


def format_local_date(moment: datetime) -> str:
    """``YYYY-MM-DD`` in the moment's own (local) time zone."""
    return moment.strftime("%Y-%m-%d")


def format_local_date_time(moment: datetime) -> str:
    """``YYYY-MM-DDTHH:MM:SS.mmm`` local time, without an offset suffix."""
    return moment.replace(tzinfo=None).isoformat(timespec="milliseconds")


class HistoricRecord(BaseModel):
    """One point of a route as the collector stores it.

    Field names are snake_case; :meth:`to_payload` emits the collector's
    keys (``usuario_id``, ``recorrido_id``, ``nadador*``, ``secuencia``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(..., serialization_alias="usuario_id")
    session_id: str = Field(..., serialization_alias="recorrido_id")
    local_date: str = Field(..., serialization_alias="nadadorfecha")
    local_date_time: str = Field(..., serialization_alias="nadadorhora")
    sequence: int = Field(..., ge=1, serialization_alias="secuencia")
    latitude: float = Field(..., serialization_alias="nadadorlat")
    longitude: float = Field(..., serialization_alias="nadadorlng")

    @classmethod
    def build(cls, sample: LocationSample, session: TrackingSession, now: datetime) -> HistoricRecord:
        """Build the record for *sample* using the session's current sequence."""
        return cls(
            user_id=session.user_id,
            session_id=session.session_id,
            local_date=format_local_date(now),
            local_date_time=format_local_date_time(now),
            sequence=session.sequence,
            latitude=sample.latitude,
            longitude=sample.longitude,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
