"""Tracking session state.

``TrackingSession`` is mutable and owned by the state machine; everything
handed out to callers is a frozen snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from pygeotraser.models.sample import LocationSample


class SessionState(StrEnum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"


class SessionHandle(BaseModel):
    """Identity of a started session, returned to the caller of ``start``."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    user_id: str
    started_at: datetime


class SequencedSample(BaseModel):
    """An accepted sample tagged with its position in the session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    sequence: int
    sample: LocationSample


@dataclass(slots=True)
class TrackingSession:
    """One continuous tracking run.

    ``sequence`` is 0 until the first sample is accepted; the first accepted
    sample gets 1 and every following one the previous value plus one.
    """

    session_id: str
    user_id: str
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sequence: int = 0
    first_sample: LocationSample | None = None
    active: bool = False

    def accept(self, sample: LocationSample) -> SequencedSample:
        if self.first_sample is None:
            self.first_sample = sample
        self.sequence += 1
        return SequencedSample(session_id=self.session_id, sequence=self.sequence, sample=sample)

    def handle(self) -> SessionHandle:
        return SessionHandle(session_id=self.session_id, user_id=self.user_id, started_at=self.started_at)
