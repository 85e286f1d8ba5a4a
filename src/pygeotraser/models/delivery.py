"""Outcome of a fire-and-forget submission."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class DeliveryOutcome(BaseModel):
    """What happened to the latest submission on an endpoint.

    Parameters
    ----------
    endpoint : str
        Collector path the write went to.
    ok : bool
        Whether the collector answered with a 2xx status.
    status_code : int or None
        HTTP status, ``None`` when no response arrived (network error,
        timeout).
    sequence : int or None
        Sequence number of the submitted point, for historic writes.
    error : str or None
        Failure description when ``ok`` is false.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    ok: bool
    status_code: int | None = None
    sequence: int | None = None
    error: str | None = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
