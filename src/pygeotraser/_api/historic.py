"""Historic route endpoint (/nadadorhistoricorutas/agregar)."""

from __future__ import annotations

from pygeotraser._constants import HISTORIC_ENDPOINT
from pygeotraser._transport import Transport
from pygeotraser.config import GeotraserConfig
from pygeotraser.models.historic import HistoricRecord


async def submit_historic_point(config: GeotraserConfig, transport: Transport, record: HistoricRecord) -> int:
    """Append one point to the session's route."""
    return await transport.post_json(HISTORIC_ENDPOINT, record.to_payload(), timeout=config.historic_timeout)
