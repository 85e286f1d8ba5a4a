"""Remote collector contract and its HTTP implementation."""

from __future__ import annotations

from typing import Protocol

from pygeotraser._api import historic as _historic_api
from pygeotraser._api import positions as _positions_api
from pygeotraser._transport import Transport
from pygeotraser.config import GeotraserConfig
from pygeotraser.models.historic import HistoricRecord


class RemoteCollector(Protocol):
    """Writes the coordinator sends to the backend.

    Every method except :meth:`submit_emergency` is used fire-and-forget;
    implementations signal failure by raising
    :class:`~pygeotraser.exceptions.DeliveryError`.
    """

    async def submit_position(self, user_id: str, latitude: float, longitude: float) -> int:
        ...

    async def submit_historic_point(self, record: HistoricRecord) -> int:
        ...

    async def submit_emergency(self, user_id: str, active: bool) -> bool:
        ...

    async def terminate_tracking(self, user_id: str) -> int:
        ...


class HttpCollector:
    """:class:`RemoteCollector` backed by the collector's JSON-over-HTTP API."""

    def __init__(self, config: GeotraserConfig, transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def submit_position(self, user_id: str, latitude: float, longitude: float) -> int:
        return await _positions_api.submit_position(self._config, self._transport, user_id, latitude, longitude)

    async def submit_historic_point(self, record: HistoricRecord) -> int:
        return await _historic_api.submit_historic_point(self._config, self._transport, record)

    async def submit_emergency(self, user_id: str, active: bool) -> bool:
        return await _positions_api.submit_emergency(self._config, self._transport, user_id, active)

    async def terminate_tracking(self, user_id: str) -> int:
        return await _positions_api.terminate_tracking(self._config, self._transport, user_id)
