"""Real-time position endpoints.

Endpoints:
  - /nadadorposicion/agregar (current position)
  - /nadadorposicion/emergency/{user_id} (SOS flag)
  - /nadadorposicion/eliminar/{user_id} (end real-time tracking)
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from pygeotraser._constants import EMERGENCY_ENDPOINT, POSITION_ENDPOINT, TERMINATE_ENDPOINT
from pygeotraser._transport import Transport
from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import DeliveryError

_logger = logging.getLogger(__name__)


def _user_path(base: str, user_id: str) -> str:
    return f"{base}/{quote(user_id, safe='')}"


async def submit_position(
    config: GeotraserConfig,
    transport: Transport,
    user_id: str,
    latitude: float,
    longitude: float,
) -> int:
    """Upsert the user's current position in the real-time table."""
    payload = {
        "usuarioid": user_id,
        "nadadorlat": latitude,
        "nadadorlng": longitude,
    }
    return await transport.post_json(POSITION_ENDPOINT, payload, timeout=config.position_timeout)


async def terminate_tracking(config: GeotraserConfig, transport: Transport, user_id: str) -> int:
    """Remove the user from the real-time table."""
    endpoint = _user_path(TERMINATE_ENDPOINT, user_id)
    return await transport.post_json(endpoint, {}, timeout=config.position_timeout)


async def submit_emergency(
    config: GeotraserConfig,
    transport: Transport,
    user_id: str,
    active: bool,
) -> bool:
    """Raise or clear the user's SOS flag.

    Returns
    -------
    bool
        ``True`` when the collector acknowledged with a 2xx status,
        ``False`` when it answered with anything else.

    Raises
    ------
    DeliveryError
        When no response arrived at all (network failure, timeout).
    """
    endpoint = _user_path(EMERGENCY_ENDPOINT, user_id)
    try:
        await transport.post_json(endpoint, {"emergency": active}, timeout=config.position_timeout)
    except DeliveryError as exc:
        if exc.status_code is None:
            raise
        _logger.debug("Emergency update rejected with HTTP %s", exc.status_code)
        return False
    return True
