"""SOS flag kept in step with the collector's acknowledgment."""

from __future__ import annotations

import logging

from pygeotraser.collector import RemoteCollector
from pygeotraser.exceptions import DeliveryError

_logger = logging.getLogger(__name__)


class EmergencyToggle:
    """Local emergency state; only flips after the collector acknowledges."""

    def __init__(self, collector: RemoteCollector, user_id: str) -> None:
        self._collector = collector
        self._user_id = user_id
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def reset(self) -> None:
        self._active = False

    async def set(self, active: bool) -> bool:
        """Ask the collector to set the flag to *active*.

        Returns whether the collector acknowledged.  Local state is left
        unchanged unless it did.
        """
        try:
            acknowledged = await self._collector.submit_emergency(self._user_id, active)
        except DeliveryError as exc:
            _logger.warning("Emergency %s not delivered: %s", "raise" if active else "clear", exc)
            return False
        if not acknowledged:
            _logger.warning("Emergency %s not acknowledged by collector", "raise" if active else "clear")
            return False
        self._active = active
        _logger.debug("Emergency state is now %s", active)
        return True
