"""Historic route recorder.

One fire-and-forget submission per accepted sample.  Each record carries
its own sequence number, so submissions may complete in any order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pygeotraser._constants import HISTORIC_ENDPOINT
from pygeotraser._redact import redact_for_log
from pygeotraser._tasks import BackgroundTasks
from pygeotraser.collector import RemoteCollector
from pygeotraser.exceptions import DeliveryError
from pygeotraser.models.delivery import DeliveryOutcome
from pygeotraser.models.historic import HistoricRecord
from pygeotraser.models.sample import LocationSample
from pygeotraser.models.session import TrackingSession

_logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class HistoricRouteRecorder:
    def __init__(
        self,
        collector: RemoteCollector,
        tasks: BackgroundTasks,
        *,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._collector = collector
        self._tasks = tasks
        self._clock = clock
        self._last_outcome: DeliveryOutcome | None = None
        self._submitted = 0
        self._failed = 0

    @property
    def last_outcome(self) -> DeliveryOutcome | None:
        """Result of the most recently *completed* submission."""
        return self._last_outcome

    @property
    def submitted_count(self) -> int:
        return self._submitted

    @property
    def failed_count(self) -> int:
        return self._failed

    def record(self, sample: LocationSample, session: TrackingSession) -> HistoricRecord:
        """Build the record for *sample* and submit it in the background.

        The session's sequence must already have been advanced for this
        sample.
        """
        record = HistoricRecord.build(sample, session, self._clock())
        if record.sequence == 1:
            _logger.debug(
                "First historic payload for session %s: %s",
                record.session_id,
                redact_for_log(record.to_payload()),
            )
        self._tasks.spawn(
            self._submit(record),
            name=f"historic-{record.session_id}-{record.sequence}",
        )
        return record

    async def _submit(self, record: HistoricRecord) -> None:
        try:
            status = await self._collector.submit_historic_point(record)
        except DeliveryError as exc:
            self._failed += 1
            self._last_outcome = DeliveryOutcome(
                endpoint=exc.endpoint or HISTORIC_ENDPOINT,
                ok=False,
                status_code=exc.status_code,
                sequence=record.sequence,
                error=str(exc),
            )
            _logger.warning(
                "Historic point %d of session %s not delivered: %s",
                record.sequence,
                record.session_id,
                exc,
            )
            return
        self._submitted += 1
        self._last_outcome = DeliveryOutcome(
            endpoint=HISTORIC_ENDPOINT,
            ok=True,
            status_code=status,
            sequence=record.sequence,
        )
