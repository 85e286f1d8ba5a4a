from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import FakeCollector, flush, make_sample

from pygeotraser._tasks import BackgroundTasks
from pygeotraser.models.historic import HistoricRecord
from pygeotraser.models.session import TrackingSession
from pygeotraser.recorder import HistoricRouteRecorder

_MONTEVIDEO = timezone(timedelta(hours=-3))


def _clock() -> datetime:
    return datetime(2026, 1, 2, 3, 4, 5, 678_901, tzinfo=_MONTEVIDEO)


def _session_after(samples: int) -> TrackingSession:
    session = TrackingSession(session_id="9F1C2A1E-0000-4000-8000-000000000001", user_id="swimmer-7")
    for _ in range(samples):
        session.accept(make_sample())
    return session


@pytest.mark.asyncio
async def test_record_builds_wire_payload_with_local_time() -> None:
    collector = FakeCollector()
    tasks = BackgroundTasks()
    recorder = HistoricRouteRecorder(collector, tasks, clock=_clock)

    record = recorder.record(make_sample(-34.9, -56.16), _session_after(1))
    await tasks.drain()

    assert record.to_payload() == {
        "usuario_id": "swimmer-7",
        "recorrido_id": "9F1C2A1E-0000-4000-8000-000000000001",
        "nadadorfecha": "2026-01-02",
        "nadadorhora": "2026-01-02T03:04:05.678",
        "secuencia": 1,
        "nadadorlat": -34.9,
        "nadadorlng": -56.16,
    }
    assert collector.historic == [record]
    assert recorder.submitted_count == 1
    assert recorder.last_outcome is not None
    assert recorder.last_outcome.ok
    assert recorder.last_outcome.status_code == 201
    assert recorder.last_outcome.sequence == 1


@pytest.mark.asyncio
async def test_record_uses_current_session_sequence() -> None:
    collector = FakeCollector()
    tasks = BackgroundTasks()
    recorder = HistoricRouteRecorder(collector, tasks, clock=_clock)

    record = recorder.record(make_sample(), _session_after(4))
    await flush()

    assert record.sequence == 4


@pytest.mark.asyncio
async def test_failed_submission_is_captured_not_raised() -> None:
    collector = FakeCollector(fail_historic=True)
    tasks = BackgroundTasks()
    recorder = HistoricRouteRecorder(collector, tasks, clock=_clock)

    recorder.record(make_sample(), _session_after(1))
    recorder.record(make_sample(), _session_after(2))
    await tasks.drain()

    assert recorder.failed_count == 2
    assert recorder.submitted_count == 0
    assert recorder.last_outcome is not None
    assert recorder.last_outcome.status_code == 500
    assert recorder.last_outcome.endpoint == "/nadadorhistoricorutas/agregar"


def test_record_requires_an_accepted_sample() -> None:
    with pytest.raises(ValueError):
        HistoricRecord.build(make_sample(), _session_after(0), _clock())
