#!/usr/bin/env python3
"""Replay a recorded route through a tracking session.

Reads ``lat,lon`` rows from a CSV file, feeds them to a
``ReplayLocationProvider`` and runs one session against the configured
collector, printing each accepted point and the final delivery outcome.

Configuration is read from ``GEOTRASER_*`` environment variables;
``--user-id`` and ``--base-url`` override them.  ``--dry-run`` swaps the
HTTP collector for one that only logs, so the replay can be tried
without a backend.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pygeotraser import GeotraserClient, GeotraserConfig, HistoricRecord, SequencedSample  # noqa: E402
from pygeotraser.providers.replay import ReplayLocationProvider, read_route_csv  # noqa: E402


class _LoggingCollector:
    """Collector stand-in for ``--dry-run``."""

    async def submit_position(self, user_id: str, latitude: float, longitude: float) -> int:
        logging.info("position %s %.6f,%.6f", user_id, latitude, longitude)
        return 200

    async def submit_historic_point(self, record: HistoricRecord) -> int:
        logging.info("historic %s", record.to_payload())
        return 200

    async def submit_emergency(self, user_id: str, active: bool) -> bool:
        logging.info("emergency %s %s", user_id, active)
        return True

    async def terminate_tracking(self, user_id: str) -> int:
        logging.info("terminate %s", user_id)
        return 200


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("route", type=Path, help="CSV file with lat,lon rows")
    parser.add_argument("--interval", type=float, default=1.0, help="seconds between points (default: 1.0)")
    parser.add_argument("--user-id", help="collector user id (overrides GEOTRASER_USER_ID)")
    parser.add_argument("--base-url", help="collector base URL (overrides GEOTRASER_BASE_URL)")
    parser.add_argument("--dry-run", action="store_true", help="log submissions instead of sending them")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable DEBUG logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    points = read_route_csv(args.route)
    overrides: dict[str, Any] = {}
    if args.user_id:
        overrides["user_id"] = args.user_id
    if args.base_url:
        overrides["base_url"] = args.base_url
    config = GeotraserConfig.from_env(**overrides)

    provider = ReplayLocationProvider(points, interval=args.interval)
    done = asyncio.Event()

    def _on_sample(sequenced: SequencedSample) -> None:
        sample = sequenced.sample
        print(f"#{sequenced.sequence:>4} {sample.latitude:.6f},{sample.longitude:.6f}")
        if sequenced.sequence >= len(points):
            done.set()

    collector = _LoggingCollector() if args.dry_run else None
    async with GeotraserClient(config, provider, collector=collector, on_sample=_on_sample) as client:
        handle = await client.start_session()
        print(f"session {handle.session_id} started for {handle.user_id}")
        try:
            await asyncio.wait_for(done.wait(), timeout=args.interval * (len(points) + 5))
        except TimeoutError:
            print("route did not finish in time", file=sys.stderr)
        await client.stop_session()
        recorder = client.recorder
    # Context exit drains in-flight submissions.
    if recorder is not None:
        print(f"delivered={recorder.submitted_count} failed={recorder.failed_count} last={recorder.last_outcome}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
