"""Replay a recorded RDE test through the coaching pipeline.

The CSV needs one row per tick with the RdeTick field names as headers
(``urban_distance_m``, ``rural_distance_m``, ..., ``timestamp_ms``).
Missing columns default to 0, except ``timestamp_ms``, which is derived
from ``total_time_minutes``.

Usage:
    uv run python scripts/replay_session.py recording.csv
    uv run python scripts/replay_session.py recording.csv --distance 90 --speak
    uv run python scripts/replay_session.py recording.csv --realtime   # paced at tick rate
"""

from __future__ import annotations

import argparse
import contextlib
import csv
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from rde_coach.coaching.session import RdeSession  # noqa: E402
from rde_coach.config import CoachConfig  # noqa: E402
from rde_coach.hotpath.engine import CoachingEngine  # noqa: E402
from rde_coach.hotpath.event_stream import TickEventStream  # noqa: E402
from rde_coach.telemetry.parser import TickParser  # noqa: E402
from rde_coach.tts.engine import ConsoleTTSEngine, NullTTSEngine  # noqa: E402
from rde_coach.tts.narrator import PromptNarrator  # noqa: E402

_logger = logging.getLogger("replay_session")


class CsvTickSource:
    """Tick source yielding one CSV row per ``read_tick`` call, then None.

    Rows without a ``timestamp_ms`` are stamped from ``total_time_minutes`` so
    the speed accumulator integrates recorded time rather than replay time.
    """

    def __init__(self, path: Path) -> None:
        with path.open(newline="") as fh:
            self._rows = [_stamp(row) for row in csv.DictReader(fh)]
        self._pos = 0

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._rows)

    def read_tick(self) -> dict | None:
        if self.exhausted:
            return None
        row = self._rows[self._pos]
        self._pos += 1
        return row


def _stamp(row: dict) -> dict:
    row = {key: value for key, value in row.items() if value not in ("", None)}
    minutes = row.get("total_time_minutes")
    if "timestamp_ms" not in row and minutes is not None:
        # unparsable minutes are left for the parser to reject
        with contextlib.suppress(ValueError):
            row["timestamp_ms"] = float(minutes) * 60000.0
    return row


def replay(engine, stream, source, realtime: bool = False):
    """Feed every row of *source* through *engine*, yielding each PromptOutput.

    A fast replay polls synchronously. A realtime replay lets the stream's
    thread pace the ticks and joins it before draining the queue, so the
    last row is never lost.
    """
    if realtime:
        engine.start()
    try:
        while not source.exhausted:
            if not realtime:
                stream.poll_once()
            output = engine.tick()
            if output is not None:
                yield output
            elif realtime:
                time.sleep(0.01)
    finally:
        if realtime:
            engine.stop()

    while True:
        output = engine.tick()
        if output is None:
            break
        yield output


def main() -> None:
    cfg = CoachConfig.from_env()

    ap = argparse.ArgumentParser(description="RDE Coach — replay a recorded test")
    ap.add_argument("csv", type=Path, help="CSV file of recorded ticks")
    ap.add_argument("--distance", type=float, default=cfg.expected_distance_km,
                    help="Expected test distance in km")
    ap.add_argument("--speak", action="store_true", help="Narrate prompts to the log")
    ap.add_argument("--realtime", action="store_true",
                    help="Pace the replay at the configured tick rate")
    args = ap.parse_args()

    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if not args.csv.exists():
        print(f"ERROR: {args.csv} not found", file=sys.stderr)
        sys.exit(1)

    source = CsvTickSource(args.csv)
    stream = TickEventStream(source, TickParser(), target_hz=cfg.tick_hz,
                             queue_maxsize=cfg.queue_maxsize)
    session = RdeSession(args.distance)
    tts = ConsoleTTSEngine() if args.speak else NullTTSEngine()
    # A fast replay has no wall-clock gaps between ticks, so only realtime runs keep the silence window.
    silence_s = cfg.narration_silence_s if args.realtime else 0.0
    narrator = PromptNarrator(tts, silence_s=silence_s)
    engine = CoachingEngine(stream, session, narrator)

    print(f"Replaying {len(source)} tick(s) from {args.csv} (expected {args.distance:.1f} km)")

    last_identity = None
    try:
        for output in replay(engine, stream, source, realtime=args.realtime):
            if output.identity != last_identity:
                last_identity = output.identity
                print(f"[{session.total_time:6.1f} min] {output.prompt_type.value:<28} {output.text}")
                if output.analysis_text:
                    print(f"{'':38}{output.analysis_text}")
    except KeyboardInterrupt:
        pass

    snap = session.snapshot()
    print()
    print(
        f"Urban {snap['urban_percentage']:.1f}%  Rural {snap['rural_percentage']:.1f}%  "
        f"Motorway {snap['motorway_percentage']:.1f}%  over {snap['expected_distance_km']:.1f} km"
    )
    if snap["invalid_reason"] != "none":
        print(f"Test can no longer be valid: {snap['invalid_reason']}")
    _logger.info("Replayed %d tick(s)", engine.processed)


if __name__ == "__main__":
    main()
