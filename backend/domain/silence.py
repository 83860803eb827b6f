"""Silence event parser, the only place that knows silencedetect's text format.

ffmpeg's silencedetect filter reports on stderr lines such as::

    [silencedetect @ 0x55d] silence_start: 2.00045
    [silencedetect @ 0x55d] silence_end: 2.50113 | silence_duration: 0.500680

Anything else on the stream is ignored.
"""

import re
from typing import Iterable, Optional

from domain.models import SilenceEvent, SilenceEventKind

SILENCE_PATTERN = re.compile(
    r"silence_(start|end):\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)"
)


def parse_silence_line(line: str) -> Optional[SilenceEvent]:
    """Extract a silence event from one progress line, or None."""
    match = SILENCE_PATTERN.search(line)
    if not match:
        return None
    kind = SilenceEventKind.START if match.group(1) == "start" else SilenceEventKind.END
    # silencedetect can report a tiny negative start for silence at t=0
    timestamp = max(0.0, float(match.group(2)))
    return SilenceEvent(kind=kind, timestamp=timestamp)


class SilenceLogParser:
    """Accumulates silence events from a live line stream, in arrival order."""

    def __init__(self):
        self._events: list[SilenceEvent] = []

    def feed(self, line: str) -> Optional[SilenceEvent]:
        event = parse_silence_line(line)
        if event is not None:
            self._events.append(event)
        return event

    @property
    def events(self) -> list[SilenceEvent]:
        return list(self._events)


def parse_silence_events(lines: Iterable[str]) -> list[SilenceEvent]:
    parser = SilenceLogParser()
    for line in lines:
        parser.feed(line)
    return parser.events
