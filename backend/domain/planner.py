"""Segment planner: turns a silence log into an ordered keep/insert plan.

Events are consumed in arrival order and never re-sorted. Each adjacent
(START, END) pair is one silence interval; audible material between intervals
is kept verbatim and every interval is replaced by ``truncate_to`` seconds of
synthesized silence.
"""

import logging
import math
from typing import Optional, Sequence

from domain.errors import InvalidParameterError
from domain.models import (
    AudioSegment, SilenceSegment, Segment, SilenceEvent, SilenceEventKind,
)

logger = logging.getLogger(__name__)


def plan_segments(
    events: Sequence[SilenceEvent],
    truncate_to: float,
    audio_length: float,
) -> list[Segment]:
    """Build the segment plan.

    Args:
        events: Silence events in detector order.
        truncate_to: Length (seconds) of the silence inserted for each interval.
        audio_length: Total duration of the source in seconds.

    Returns:
        Ordered segments. An empty list means no silence was found and the
        source should be passed through unchanged.
    """
    if truncate_to is None or not math.isfinite(truncate_to) or truncate_to < 0:
        raise InvalidParameterError(f"truncate_to must be >= 0, got {truncate_to}")
    if audio_length is None or not math.isfinite(audio_length) or audio_length <= 0:
        raise InvalidParameterError(f"audio length must be > 0, got {audio_length}")

    segments: list[Segment] = []
    last_end = 0.0
    final_end: Optional[float] = None

    i = 0
    while i < len(events):
        event = events[i]
        following = events[i + 1] if i + 1 < len(events) else None
        if event.kind is not SilenceEventKind.START:
            # stray END without a START
            i += 1
            continue
        if following is None or following.kind is not SilenceEventKind.END:
            # unterminated START: no more silence from this point
            logger.debug(f"Skipping unpaired silence_start at {event.timestamp:.3f}s")
            i += 1
            continue

        start, end = event.timestamp, following.timestamp
        if start > last_end:
            segments.append(AudioSegment(source_start=last_end, duration=start - last_end))
        segments.append(SilenceSegment(
            duration=truncate_to,
            source_start=start,
            source_duration=end - start,
        ))
        last_end = end
        final_end = end
        i += 2

    if final_end is None:
        return []

    if final_end < audio_length:
        segments.append(AudioSegment(source_start=final_end, duration=audio_length - final_end))

    return segments


def count_silences(segments: Sequence[Segment]) -> int:
    return sum(1 for seg in segments if isinstance(seg, SilenceSegment))


def planned_duration(segments: Sequence[Segment]) -> float:
    """Length of the output timeline the plan produces."""
    return sum(seg.duration for seg in segments)
