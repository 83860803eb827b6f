"""Segment rendering and ordered concatenation.

One engine invocation per planned segment, each followed by a durable-write
check. Output order always follows planner order, even when rendering runs on
a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from domain.errors import ConcatError, EngineError, RenderError
from domain.models import AudioSegment, Segment, SilenceSegment
from ports.audio import AudioEnginePort
from ports.write_waiter import WriteWaiterPort

logger = logging.getLogger(__name__)

SegmentCallback = Callable[[int, int], None]


def segment_filename(index: int, segment: Segment) -> str:
    if isinstance(segment, SilenceSegment):
        return f"seg_{index:04d}_silence.wav"
    return f"seg_{index:04d}.wav"


class SegmentRenderer:
    def __init__(
        self,
        audio: AudioEnginePort,
        write_waiter: WriteWaiterPort,
        workers: int = 1,
    ):
        self._audio = audio
        self._write_waiter = write_waiter
        self._workers = max(1, workers)

    def render_one(
        self, input_path: str, segment: Segment, output_path: str
    ) -> Optional[str]:
        """Render a single segment. Returns None for a zero-length silence."""
        try:
            if isinstance(segment, AudioSegment):
                self._audio.extract(input_path, output_path, segment.source_start, segment.duration)
            elif isinstance(segment, SilenceSegment):
                if segment.duration <= 0:
                    return None
                self._audio.synthesize_silence(output_path, segment.duration)
            else:
                raise RenderError(f"Unknown segment type: {type(segment).__name__}")
        except EngineError as e:
            raise RenderError(f"Failed to render {segment}: {e.message}") from e

        if not self._write_waiter.wait_until_stable(output_path):
            raise RenderError(f"Segment output never stabilized: {output_path}")
        return output_path

    def render_all(
        self,
        input_path: str,
        segments: Sequence[Segment],
        output_dir_file: Callable[[str], str],
        on_segment: Optional[SegmentCallback] = None,
    ) -> list[str]:
        """Render every segment; returns rendered paths in planner order.

        ``output_dir_file`` maps a file name to its path inside the work area.
        Zero-length silences produce no file and are left out of the result.
        """
        total = len(segments)
        jobs = [
            (i, seg, output_dir_file(segment_filename(i, seg)))
            for i, seg in enumerate(segments)
        ]

        def _render(job) -> Optional[str]:
            i, seg, path = job
            result = self.render_one(input_path, seg, path)
            if on_segment:
                on_segment(i, total)
            return result

        if self._workers > 1 and total > 1:
            logger.info(f"Rendering {total} segments with {self._workers} workers")
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                rendered = list(pool.map(_render, jobs))
        else:
            rendered = [_render(job) for job in jobs]

        return [path for path in rendered if path is not None]


def concatenate_segments(
    audio: AudioEnginePort,
    segment_files: Sequence[str],
    manifest_path: str,
    output_path: str,
) -> str:
    """Join rendered segments by stream copy, in exactly the order given."""
    if not segment_files:
        raise ConcatError("No segments to concatenate")
    try:
        audio.concat(list(segment_files), manifest_path, output_path)
    except EngineError as e:
        raise ConcatError(f"Failed to concatenate segments: {e.message}") from e
    return output_path
