"""EditAudioUseCase — orchestrates silence truncation and the tempo pass.

Accepts all ports via dependency injection. The caller owns the WorkArea and
is responsible for releasing it on every exit path.
"""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Optional

from adapters.local.work_area import WorkArea
from domain.errors import (
    AudioPipelineError, DetectionError, EngineError, ProbeError, RenderError,
    TempoError, ValidationError,
)
from domain.models import Segment, TempoPlan
from domain.planner import count_silences, plan_segments, planned_duration
from domain.silence import SilenceLogParser
from domain.tempo import tempo_plan_from_percent
from ports.audio import AudioEnginePort
from ports.progress import ProgressPort
from use_cases.render import SegmentRenderer, concatenate_segments

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
}


@dataclass
class SilenceOptions:
    """Silence detection and truncation parameters."""
    threshold: float = -35.0
    detection_duration: float = 0.3
    truncate_to: float = 0.2


@dataclass
class EditRequest:
    """All parameters for an edit request."""
    audio_path: str
    silence: Optional[SilenceOptions] = None
    tempo_percent: Optional[float] = None
    filename: str = "truncate_silence"


@dataclass
class EditResult:
    output_path: str
    media_type: str
    filename: str
    segments: list[Segment] = field(default_factory=list)
    silences_found: int = 0
    tempo_plan: Optional[TempoPlan] = None


class EditAudioUseCase:
    def __init__(
        self,
        audio: AudioEnginePort,
        renderer: SegmentRenderer,
        progress: ProgressPort,
        output_format: str = "mp3",
    ):
        self._audio = audio
        self._renderer = renderer
        self._progress = progress
        self._output_format = output_format

    def execute(self, req: EditRequest, area: WorkArea) -> EditResult:
        """Run the full pipeline inside ``area``."""
        job_id = area.job_id
        try:
            return self._run(req, area, job_id)
        except BaseException as e:
            detail = e.message if isinstance(e, AudioPipelineError) else type(e).__name__
            self._progress.report(job_id, "aborting", detail=detail)
            raise

    def _run(self, req: EditRequest, area: WorkArea, job_id: str) -> EditResult:
        self._progress.report(job_id, "validating")
        tempo_plan = None
        if req.tempo_percent is not None:
            tempo_plan = tempo_plan_from_percent(req.tempo_percent)
        if not os.path.isfile(req.audio_path):
            raise ValidationError(f"Input file not found: {req.audio_path}")

        current = req.audio_path
        segments: list[Segment] = []
        silences = 0
        if req.silence is not None:
            current, segments = self._truncate_silence(req.audio_path, req.silence, area, job_id)
            silences = count_silences(segments)

        output_path = area.file(f"output.{self._output_format}")
        filters = None
        if tempo_plan is not None and not tempo_plan.is_identity:
            filters = tempo_plan.filter_chain()
            self._progress.report(job_id, "tempo_adjusting", detail=filters)
        else:
            self._progress.report(job_id, "finalizing")
        try:
            self._audio.transcode(current, output_path, filters=filters)
        except EngineError as e:
            raise TempoError(f"Failed to produce output: {e.message}") from e

        return EditResult(
            output_path=output_path,
            media_type=MEDIA_TYPES.get(self._output_format, "application/octet-stream"),
            filename=f"{req.filename}.{self._output_format}",
            segments=segments,
            silences_found=silences,
            tempo_plan=tempo_plan,
        )

    def _truncate_silence(
        self,
        input_path: str,
        options: SilenceOptions,
        area: WorkArea,
        job_id: str,
    ) -> tuple[str, list[Segment]]:
        """Returns (path of silence-adjusted audio, plan). Passes input through when no silence."""
        self._progress.report(job_id, "probing")
        try:
            audio_length = self._audio.probe_duration(input_path)
        except EngineError as e:
            raise ProbeError(f"Could not determine duration: {e.message}") from e
        if not math.isfinite(audio_length) or audio_length <= 0:
            raise ProbeError(f"Could not determine duration: got {audio_length}")
        logger.info(f"Audio duration: {audio_length:.2f} seconds")

        self._progress.report(
            job_id, "detecting",
            detail=f"noise={options.threshold}dB d={options.detection_duration}s",
        )
        parser = SilenceLogParser()
        try:
            for line in self._audio.detect_silence(
                input_path, options.threshold, options.detection_duration
            ):
                parser.feed(line)
        except EngineError as e:
            raise DetectionError(f"Silence detection failed: {e.message}") from e

        self._progress.report(job_id, "planning")
        segments = plan_segments(parser.events, options.truncate_to, audio_length)
        if not segments:
            logger.info("No silence found, passing source through")
            return input_path, []
        logger.info(
            f"Planned {len(segments)} segments ({count_silences(segments)} silences), "
            f"{audio_length:.2f}s -> {planned_duration(segments):.2f}s"
        )

        def _on_segment(i: int, total: int) -> None:
            self._progress.report(
                job_id, "rendering",
                progress=(i + 1) / total,
                detail=f"segment {i + 1}/{total}",
            )

        self._progress.report(job_id, "rendering")
        files = self._renderer.render_all(input_path, segments, area.file, on_segment=_on_segment)
        if not files:
            # every silence was dropped and nothing audible remains
            logger.info("Nothing audible left, producing empty audio")
            empty = area.file("empty.wav")
            try:
                self._audio.synthesize_silence(empty, 0.0)
            except EngineError as e:
                raise RenderError(f"Failed to produce empty audio: {e.message}") from e
            return empty, segments

        self._progress.report(job_id, "concatenating", detail=f"{len(files)} files")
        joined = concatenate_segments(
            self._audio, files, area.file("list.txt"), area.file("joined.wav")
        )
        return joined, segments
