"""FFmpegAudioAdapter — audio engine driven through ffmpeg/ffprobe subprocesses."""

import logging
import subprocess
from typing import Iterator, Optional, Sequence

from domain.errors import EngineError
from ports.audio import AudioEnginePort

logger = logging.getLogger(__name__)

# Intermediate segments share one PCM layout so the concat demuxer can stream-copy them.
SEGMENT_SAMPLE_RATE = 44100
SEGMENT_CHANNEL_LAYOUT = "mono"
SEGMENT_CODEC = "pcm_s16le"

STDERR_TAIL_LINES = 20


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


def format_seconds(value: float) -> str:
    return f"{value:.6f}"


def escape_concat_path(path: str) -> str:
    """Quote a path for an ffmpeg concat manifest line."""
    return "'" + path.replace("'", "'\\''") + "'"


class FFmpegAudioAdapter(AudioEnginePort):
    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
        output_format: str = "mp3",
        output_bitrate: str = "192k",
        output_sample_rate: int = 44100,
    ):
        self._ffmpeg = ffmpeg_binary
        self._ffprobe = ffprobe_binary
        self._output_format = output_format
        self._output_bitrate = output_bitrate
        self._output_sample_rate = output_sample_rate

    def _run(self, cmd: list[str], action: str) -> None:
        logger.debug(f"CMD: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise EngineError(f"Failed to {action}: {e}") from e
        if result.returncode != 0:
            stderr = _tail(result.stderr)
            logger.error(f"Error during {action}: {stderr}")
            raise EngineError(f"Failed to {action} (exit {result.returncode})", stderr=stderr)

    def probe_duration(self, input_path: str) -> float:
        cmd = [
            self._ffprobe, "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            input_path,
        ]
        logger.debug(f"CMD: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise EngineError(f"Failed to probe duration: {e}") from e
        if result.returncode != 0:
            raise EngineError("Failed to probe duration", stderr=_tail(result.stderr))
        raw = result.stdout.strip()
        try:
            return float(raw)
        except ValueError as e:
            raise EngineError(f"Unreadable duration {raw!r}", stderr=_tail(result.stderr)) from e

    def detect_silence(
        self, input_path: str, threshold_db: float, min_duration: float
    ) -> Iterator[str]:
        cmd = [
            self._ffmpeg, "-hide_banner", "-nostats",
            "-i", input_path,
            "-vn",
            "-af", f"silencedetect=noise={threshold_db}dB:d={min_duration}",
            "-f", "null", "-",
        ]
        logger.debug(f"CMD: {' '.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise EngineError(f"Failed to start silence detection: {e}") from e

        recent: list[str] = []
        try:
            for line in proc.stderr:
                line = line.rstrip("\n")
                recent.append(line)
                del recent[:-STDERR_TAIL_LINES]
                yield line
            returncode = proc.wait()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stderr.close()

        if returncode != 0:
            stderr = "\n".join(recent)
            logger.error(f"Silence detection failed: {stderr}")
            raise EngineError(f"Silence detection failed (exit {returncode})", stderr=stderr)

    def extract(
        self, input_path: str, output_path: str, start: float, duration: float
    ) -> None:
        cmd = [
            self._ffmpeg, "-y",
            "-ss", format_seconds(start),
            "-i", input_path,
            "-t", format_seconds(duration),
            "-vn",
            "-c:a", SEGMENT_CODEC,
            "-ar", str(SEGMENT_SAMPLE_RATE),
            "-ac", "1",
            output_path,
        ]
        self._run(cmd, f"extract {start:.3f}s+{duration:.3f}s")

    def synthesize_silence(self, output_path: str, duration: float) -> None:
        cmd = [
            self._ffmpeg, "-y",
            "-f", "lavfi",
            "-i", f"anullsrc=channel_layout={SEGMENT_CHANNEL_LAYOUT}:sample_rate={SEGMENT_SAMPLE_RATE}",
            "-t", format_seconds(duration),
            "-c:a", SEGMENT_CODEC,
            output_path,
        ]
        self._run(cmd, f"synthesize {duration:.3f}s of silence")

    def concat(
        self, input_paths: Sequence[str], manifest_path: str, output_path: str
    ) -> None:
        with open(manifest_path, "w", encoding="utf-8") as f:
            for path in input_paths:
                f.write(f"file {escape_concat_path(path)}\n")
        cmd = [
            self._ffmpeg, "-y",
            "-f", "concat", "-safe", "0",
            "-i", manifest_path,
            "-c", "copy",
            output_path,
        ]
        self._run(cmd, f"concatenate {len(input_paths)} segments")

    def transcode(
        self, input_path: str, output_path: str, filters: Optional[str] = None
    ) -> None:
        cmd = [self._ffmpeg, "-y", "-i", input_path, "-vn"]
        if filters:
            cmd += ["-af", filters]
        if self._output_format == "wav":
            cmd += ["-c:a", "pcm_s16le"]
        else:
            cmd += ["-c:a", "libmp3lame", "-b:a", self._output_bitrate]
        cmd += ["-ar", str(self._output_sample_rate), output_path]
        self._run(cmd, "transcode output")
