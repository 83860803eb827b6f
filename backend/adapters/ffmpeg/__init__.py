"""FFmpeg adapter: silence detection, segment rendering, concat and transcode."""

from .audio import FFmpegAudioAdapter

__all__ = ["FFmpegAudioAdapter"]
