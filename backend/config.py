import os
import logging
from typing import Dict, Any
from pathlib import Path

logger = logging.getLogger(__name__)

try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8002
DEFAULT_TEMP_DIR = "/tmp/quietcut"
DEFAULT_OUTPUT_FORMAT = "mp3"
DEFAULT_OUTPUT_BITRATE = "192k"
DEFAULT_OUTPUT_SAMPLE_RATE = 44100
DEFAULT_THRESHOLD = -35.0
DEFAULT_DETECTION_DURATION = 0.3
DEFAULT_TRUNCATE_TO = 0.2

OUTPUT_FORMATS = ("mp3", "wav")


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"
        self.temp_dir = os.environ.get("TEMP_DIR", DEFAULT_TEMP_DIR)
        self.ffmpeg_binary = os.environ.get("FFMPEG_BINARY", "ffmpeg")
        self.ffprobe_binary = os.environ.get("FFPROBE_BINARY", "ffprobe")
        self.output_bitrate = os.environ.get("OUTPUT_BITRATE", DEFAULT_OUTPUT_BITRATE)
        self.output_sample_rate = int(os.environ.get("OUTPUT_SAMPLE_RATE", DEFAULT_OUTPUT_SAMPLE_RATE))
        self.render_workers = int(os.environ.get("RENDER_WORKERS", "1"))
        self.stability_poll_interval = float(os.environ.get("STABILITY_POLL_INTERVAL", "0.1"))
        self.stability_poll_attempts = int(os.environ.get("STABILITY_POLL_ATTEMPTS", "5"))
        self.default_threshold = float(os.environ.get("DEFAULT_THRESHOLD", DEFAULT_THRESHOLD))
        self.default_detection_duration = float(
            os.environ.get("DEFAULT_DETECTION_DURATION", DEFAULT_DETECTION_DURATION)
        )
        self.default_truncate_to = float(os.environ.get("DEFAULT_TRUNCATE_TO", DEFAULT_TRUNCATE_TO))

        output_format = os.environ.get("OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT).lower()
        if output_format not in OUTPUT_FORMATS:
            logger.warning(f"Unknown OUTPUT_FORMAT {output_format!r}, using {DEFAULT_OUTPUT_FORMAT}")
            output_format = DEFAULT_OUTPUT_FORMAT
        self.output_format = output_format
        Path(self.temp_dir).mkdir(parents=True, exist_ok=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "output_format": self.output_format,
            "output_bitrate": self.output_bitrate,
            "output_sample_rate": self.output_sample_rate,
            "render_workers": self.render_workers,
            "stability_poll_interval": self.stability_poll_interval,
            "stability_poll_attempts": self.stability_poll_attempts,
            "default_threshold": self.default_threshold,
            "default_detection_duration": self.default_detection_duration,
            "default_truncate_to": self.default_truncate_to,
        }


config = Config()


def get_config() -> Config:
    return config


def create_audio_adapter(cfg: Config):
    """Create the audio engine adapter (always FFmpeg)."""
    from adapters.ffmpeg.audio import FFmpegAudioAdapter
    return FFmpegAudioAdapter(
        ffmpeg_binary=cfg.ffmpeg_binary,
        ffprobe_binary=cfg.ffprobe_binary,
        output_format=cfg.output_format,
        output_bitrate=cfg.output_bitrate,
        output_sample_rate=cfg.output_sample_rate,
    )


def create_write_waiter(cfg: Config):
    """Create the durable-write primitive used after each segment render."""
    from adapters.local.poll_write import PollingWriteWaiter
    return PollingWriteWaiter(
        interval=cfg.stability_poll_interval,
        attempts=cfg.stability_poll_attempts,
    )


def create_progress_adapter():
    from adapters.local.log_progress import LogProgressAdapter
    return LogProgressAdapter()
