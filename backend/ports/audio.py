"""AudioEnginePort — abstract interface to the external audio engine.

Every method runs one engine invocation to completion (or raises EngineError),
except ``detect_silence`` which streams progress lines while the pass runs.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional, Sequence


class AudioEnginePort(ABC):
    @abstractmethod
    def probe_duration(self, input_path: str) -> float:
        """Return total duration of the file in seconds."""

    @abstractmethod
    def detect_silence(
        self, input_path: str, threshold_db: float, min_duration: float
    ) -> Iterator[str]:
        """Run silence detection, yielding raw progress lines as they arrive."""

    @abstractmethod
    def extract(
        self, input_path: str, output_path: str, start: float, duration: float
    ) -> None:
        """Write ``[start, start + duration)`` of the input to output_path."""

    @abstractmethod
    def synthesize_silence(self, output_path: str, duration: float) -> None:
        """Write ``duration`` seconds of silence to output_path."""

    @abstractmethod
    def concat(
        self, input_paths: Sequence[str], manifest_path: str, output_path: str
    ) -> None:
        """Join input files in the given order without re-encoding."""

    @abstractmethod
    def transcode(
        self, input_path: str, output_path: str, filters: Optional[str] = None
    ) -> None:
        """Encode to the delivery format, applying an optional filter chain."""
