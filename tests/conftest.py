"""Shared fakes: an in-process audio engine and recording progress/write ports."""

import os
import shutil
from typing import Iterator, Optional, Sequence

import pytest

from domain.errors import EngineError
from ports.audio import AudioEnginePort
from ports.progress import ProgressPort
from ports.write_waiter import WriteWaiterPort


EXAMPLE_DETECTION_LOG = [
    "Input #0, wav, from 'input.wav':",
    "  Duration: 00:00:08.00, bitrate: 705 kb/s",
    "[silencedetect @ 0x5581] silence_start: 2.0",
    "[silencedetect @ 0x5581] silence_end: 2.5 | silence_duration: 0.5",
    "size=N/A time=00:00:05.00 bitrate=N/A speed= 120x",
    "[silencedetect @ 0x5581] silence_start: 6.0",
    "[silencedetect @ 0x5581] silence_end: 6.1 | silence_duration: 0.1",
    "video:0kB audio:689kB subtitle:0kB other streams:0kB",
]


class FakeAudioEngine(AudioEnginePort):
    """Writes placeholder bytes instead of running ffmpeg and records every call."""

    def __init__(self, duration: float = 8.0, lines: Optional[list[str]] = None, fail_on: Sequence[str] = ()):
        self.duration = duration
        self.lines = list(EXAMPLE_DETECTION_LOG if lines is None else lines)
        self.fail_on = set(fail_on)
        self.calls: list[tuple] = []

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise EngineError(f"{name} exploded", stderr="boom")

    def probe_duration(self, input_path: str) -> float:
        self.calls.append(("probe_duration", input_path))
        self._maybe_fail("probe_duration")
        return self.duration

    def detect_silence(self, input_path: str, threshold_db: float, min_duration: float) -> Iterator[str]:
        self.calls.append(("detect_silence", input_path, threshold_db, min_duration))
        for line in self.lines:
            yield line
        self._maybe_fail("detect_silence")

    def extract(self, input_path: str, output_path: str, start: float, duration: float) -> None:
        self.calls.append(("extract", input_path, output_path, start, duration))
        self._maybe_fail("extract")
        with open(output_path, "wb") as f:
            f.write(f"A[{start:.2f}+{duration:.2f}]".encode())

    def synthesize_silence(self, output_path: str, duration: float) -> None:
        self.calls.append(("synthesize_silence", output_path, duration))
        self._maybe_fail("synthesize_silence")
        with open(output_path, "wb") as f:
            f.write(f"S[{duration:.2f}]".encode())

    def concat(self, input_paths: Sequence[str], manifest_path: str, output_path: str) -> None:
        self.calls.append(("concat", list(input_paths), manifest_path, output_path))
        self._maybe_fail("concat")
        with open(output_path, "wb") as out:
            for path in input_paths:
                with open(path, "rb") as f:
                    out.write(f.read())

    def transcode(self, input_path: str, output_path: str, filters: Optional[str] = None) -> None:
        self.calls.append(("transcode", input_path, output_path, filters))
        self._maybe_fail("transcode")
        shutil.copyfile(input_path, output_path)

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class InstantWriteWaiter(WriteWaiterPort):
    def __init__(self, stable: bool = True):
        self.stable = stable
        self.paths: list[str] = []

    def wait_until_stable(self, path: str) -> bool:
        self.paths.append(path)
        return self.stable and os.path.exists(path)


class RecordingProgress(ProgressPort):
    def __init__(self):
        self.events: list[tuple[str, str, float, Optional[str]]] = []

    def report(self, job_id: str, stage: str, progress: float = 0.0, detail: Optional[str] = None) -> None:
        self.events.append((job_id, stage, progress, detail))

    @property
    def stages(self) -> list[str]:
        collapsed: list[str] = []
        for _, stage, _, _ in self.events:
            if not collapsed or collapsed[-1] != stage:
                collapsed.append(stage)
        return collapsed


@pytest.fixture
def engine():
    return FakeAudioEngine()


@pytest.fixture
def write_waiter():
    return InstantWriteWaiter()


@pytest.fixture
def progress():
    return RecordingProgress()


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "source.wav"
    path.write_bytes(b"RIFF....WAVEfmt fake source")
    return str(path)
