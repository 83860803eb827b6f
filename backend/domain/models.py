"""Framework-agnostic domain models for Quietcut.

Segments are a closed union of frozen dataclasses so that planner output can be
matched exhaustively (``isinstance`` on exactly two types).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class SilenceEventKind(str, Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class SilenceEvent:
    """A single ``silence_start`` / ``silence_end`` report from the detector."""
    kind: SilenceEventKind
    timestamp: float


@dataclass(frozen=True)
class AudioSegment:
    """A verbatim slice of the source, ``[source_start, source_start + duration)``."""
    source_start: float
    duration: float

    @property
    def source_end(self) -> float:
        return self.source_start + self.duration


@dataclass(frozen=True)
class SilenceSegment:
    """A synthesized silence standing in for a detected interval.

    ``duration`` is what gets rendered (the truncation length, possibly 0).
    ``source_start`` / ``source_duration`` describe the real interval replaced.
    """
    duration: float
    source_start: float = 0.0
    source_duration: float = 0.0

    @property
    def source_end(self) -> float:
        return self.source_start + self.source_duration


Segment = Union[AudioSegment, SilenceSegment]


MIN_TEMPO_RATIO = 0.5
MAX_TEMPO_RATIO = 2.0
TEMPO_PRECISION = 5


@dataclass(frozen=True)
class TempoStep:
    """One ``atempo`` invocation; the ratio lies in [0.5, 2.0]."""
    ratio: float

    def __post_init__(self):
        if not MIN_TEMPO_RATIO <= self.ratio <= MAX_TEMPO_RATIO:
            raise ValueError(f"tempo step {self.ratio} outside [{MIN_TEMPO_RATIO}, {MAX_TEMPO_RATIO}]")

    def render(self) -> str:
        return f"{self.ratio:.{TEMPO_PRECISION}f}"


@dataclass(frozen=True)
class TempoPlan:
    """Ordered chain of tempo steps whose product is the requested multiplier."""
    steps: tuple[TempoStep, ...] = field(default_factory=tuple)

    @property
    def multiplier(self) -> float:
        product = 1.0
        for step in self.steps:
            product *= step.ratio
        return product

    @property
    def is_identity(self) -> bool:
        return len(self.steps) == 1 and self.steps[0].render() == f"{1.0:.{TEMPO_PRECISION}f}"

    def rendered_steps(self) -> list[str]:
        return [step.render() for step in self.steps]

    def filter_chain(self) -> str:
        return ",".join(f"atempo={value}" for value in self.rendered_steps())
