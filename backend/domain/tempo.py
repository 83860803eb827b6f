"""Tempo chain builder.

ffmpeg's ``atempo`` filter only accepts ratios in [0.5, 2.0] per instance, so
more extreme multipliers are expressed as a chain of full-range steps followed
by one remainder step.
"""

import math

from domain.errors import InvalidParameterError
from domain.models import (
    MAX_TEMPO_RATIO, MIN_TEMPO_RATIO, TEMPO_PRECISION, TempoPlan, TempoStep,
)


def multiplier_from_percent(percent: float) -> float:
    """+50 -> 1.5, -50 -> 0.5, 300 -> 4.0."""
    return 1 + percent / 100


def build_tempo_plan(multiplier: float) -> TempoPlan:
    if multiplier is None or not math.isfinite(multiplier) or multiplier <= 0:
        raise InvalidParameterError(f"Tempo multiplier must be positive, got {multiplier}")

    steps: list[TempoStep] = []
    remaining = multiplier
    while remaining > MAX_TEMPO_RATIO or remaining < MIN_TEMPO_RATIO:
        factor = MAX_TEMPO_RATIO if remaining > MAX_TEMPO_RATIO else MIN_TEMPO_RATIO
        steps.append(TempoStep(factor))
        remaining /= factor

    steps.append(TempoStep(round(remaining, TEMPO_PRECISION)))
    return TempoPlan(steps=tuple(steps))


def tempo_plan_from_percent(percent: float) -> TempoPlan:
    return build_tempo_plan(multiplier_from_percent(percent))
