from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_tempo(value: Optional[float]) -> Optional[float]:
    if value is not None and 1 + value / 100 <= 0:
        raise ValueError("Tempo multiplier must be positive")
    return value


class SilenceParameters(BaseModel):
    """Form parameters for silence detection and truncation."""
    model_config = ConfigDict(allow_inf_nan=False)

    threshold: float = Field(-35.0, ge=-100, le=0)
    detection_duration: float = Field(0.3, ge=0.01)
    truncate_to: float = Field(0.2, ge=0.0)


class EditParameters(SilenceParameters):
    """Silence parameters plus an optional tempo change in percent."""
    tempo: Optional[float] = None

    @field_validator("tempo")
    @classmethod
    def tempo_multiplier_positive(cls, value: Optional[float]) -> Optional[float]:
        return _check_tempo(value)


class TempoParameters(BaseModel):
    """Form parameters for a tempo-only request."""
    model_config = ConfigDict(allow_inf_nan=False)

    tempo: float

    @field_validator("tempo")
    @classmethod
    def tempo_multiplier_positive(cls, value: float) -> float:
        return _check_tempo(value)


class HealthResponse(BaseModel):
    status: str = "ok"
    config: Dict[str, Any] = {}


class ErrorResponse(BaseModel):
    error: str
