"""Error taxonomy for the editing pipeline.

Every error carries the HTTP status the API layer should answer with, so the
FastAPI exception handler needs no per-type mapping.
"""

from typing import Optional


class AudioPipelineError(Exception):
    """Base class for all pipeline failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AudioPipelineError):
    """Missing file or bad request parameter. No work has been done."""
    status_code = 400


class InvalidParameterError(ValidationError):
    """A numeric parameter is outside the domain an algorithm accepts."""


class EngineError(AudioPipelineError):
    """The external engine process failed or produced unusable output."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr or ""


class ProbeError(AudioPipelineError):
    """Total duration of the source could not be determined."""


class DetectionError(AudioPipelineError):
    """The silence detection pass failed."""


class RenderError(AudioPipelineError):
    """A segment failed to render or its output never became stable."""


class ConcatError(AudioPipelineError):
    """Joining the rendered segments failed."""


class TempoError(AudioPipelineError):
    """The final tempo / transcode pass failed."""
