"""FastAPI application for Quietcut.

Each request gets its own WorkArea. The area's cleanup is registered on an
ExitStack; if the pipeline fails the stack unwinds immediately, otherwise the
stack is handed to the response and closes once streaming ends. A finished
stream reports ``done``; a client that disconnects mid-stream reports
``aborting``.
"""

import os
import shutil
import logging
from contextlib import ExitStack
from typing import Callable, Optional

import pydantic
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from adapters.local.work_area import WorkArea
from config import (
    Config, get_config, create_audio_adapter, create_write_waiter,
    create_progress_adapter,
)
from domain.errors import AudioPipelineError, ValidationError
from models import (
    EditParameters, ErrorResponse, HealthResponse, SilenceParameters, TempoParameters,
)
from ports.audio import AudioEnginePort
from ports.progress import ProgressPort
from ports.write_waiter import WriteWaiterPort
from use_cases.edit_audio import EditAudioUseCase, EditRequest, SilenceOptions
from use_cases.render import SegmentRenderer

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid parameters or missing upload"},
    500: {"model": ErrorResponse, "description": "Audio processing failed"},
}


class AudioFileResponse(FileResponse):
    """FileResponse that always runs ``on_close`` once the send completes or fails.

    ``on_close`` receives the exception that broke the send, or None when the
    whole body went out.
    """

    def __init__(self, path: str, on_close: Callable[[Optional[BaseException]], None], **kwargs):
        super().__init__(path, **kwargs)
        self._on_close = on_close

    async def __call__(self, scope, receive, send) -> None:
        error = None
        try:
            await super().__call__(scope, receive, send)
        except BaseException as e:
            error = e
            raise
        finally:
            self._on_close(error)


def _parse_params(model: type, raw: dict, defaults: Optional[dict] = None):
    values = {k: v for k, v in raw.items() if v is not None and str(v).strip() != ""}
    for key, value in (defaults or {}).items():
        values.setdefault(key, value)
    try:
        return model(**values)
    except pydantic.ValidationError as e:
        messages = []
        for err in e.errors():
            field = err["loc"][0] if err["loc"] else "parameters"
            messages.append(f"Invalid {field}: {err['msg']}")
        raise ValidationError("; ".join(messages)) from e


def _require_upload(audio: Optional[UploadFile]) -> UploadFile:
    if audio is None or not audio.filename:
        raise ValidationError("Missing audio file")
    return audio


def _save_upload(upload: UploadFile, area: WorkArea) -> str:
    ext = os.path.splitext(os.path.basename(upload.filename or ""))[1]
    input_path = area.file(f"input{ext}")
    with open(input_path, "wb") as dest:
        shutil.copyfileobj(upload.file, dest)
    return input_path


def create_app(
    cfg: Optional[Config] = None,
    audio: Optional[AudioEnginePort] = None,
    write_waiter: Optional[WriteWaiterPort] = None,
    progress: Optional[ProgressPort] = None,
) -> FastAPI:
    cfg = cfg or get_config()
    audio = audio or create_audio_adapter(cfg)
    write_waiter = write_waiter or create_write_waiter(cfg)
    progress = progress or create_progress_adapter()

    renderer = SegmentRenderer(audio, write_waiter, workers=cfg.render_workers)
    use_case = EditAudioUseCase(audio, renderer, progress, output_format=cfg.output_format)

    app = FastAPI(title="Quietcut", version="0.1.0")

    @app.exception_handler(AudioPipelineError)
    async def pipeline_error_handler(request: Request, exc: AudioPipelineError):
        if exc.status_code >= 500:
            logger.error(f"Processing error on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"Rejected request on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Processing failed"})

    def _silence_defaults() -> dict:
        return {
            "threshold": cfg.default_threshold,
            "detection_duration": cfg.default_detection_duration,
            "truncate_to": cfg.default_truncate_to,
        }

    def _process(upload: UploadFile, build_request: Callable[[str], EditRequest]) -> AudioFileResponse:
        with ExitStack() as stack:
            area = stack.enter_context(WorkArea.create(cfg.temp_dir))
            progress.report(area.job_id, "uploading", detail=upload.filename)
            input_path = _save_upload(upload, area)
            result = use_case.execute(build_request(input_path), area)

            job_id = area.job_id
            cleanup = stack.pop_all()

            def _finish(error: Optional[BaseException]) -> None:
                with cleanup:
                    if error is None:
                        progress.report(job_id, "done")
                    else:
                        progress.report(job_id, "aborting", detail=f"stream interrupted: {type(error).__name__}")

            response = AudioFileResponse(
                result.output_path,
                on_close=_finish,
                media_type=result.media_type,
                filename=result.filename,
            )
            progress.report(area.job_id, "streaming", detail=result.filename)
            return response

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", config=cfg.as_dict())

    @app.post("/v1/audio/edit", responses=ERROR_RESPONSES)
    def edit_audio(
        audio: Optional[UploadFile] = File(None),
        threshold: Optional[str] = Form(None),
        detection_duration: Optional[str] = Form(None),
        truncate_to: Optional[str] = Form(None),
        tempo: Optional[str] = Form(None),
    ):
        upload = _require_upload(audio)
        params = _parse_params(
            EditParameters,
            {
                "threshold": threshold,
                "detection_duration": detection_duration,
                "truncate_to": truncate_to,
                "tempo": tempo,
            },
            _silence_defaults(),
        )
        silence = SilenceOptions(
            threshold=params.threshold,
            detection_duration=params.detection_duration,
            truncate_to=params.truncate_to,
        )
        return _process(upload, lambda path: EditRequest(
            audio_path=path,
            silence=silence,
            tempo_percent=params.tempo,
            filename="truncate_silence",
        ))

    @app.post("/v1/audio/truncate-silence", responses=ERROR_RESPONSES)
    def truncate_silence(
        audio: Optional[UploadFile] = File(None),
        threshold: Optional[str] = Form(None),
        detection_duration: Optional[str] = Form(None),
        truncate_to: Optional[str] = Form(None),
    ):
        upload = _require_upload(audio)
        params = _parse_params(
            SilenceParameters,
            {
                "threshold": threshold,
                "detection_duration": detection_duration,
                "truncate_to": truncate_to,
            },
            _silence_defaults(),
        )
        silence = SilenceOptions(
            threshold=params.threshold,
            detection_duration=params.detection_duration,
            truncate_to=params.truncate_to,
        )
        return _process(upload, lambda path: EditRequest(
            audio_path=path,
            silence=silence,
            filename="truncate_silence",
        ))

    @app.post("/v1/audio/tempo", responses=ERROR_RESPONSES)
    def change_tempo(
        audio: Optional[UploadFile] = File(None),
        tempo: Optional[str] = Form(None),
    ):
        upload = _require_upload(audio)
        params = _parse_params(TempoParameters, {"tempo": tempo})
        return _process(upload, lambda path: EditRequest(
            audio_path=path,
            tempo_percent=params.tempo,
            filename="tempo_changed",
        ))

    return app
