# app/routes/generation.py
import logging

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.datastructures import UploadFile

from app.config import DEFAULT_DURATION, DEFAULT_RATIO, missing_settings
from app.errors import ValidationError
from app.models import (
    GenerationRequest, Status_Request, Submit_Response, Status_Response, Error_Response
)
from app.services.task_service import submit_generation, poll_status

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Runway-Version",
}

TRUTHY = {"true", "1", "yes", "on"}


def _json(model, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=model.model_dump(), status_code=status_code, headers=CORS_HEADERS)

def _error(message: str) -> JSONResponse:
    return _json(Error_Response(error=message), status_code=500)

def _parse_duration(raw) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULT_DURATION
    try:
        duration = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid duration: {raw!r}")
    if duration <= 0:
        raise ValidationError(f"Invalid duration: {raw!r}")
    return duration

def _parse_upscale(raw) -> bool:
    return isinstance(raw, str) and raw.strip().lower() in TRUTHY


async def _handle_submit(request: Request) -> JSONResponse:
    form = await request.form()
    try:
        prompt = form.get("prompt")
        image = form.get("image")
        if not isinstance(image, UploadFile):
            image = None
        ratio = form.get("ratio")

        generation = GenerationRequest(
            prompt=prompt if isinstance(prompt, str) else None,
            image_name=image.filename if image else None,
            image_stream=image.file if image else None,
            image_content_type=(image.content_type if image else None) or "application/octet-stream",
            duration=_parse_duration(form.get("duration")),
            ratio=ratio.strip() if isinstance(ratio, str) and ratio.strip() else DEFAULT_RATIO,
            upscale_requested=_parse_upscale(form.get("upscale")),
        )
        result = await run_in_threadpool(submit_generation, generation)
    finally:
        await form.close()
    return _json(Submit_Response(**result))


async def _handle_status(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    try:
        body = Status_Request.model_validate(await request.json())
    except Exception as e:
        raise ValidationError("Invalid status check request.") from e
    if body.action != "status" or not body.taskId:
        raise ValidationError("Invalid status check request.")

    result = await run_in_threadpool(poll_status, body.taskId, background_tasks.add_task)
    return _json(Status_Response(**result))


@router.options("/ai")
async def preflight():
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)

@router.post("/ai")
async def generate(request: Request, background_tasks: BackgroundTasks):
    """Start a generation (multipart) or check a task's status (JSON)."""
    missing = missing_settings()
    if missing:
        error_msg = (
            "CRITICAL FIX REQUIRED: Check server settings for "
            + ", ".join(missing) + "."
        )
        logger.critical(error_msg)
        return _error(error_msg)

    content_type = request.headers.get("content-type", "")
    try:
        if "multipart/form-data" in content_type:
            return await _handle_submit(request)
        if "application/json" in content_type:
            return await _handle_status(request, background_tasks)
        raise ValidationError("Invalid request content-type.")
    except Exception as e:
        logger.exception("Request to /ai failed: %s", e)
        return _error(str(e))

@router.api_route("/ai", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def method_not_allowed():
    return PlainTextResponse("Method not allowed", status_code=405)
