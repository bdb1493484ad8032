# app/services/task_service.py
"""
Task lifecycle for a single generation job:

    SUBMITTED -> POLLING -> (UPSCALE_PENDING ->)? FINALIZING -> DONE

FAILED is reachable from every non-terminal state. The task index in Redis is
the only shared state; the handler itself keeps nothing between requests.
"""
import logging
from typing import Callable, Optional

from app import config
from app.errors import StateError, UpstreamError, ValidationError
from app.models import GenerationRequest, Task_Record
from app.services import redis_service, runway_service, storage_service

logger = logging.getLogger(__name__)

UPSCALING_STATUS = "Upscaling..."
UPSCALING_PROGRESS = 50

Defer = Callable[..., None]


def _run_later(defer: Optional[Defer], func: Callable, *args) -> None:
    if defer is None:
        func(*args)
    else:
        defer(func, *args)


# SUBMIT
def submit_generation(request: GenerationRequest) -> dict:
    """Upload the source image, start the provider job and index it."""
    has_prompt = bool(request.prompt and request.prompt.strip())
    has_image = request.image_stream is not None and bool(request.image_name)
    if not has_prompt or not has_image:
        raise ValidationError("Request is missing prompt or image file.")

    timestamp = storage_service.now_millis()
    image_key = storage_service.upload_image(
        request.image_name,
        request.image_stream,
        request.image_content_type,
        timestamp,
    )
    image_url = storage_service.public_url(image_key)
    destination_key = storage_service.video_key(
        request.image_name, timestamp, upscale=request.upscale_requested
    )

    task = runway_service.submit_image_to_video(
        image_url=image_url,
        prompt=request.prompt,
        duration=request.duration,
        ratio=request.ratio,
        seed=runway_service.random_seed(),
    )
    task_id = task["id"]

    redis_service.store_task_record(task_id, Task_Record(
        destination_key=destination_key,
        public_base_url=config.R2_PUBLIC_URL,
        upscale_requested=request.upscale_requested,
        original_task_id=task_id,
    ))
    logger.info("Task %s submitted, video will be stored at %s", task_id, destination_key)

    return {"taskId": task_id, "status": task.get("status", runway_service.PENDING)}


# POLL
def poll_status(task_id: str, defer: Optional[Defer] = None) -> dict:
    """
    Mirror the provider status of task_id. On success either chain an upscale
    job or copy the output into the object store and drop the index entries.
    """
    if not task_id:
        raise ValidationError("Invalid status check request.")

    task = runway_service.get_task(task_id)
    status = task.get("status")

    if status == runway_service.FAILED:
        reason = runway_service.failure_reason(task)
        logger.warning("Task %s failed: %s", task_id, reason)
        raise UpstreamError(reason)

    if status != runway_service.SUCCEEDED:
        return {
            "status": status,
            "progress": runway_service.progress_percent(task),
            "videoUrl": None,
            "taskId": task_id,
        }

    record = redis_service.get_task_record(task_id)
    if record is None:
        origin_id = runway_service.origin_task_id(task)
        if origin_id:
            record = redis_service.get_task_record(origin_id)
    if record is None:
        raise StateError(f"Could not find destination key for task {task_id}.")

    if record.upscale_requested and task_id == record.original_task_id:
        if record.upscale_task_id:
            # repeat poll of the original id; follow the chain
            return poll_status(record.upscale_task_id, defer=defer)
        return _start_upscale(task_id, task, record)

    return _finalize(task_id, task, record, defer)


def _start_upscale(task_id: str, task: dict, record: Task_Record) -> dict:
    source_url = runway_service.output_url(task)
    if not source_url:
        raise UpstreamError(f"Task {task_id} succeeded without an output video.")

    upscale = runway_service.submit_upscale(task_id, source_url)
    upscale_id = upscale["id"]

    redis_service.store_task_record(upscale_id, record.model_copy(update={"upscale_task_id": None}))
    redis_service.store_task_record(task_id, record.model_copy(update={"upscale_task_id": upscale_id}))
    logger.info("Task %s chained to upscale task %s", task_id, upscale_id)

    return {
        "status": UPSCALING_STATUS,
        "progress": UPSCALING_PROGRESS,
        "videoUrl": None,
        "taskId": upscale_id,
    }


def _finalize(task_id: str, task: dict, record: Task_Record, defer: Optional[Defer]) -> dict:
    source_url = runway_service.output_url(task)
    if not source_url:
        raise UpstreamError(f"Task {task_id} succeeded without an output video.")

    # records stay in place until the upload succeeds so a later poll can retry
    response = runway_service.download_video(source_url)
    try:
        storage_service.put_object(record.destination_key, response.raw, "video/mp4")
    finally:
        response.close()

    video_url = storage_service.public_url(record.destination_key, record.public_base_url)
    logger.info("Task %s finalized: %s", task_id, video_url)

    _run_later(defer, redis_service.delete_task_record, task_id)
    if record.original_task_id != task_id:
        _run_later(defer, redis_service.delete_task_record, record.original_task_id)

    return {
        "status": runway_service.SUCCEEDED,
        "progress": 100,
        "videoUrl": video_url,
        "taskId": task_id,
    }


__all__ = [
    "UPSCALING_STATUS",
    "UPSCALING_PROGRESS",
    "submit_generation",
    "poll_status",
]
