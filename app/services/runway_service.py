# app/services/runway_service.py
import logging
import random
from typing import Optional

import requests

from app import config
from app.errors import UpstreamError

logger = logging.getLogger(__name__)

PENDING = "PENDING"
RUNNING = "RUNNING"
SUCCEEDED = "SUCCEEDED"
FAILED = "FAILED"

MAX_SEED = 2 ** 32 - 1


def random_seed() -> int:
    return random.randint(0, MAX_SEED)

def _headers(json_body: bool = False) -> dict:
    headers = {
        "Authorization": f"Bearer {config.RUNWAYML_API_KEY}",
        "X-Runway-Version": config.RUNWAY_API_VERSION,
    }
    if json_body:
        headers["Content-Type"] = "application/json"
    return headers

def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        message = data.get("error") or data.get("message")
        if message:
            return str(message)
    return response.text or f"HTTP {response.status_code}"

def _request(method: str, path: str, payload: Optional[dict] = None) -> dict:
    url = f"{config.RUNWAY_BASE_URL}{path}"
    try:
        response = requests.request(
            method,
            url,
            headers=_headers(json_body=payload is not None),
            json=payload,
            timeout=config.RUNWAY_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("RunwayML request %s %s failed: %s", method, path, e)
        raise UpstreamError(f"RunwayML request failed: {e}") from e

    if not response.ok:
        message = _error_message(response)
        logger.error("RunwayML %s %s -> %s: %s", method, path, response.status_code, message)
        raise UpstreamError(message)

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"RunwayML returned invalid JSON for {path}") from e


def submit_image_to_video(image_url: str, prompt: str, duration: int, ratio: str, seed: int) -> dict:
    """Start an image-to-video job. Returns the provider task ({id, status})."""
    payload = {
        "model": config.RUNWAY_MODEL,
        "promptText": prompt,
        "promptImage": image_url,
        "seed": seed,
        "watermark": False,
        "duration": duration,
        "ratio": ratio,
    }
    data = _request("POST", "/v1/image_to_video", payload)
    if not data.get("id"):
        raise UpstreamError("No task id in RunwayML response")
    logger.info("RunwayML task created: %s", data["id"])
    return data

def get_task(task_id: str) -> dict:
    return _request("GET", f"/v1/tasks/{task_id}")

def submit_upscale(task_id: str, video_url: str) -> dict:
    """Start a 4K upscale of the output of task_id."""
    payload = {
        "model": config.RUNWAY_UPSCALE_MODEL,
        "videoUri": video_url,
    }
    data = _request("POST", "/v1/video_upscale", payload)
    if not data.get("id"):
        raise UpstreamError("No task id in RunwayML upscale response")
    logger.info("RunwayML upscale task %s created from %s", data["id"], task_id)
    return data

def download_video(url: str) -> requests.Response:
    """Open a streamed download of a provider output. Caller closes the response."""
    try:
        response = requests.get(url, stream=True, timeout=60)
    except requests.RequestException as e:
        raise UpstreamError(f"Failed to download generated video: {e}") from e
    if not response.ok:
        response.close()
        raise UpstreamError(
            f"Failed to download generated video from RunwayML. Status: {response.status_code}"
        )
    response.raw.decode_content = True
    return response


# Task payload helpers
def output_url(task: dict) -> Optional[str]:
    output = task.get("output") or []
    return output[0] if output else None

def origin_task_id(task: dict) -> Optional[str]:
    return task.get("originalTaskId")

def progress_percent(task: dict) -> int:
    """RunwayML reports progress as a 0..1 ratio; the client wants 0..100."""
    progress = task.get("progress")
    if progress is None:
        return 0
    if isinstance(progress, float) and progress <= 1:
        progress = progress * 100
    return max(0, min(100, int(round(progress))))

def failure_reason(task: dict) -> str:
    return task.get("failure") or task.get("failureCode") or "Video generation failed"


__all__ = [
    "PENDING",
    "RUNNING",
    "SUCCEEDED",
    "FAILED",
    "random_seed",
    "submit_image_to_video",
    "get_task",
    "submit_upscale",
    "download_video",
    "output_url",
    "origin_task_id",
    "progress_percent",
    "failure_reason",
]
