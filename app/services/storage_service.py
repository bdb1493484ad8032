# app/services/storage_service.py
import logging
import re
import time
from typing import BinaryIO, Optional

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from app import config
from app.errors import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def now_millis() -> int:
    return int(time.time() * 1000)

def _basename(filename: str) -> str:
    return (filename or "").replace("\\", "/").rsplit("/", 1)[-1].strip()

def sanitize_filename(filename: str) -> str:
    """Keep the name usable as part of an object key."""
    cleaned = _UNSAFE_CHARS.sub("-", _basename(filename)).strip("-")
    return cleaned or "upload"

def file_stem(filename: str) -> str:
    """Filename without its final extension, or the whole name if it has none."""
    name = _basename(filename)
    stem, dot, _ = name.rpartition(".")
    return sanitize_filename(stem if dot and stem else name)

def image_key(filename: str, timestamp: int) -> str:
    return f"uploads/{timestamp}-{sanitize_filename(filename)}"

def video_key(filename: str, timestamp: int, upscale: bool = False) -> str:
    """
    Destination of the finished video, e.g. videos/1678886400000-cat.mp4
    (videos/1678886400000-cat-4k.mp4 when an upscale was requested).
    """
    suffix = "-4k" if upscale else ""
    return f"videos/{timestamp}-{file_stem(filename)}{suffix}.mp4"

def public_url(key: str, base_url: Optional[str] = None) -> str:
    base = (base_url if base_url is not None else config.R2_PUBLIC_URL).rstrip("/")
    return f"{base}/{key}"


def put_object(key: str, stream: BinaryIO, content_type: str) -> None:
    """Stream a file-like body into the bucket under key."""
    try:
        config.s3_client.upload_fileobj(
            stream,
            config.R2_BUCKET,
            key,
            ExtraArgs={"ContentType": content_type},
        )
    except (ClientError, BotoCoreError, S3UploadFailedError) as e:
        logger.error("Failed to store %s in bucket %s: %s", key, config.R2_BUCKET, e)
        raise StorageError(f"Failed to store {key}: {e}") from e
    logger.info("Stored %s (%s)", key, content_type)

def upload_image(filename: str, stream: BinaryIO, content_type: str, timestamp: int) -> str:
    """Persist the source image and return its key."""
    key = image_key(filename, timestamp)
    put_object(key, stream, content_type or "application/octet-stream")
    return key


__all__ = [
    "now_millis",
    "sanitize_filename",
    "file_stem",
    "image_key",
    "video_key",
    "public_url",
    "put_object",
    "upload_image",
]
