# app/config.py
import logging
import os

import boto3
from botocore.config import Config
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ---------- Redis ----------
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
TASK_TTL_SECONDS = int(os.getenv("TASK_TTL_SECONDS", str(60 * 60 * 24)))

redis_client = None
try:
    import redis
    redis_client = redis.from_url(REDIS_URL, decode_responses=True, socket_connect_timeout=2)
    # attempt a ping (may raise if unreachable)
    try:
        redis_client.ping()
        logger.info("Redis connected at %s", REDIS_URL)
    except Exception as e:
        logger.warning("Redis ping failed: %s, continuing with in-memory task index", e)
        redis_client = None
except Exception as e:
    logger.warning("redis client failed to init: %s, continuing with in-memory task index", e)
    redis_client = None

# ---------- RunwayML ----------
RUNWAYML_API_KEY = os.getenv("RUNWAYML_API_KEY")
RUNWAY_BASE_URL = os.getenv("RUNWAY_BASE_URL", "https://api.dev.runwayml.com").rstrip("/")
RUNWAY_API_VERSION = os.getenv("RUNWAY_API_VERSION", "2024-11-06")
RUNWAY_MODEL = os.getenv("RUNWAY_MODEL", "gen3a_turbo")
RUNWAY_UPSCALE_MODEL = os.getenv("RUNWAY_UPSCALE_MODEL", "upscale_v1")
RUNWAY_TIMEOUT = int(os.getenv("RUNWAY_TIMEOUT", "30"))

# ---------- Object storage (R2 / S3-compatible) ----------
R2_PUBLIC_URL = (os.getenv("R2_PUBLIC_URL") or "").rstrip("/")
R2_BUCKET = os.getenv("R2_BUCKET")
R2_ENDPOINT_URL = os.getenv("R2_ENDPOINT_URL")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_REGION = os.getenv("R2_REGION", "auto")

s3_client = boto3.client(
    "s3",
    endpoint_url=R2_ENDPOINT_URL or None,
    aws_access_key_id=R2_ACCESS_KEY_ID or None,
    aws_secret_access_key=R2_SECRET_ACCESS_KEY or None,
    region_name=R2_REGION,
    config=Config(signature_version="s3v4", retries={"max_attempts": 3}),
)

# ---------- Client ----------
POLL_INTERVAL_MS = int(os.getenv("POLL_INTERVAL_MS", "4000"))
DEFAULT_DURATION = 5
DEFAULT_RATIO = "1280:768"


def missing_settings() -> list:
    """Names of required settings that are not configured."""
    required = {
        "RUNWAYML_API_KEY": RUNWAYML_API_KEY,
        "R2_PUBLIC_URL": R2_PUBLIC_URL,
        "R2_BUCKET": R2_BUCKET,
    }
    return [name for name, value in required.items() if not value]


__all__ = [
    "redis_client",
    "s3_client",
    "TASK_TTL_SECONDS",
    "RUNWAYML_API_KEY",
    "RUNWAY_BASE_URL",
    "RUNWAY_API_VERSION",
    "RUNWAY_MODEL",
    "RUNWAY_UPSCALE_MODEL",
    "RUNWAY_TIMEOUT",
    "R2_PUBLIC_URL",
    "R2_BUCKET",
    "POLL_INTERVAL_MS",
    "DEFAULT_DURATION",
    "DEFAULT_RATIO",
    "missing_settings",
]
