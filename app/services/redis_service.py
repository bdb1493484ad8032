# app/services/redis_service.py
import json
import logging
from typing import Dict, Optional

from app.config import redis_client, TASK_TTL_SECONDS
from app.models import Task_Record

logger = logging.getLogger(__name__)

# In-memory fallback
TASK_RECORDS: Dict[str, str] = {}


def _task_key(task_id: str) -> str:
    return f"task:{task_id}"


# Task index
def store_task_record(task_id: str, record: Task_Record) -> None:
    """Store the record for a provider task in Redis or in-memory fallback."""
    payload = record.model_dump_json(by_alias=True)
    if redis_client:
        try:
            redis_client.setex(_task_key(task_id), TASK_TTL_SECONDS, payload)
            return
        except Exception as e:
            logger.warning("Redis store failed for %s: %s, falling back to memory", task_id, e)

    TASK_RECORDS[task_id] = payload

def get_task_record(task_id: str) -> Optional[Task_Record]:
    """Retrieve the record for a provider task, None when unknown or finalized."""
    raw = None
    if redis_client:
        try:
            raw = redis_client.get(_task_key(task_id))
        except Exception as e:
            logger.warning("Redis get failed for %s: %s, falling back to memory", task_id, e)
    if raw is None:
        raw = TASK_RECORDS.get(task_id)
    if raw is None:
        return None
    return Task_Record.model_validate(json.loads(raw))

def delete_task_record(task_id: str) -> None:
    """Remove the record. Deleting an unknown id is a no-op."""
    if redis_client:
        try:
            redis_client.delete(_task_key(task_id))
        except Exception as e:
            logger.warning("Redis delete failed for %s: %s", task_id, e)
    TASK_RECORDS.pop(task_id, None)
    logger.info("Task record %s deleted", task_id)


__all__ = [
    "TASK_RECORDS",
    "store_task_record",
    "get_task_record",
    "delete_task_record",
]
