from dataclasses import dataclass
from typing import BinaryIO, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.config import DEFAULT_DURATION, DEFAULT_RATIO


@dataclass(frozen=True)
class GenerationRequest:
    """What the browser sends to start a job. Immutable once built."""
    prompt: Optional[str]
    image_name: Optional[str]
    image_stream: Optional[BinaryIO]
    image_content_type: str = "application/octet-stream"
    duration: int = DEFAULT_DURATION
    ratio: str = DEFAULT_RATIO
    upscale_requested: bool = False


# Task index record, stored as camelCase JSON
class Task_Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    destination_key: str = Field(alias="destinationKey")
    public_base_url: str = Field(alias="publicBaseUrl")
    upscale_requested: bool = Field(default=False, alias="upscaleRequested")
    original_task_id: str = Field(alias="originalTaskId")
    upscale_task_id: Optional[str] = Field(default=None, alias="upscaleTaskId")

    @property
    def video_url(self) -> str:
        return f"{self.public_base_url}/{self.destination_key}"


# API models
class Status_Request(BaseModel):
    taskId: Optional[str] = None
    action: Optional[str] = None

class Submit_Response(BaseModel):
    success: bool = True
    taskId: str
    status: str

class Status_Response(BaseModel):
    success: bool = True
    status: str
    progress: int = 0
    videoUrl: Optional[str] = None
    taskId: Optional[str] = None

class Error_Response(BaseModel):
    success: bool = False
    error: str
