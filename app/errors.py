# app/errors.py


class VideoGenError(Exception):
    """Base class for errors surfaced to the client as {success: false, error}."""


class ValidationError(VideoGenError):
    """Missing or invalid client input."""


class UpstreamError(VideoGenError):
    """The generation provider rejected or failed the job."""


class StateError(VideoGenError):
    """No task record exists for a task that needs finalizing."""


class StorageError(VideoGenError):
    """Object store read/write failure."""


__all__ = [
    "VideoGenError",
    "ValidationError",
    "UpstreamError",
    "StateError",
    "StorageError",
]
