"""Pytest configuration helpers.

Puts the project root on `sys.path` so `app` and `main` import regardless of
how pytest is invoked, forces the in-memory task index, and provides fakes for
RunwayML and the object store.
"""
import io
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import config
from app.errors import StorageError, UpstreamError
from app.services import redis_service, runway_service, storage_service


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    monkeypatch.setattr(config, "RUNWAYML_API_KEY", "test-key")
    monkeypatch.setattr(config, "RUNWAY_BASE_URL", "https://runway.test")
    monkeypatch.setattr(config, "R2_PUBLIC_URL", "https://cdn")
    monkeypatch.setattr(config, "R2_BUCKET", "media")
    monkeypatch.setattr(config, "redis_client", None)
    monkeypatch.setattr(redis_service, "redis_client", None)
    redis_service.TASK_RECORDS.clear()
    yield config
    redis_service.TASK_RECORDS.clear()


class FakeStore:
    """Records every object written instead of talking to the bucket."""

    def __init__(self):
        self.writes = []
        self.fail = False

    def put_object(self, key, stream, content_type):
        if self.fail:
            raise StorageError(f"Failed to store {key}: boom")
        self.writes.append((key, stream.read(), content_type))

    def keys(self):
        return [key for key, _, _ in self.writes]


@pytest.fixture
def fake_store(monkeypatch):
    store = FakeStore()
    monkeypatch.setattr(storage_service, "put_object", store.put_object)
    monkeypatch.setattr(storage_service, "now_millis", lambda: 171)
    return store


class FakeDownload:
    def __init__(self, content: bytes):
        self.raw = io.BytesIO(content)
        self.closed = False

    def close(self):
        self.closed = True


class FakeRunway:
    """Scripted stand-in for the RunwayML API."""

    def __init__(self):
        self.tasks = {}
        self.submissions = []
        self.upscales = []
        self.downloads = []
        self.reject_with = None
        self._next = 1

    def _new_id(self):
        task_id = f"t{self._next}"
        self._next += 1
        return task_id

    def set_task(self, task_id, status, progress=None, output=None, **extra):
        task = {"id": task_id, "status": status}
        if progress is not None:
            task["progress"] = progress
        if output is not None:
            task["output"] = output
        task.update(extra)
        self.tasks[task_id] = task

    def submit_image_to_video(self, image_url, prompt, duration, ratio, seed):
        if self.reject_with:
            raise UpstreamError(self.reject_with)
        task_id = self._new_id()
        self.submissions.append({
            "id": task_id, "image_url": image_url, "prompt": prompt,
            "duration": duration, "ratio": ratio, "seed": seed,
        })
        self.set_task(task_id, "RUNNING", progress=0.0)
        return {"id": task_id, "status": "RUNNING"}

    def get_task(self, task_id):
        if task_id not in self.tasks:
            raise UpstreamError("Task not found")
        return dict(self.tasks[task_id])

    def submit_upscale(self, task_id, video_url):
        new_id = self._new_id()
        self.upscales.append((task_id, video_url, new_id))
        self.set_task(new_id, "PENDING")
        return {"id": new_id, "status": "PENDING"}

    def download_video(self, url):
        self.downloads.append(url)
        return FakeDownload(f"video from {url}".encode())


@pytest.fixture
def fake_runway(monkeypatch):
    runway = FakeRunway()
    for name in ("submit_image_to_video", "get_task", "submit_upscale", "download_video"):
        monkeypatch.setattr(runway_service, name, getattr(runway, name))
    return runway
