"""Video upload registration."""

import re
from pathlib import PurePath
from uuid import uuid4

from court_vision.adapters.job_store.base import JobStore
from court_vision.adapters.storage.base import BlobStore
from court_vision.config import settings
from court_vision.domain.models import VideoJob
from court_vision.logging import get_logger

logger = get_logger(__name__)

UPLOADS_PREFIX = "uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe object-name segment."""
    name = PurePath((filename or "").replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "video"


class UploadService:
    """Stores uploaded videos and registers a job for each."""

    def __init__(
        self,
        blob_store: BlobStore | None = None,
        job_store: JobStore | None = None,
        max_bytes: int | None = None,
    ) -> None:
        from court_vision.adapters import factory

        self.blob_store = blob_store or factory.get_blob_store()
        self.job_store = job_store or factory.get_job_store()
        self.max_bytes = settings.max_upload_bytes if max_bytes is None else max_bytes

    def register_upload(
        self,
        filename: str | None,
        data: bytes,
        content_type: str | None = None,
    ) -> VideoJob:
        """Store the video and create its job in UPLOADED status.

        Each upload gets its own key, so two uploads with the same filename
        never overwrite each other.

        Raises:
            ValueError: If the upload is empty or larger than max_bytes
            StoreError: If the video or the job cannot be stored
        """
        if not data:
            raise ValueError("Uploaded video is empty")
        if len(data) > self.max_bytes:
            raise ValueError(f"Uploaded video exceeds {self.max_bytes} bytes")

        name = safe_filename(filename)
        key = f"{UPLOADS_PREFIX}/{uuid4()}/{name}"
        source_ref = self.blob_store.put(key, data, content_type=content_type or "video/mp4")

        job_id = self.job_store.create(
            source_ref,
            metadata={
                "filename": filename,
                "content_type": content_type,
                "size_bytes": len(data),
            },
        )
        logger.info(
            "video_uploaded",
            video_job_id=str(job_id),
            source_ref=source_ref,
            size_bytes=len(data),
        )
        return self.job_store.get(job_id)
