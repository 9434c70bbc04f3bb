"""Google Cloud Storage blob store."""

from typing import Any

import requests
from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from court_vision.adapters.storage.base import BlobStore
from court_vision.config import settings
from court_vision.domain.errors import ArtifactNotFoundError, StoreError
from court_vision.logging import get_logger

logger = get_logger(__name__)

# Client construction, credentials and the HTTP transport fail outside the
# google.api_core hierarchy.
GCS_ERRORS = (
    gcp_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


class GCSBlobStore(BlobStore):
    """Blob store backed by a single GCS bucket.

    Credentials come from Application Default Credentials.
    """

    def __init__(
        self,
        bucket: str | None = None,
        project: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the GCS store.

        Args:
            bucket: Bucket name. Falls back to settings.gcs_bucket.
            project: GCP project id. Falls back to settings.gcp_project_id.
            client: Optional pre-built google.cloud.storage.Client.
        """
        self.bucket_name = bucket or settings.gcs_bucket
        self.project = project or settings.gcp_project_id
        self._client = client
        self._bucket: Any = None

    @property
    def name(self) -> str:
        return f"gcs:{self.bucket_name}"

    def _get_bucket(self) -> Any:
        """Get or create the bucket handle."""
        if self._bucket is None:
            if self._client is None:
                from google.cloud import storage

                self._client = storage.Client(project=self.project)
            self._bucket = self._client.bucket(self.bucket_name)
        return self._bucket

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self._get_bucket().blob(key).upload_from_string(data, content_type=content_type)
        except GCS_ERRORS as e:
            logger.error("gcs_upload_failed", bucket=self.bucket_name, key=key, error=str(e))
            raise StoreError(f"Failed to upload gs://{self.bucket_name}/{key}: {e}") from e

        logger.info("gcs_upload_completed", bucket=self.bucket_name, key=key, size=len(data))
        return self.ref_for(key)

    def get(self, key: str) -> bytes:
        try:
            return self._get_bucket().blob(key).download_as_bytes()
        except gcp_exceptions.NotFound as e:
            raise ArtifactNotFoundError(key) from e
        except GCS_ERRORS as e:
            raise StoreError(f"Failed to download gs://{self.bucket_name}/{key}: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return bool(self._get_bucket().blob(key).exists())
        except GCS_ERRORS as e:
            raise StoreError(f"Failed to stat gs://{self.bucket_name}/{key}: {e}") from e

    def ref_for(self, key: str) -> str:
        return f"gs://{self.bucket_name}/{key}"

    def health_check(self) -> bool:
        try:
            return bool(self._get_bucket().exists())
        except Exception as e:
            logger.error("gcs_health_check_failed", bucket=self.bucket_name, error=str(e))
            return False
