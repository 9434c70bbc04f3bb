"""Local filesystem blob store."""

from pathlib import Path, PurePosixPath

from court_vision.adapters.storage.base import BlobStore
from court_vision.config import settings
from court_vision.domain.errors import ArtifactNotFoundError, StoreError
from court_vision.logging import get_logger

logger = get_logger(__name__)


class LocalBlobStore(BlobStore):
    """Stores blobs as files under a base directory.

    Useful for development and tests; refs are file:// URLs.
    """

    def __init__(self, base_path: Path | None = None, create_dirs: bool = True) -> None:
        """Initialize local storage.

        Args:
            base_path: Base directory for stored objects. Defaults to settings.storage_base_path
            create_dirs: Whether to create the base directory if it doesn't exist
        """
        self.base_path = Path(base_path or settings.storage_base_path)
        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return "local"

    def _path_for(self, key: str) -> Path:
        parts = PurePosixPath(key.lstrip("/")).parts
        if not parts or ".." in parts:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_path.joinpath(*parts)

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so readers never see a partial object
            tmp_path = path.with_name(path.name + ".tmp")
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            logger.error("local_blob_write_failed", key=key, error=str(e))
            raise StoreError(f"Failed to write {key}: {e}") from e

        logger.debug("local_blob_written", key=key, size=len(data), content_type=content_type)
        return self.ref_for(key)

    def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ArtifactNotFoundError(key) from e
        except OSError as e:
            raise StoreError(f"Failed to read {key}: {e}") from e

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def ref_for(self, key: str) -> str:
        return self._path_for(key).absolute().as_uri()

    def health_check(self) -> bool:
        return self.base_path.is_dir()
