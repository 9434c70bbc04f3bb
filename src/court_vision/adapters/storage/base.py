"""Base interface for blob storage providers."""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Abstract base class for blob storage.

    Keys are slash-separated object names. Writing an existing key
    overwrites it.

    Implementations:
    - GCSBlobStore: Google Cloud Storage bucket
    - LocalBlobStore: Local filesystem directory
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store bytes under a key.

        Returns:
            Locator (ref) of the stored object

        Raises:
            StoreError: If the write fails
        """
        ...

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read the bytes stored under a key.

        Raises:
            ArtifactNotFoundError: If nothing is stored under the key
            StoreError: If the read fails
        """
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether an object is stored under a key."""
        ...

    @abstractmethod
    def ref_for(self, key: str) -> str:
        """Locator for a key (gs://..., file://...)."""
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable."""
        return True
