"""Blob storage adapters."""

from court_vision.adapters.storage.base import BlobStore
from court_vision.adapters.storage.gcs import GCSBlobStore
from court_vision.adapters.storage.local import LocalBlobStore

__all__ = [
    "BlobStore",
    "GCSBlobStore",
    "LocalBlobStore",
]
