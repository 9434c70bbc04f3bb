"""Video job store adapters."""

from court_vision.adapters.job_store.base import JobStore
from court_vision.adapters.job_store.memory import InMemoryJobStore
from court_vision.adapters.job_store.sql import SqlJobStore

__all__ = [
    "InMemoryJobStore",
    "JobStore",
    "SqlJobStore",
]
