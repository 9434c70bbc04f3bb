"""Video annotation provider adapters."""

from court_vision.adapters.annotation.base import AnnotationClient, OperationHandle
from court_vision.adapters.annotation.google import GoogleVideoIntelligenceClient
from court_vision.adapters.annotation.stub import StubAnnotationClient

__all__ = [
    "AnnotationClient",
    "GoogleVideoIntelligenceClient",
    "OperationHandle",
    "StubAnnotationClient",
]
