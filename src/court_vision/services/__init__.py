"""Application services."""

from court_vision.services.analysis_pipeline import AnalysisPipeline
from court_vision.services.artifacts import ArtifactStore, SummaryEnvelope
from court_vision.services.chat import VideoChatService
from court_vision.services.summary_generator import SummaryGenerator
from court_vision.services.uploads import UploadService

__all__ = [
    "AnalysisPipeline",
    "ArtifactStore",
    "SummaryEnvelope",
    "SummaryGenerator",
    "UploadService",
    "VideoChatService",
]
