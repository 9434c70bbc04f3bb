"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from court_vision.adapters import factory
from court_vision.adapters.job_store.base import JobStore
from court_vision.domain.enums import ErrorKind
from court_vision.domain.errors import CourtVisionError
from court_vision.services.analysis_pipeline import AnalysisPipeline
from court_vision.services.artifacts import ArtifactStore
from court_vision.services.chat import VideoChatService
from court_vision.services.uploads import UploadService

HTTP_STATUS_FOR_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.UPSTREAM_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.MALFORMED_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SCHEMA_VIOLATION: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.STORE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(error: CourtVisionError) -> HTTPException:
    """Map a pipeline error to an HTTP error response."""
    return HTTPException(
        status_code=HTTP_STATUS_FOR_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"error_kind": str(error.kind), "message": error.message},
    )


def get_job_store() -> JobStore:
    """Get the shared job store."""
    return factory.get_job_store()


def get_artifact_store() -> ArtifactStore:
    """Get an artifact store over the shared blob store."""
    return ArtifactStore(factory.get_blob_store())


def get_upload_service() -> UploadService:
    """Get the upload service instance."""
    return UploadService()


def get_analysis_pipeline() -> AnalysisPipeline:
    """Get the analysis pipeline instance."""
    return AnalysisPipeline()


def get_chat_service() -> VideoChatService:
    """Get the video chat service instance."""
    return VideoChatService()


JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
ArtifactStoreDep = Annotated[ArtifactStore, Depends(get_artifact_store)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
AnalysisPipelineDep = Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)]
ChatServiceDep = Annotated[VideoChatService, Depends(get_chat_service)]
