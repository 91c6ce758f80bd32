"""Job and status types shared by the dispatcher, backends and HTTP layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class GenerationStatus(str, Enum):
    """Status of a generation job."""
    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationStatus.SUCCEEDED, GenerationStatus.FAILED)


class MediaType(str, Enum):
    """Kind of media a job produces."""
    VIDEO = "video"
    IMAGE = "image"


@dataclass
class GenerationJob:
    """A single requested generation as seen by the service."""
    id: str
    status: GenerationStatus
    media_type: MediaType = MediaType.VIDEO
    result_url: Optional[str] = None
    error_message: Optional[str] = None

    # Backend that owns the job (mock, azure, native, image)
    provider: Optional[str] = None

    def to_submission(self) -> dict[str, Any]:
        """Wire shape returned by POST /generate."""
        return {
            "id": self.id,
            "status": self.status.value,
            "type": self.media_type.value,
        }

    def to_status(self) -> dict[str, Any]:
        """Wire shape returned by GET /status (absent fields omitted)."""
        payload: dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "type": self.media_type.value,
        }
        if self.result_url:
            payload["videoUrl"] = self.result_url
        if self.error_message:
            payload["error"] = self.error_message
        return payload
