"""Exceptions raised by the generation and polling services."""

from typing import Optional


class GenerationError(Exception):
    """Raised when generation fails."""

    def __init__(self, message: str, error_code: str = None, provider: str = None):
        self.error_code = error_code
        self.provider = provider
        super().__init__(message)


class ConfigurationError(GenerationError):
    """A credential required by the selected backend is missing."""

    def __init__(self, message: str, provider: str = None):
        super().__init__(message, error_code="NOT_CONFIGURED", provider=provider)


class RemoteRequestError(GenerationError):
    """A backend answered with a non-2xx status or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: str = None,
        provider: str = None,
    ):
        self.status_code = status_code
        if error_code is None:
            error_code = f"HTTP_{status_code}" if status_code else "REQUEST_ERROR"
        super().__init__(message, error_code=error_code, provider=provider)


class NotFoundFallbackError(GenerationError):
    """A fallback image id is not (or no longer) in the image cache."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__("Image not found", error_code="IMAGE_NOT_FOUND", provider="image")


class PollTimeoutError(GenerationError):
    """Polling exceeded its total timeout without a terminal status."""

    def __init__(self, message: str = "Video generation timed out. Please try again."):
        super().__init__(message, error_code="TIMEOUT")


class AbortedError(GenerationError):
    """A submission was cancelled by the caller. Not shown to users."""

    def __init__(self, message: str = "Generation aborted"):
        super().__init__(message, error_code="ABORTED")
