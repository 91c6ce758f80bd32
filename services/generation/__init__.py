"""
Generation Service

Starts and checks generation jobs through one of:
- Mock backend (demo mode)
- Azure-hosted video API
- Native video API
with DALL-E image generation as the fallback.
"""

from .dispatcher import GenerationDispatcher
from .errors import (
    AbortedError,
    ConfigurationError,
    GenerationError,
    NotFoundFallbackError,
    PollTimeoutError,
    RemoteRequestError,
)
from .models import GenerationJob, GenerationStatus, MediaType
from .validation import PromptValidation, validate_prompt

__all__ = [
    "GenerationDispatcher",
    "GenerationJob",
    "GenerationStatus",
    "MediaType",
    "PromptValidation",
    "validate_prompt",
    "GenerationError",
    "ConfigurationError",
    "RemoteRequestError",
    "NotFoundFallbackError",
    "PollTimeoutError",
    "AbortedError",
]
