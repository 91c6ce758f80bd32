"""
PromptReel Services

- generation: backend dispatch, status normalization, prompt validation
- polling: exponential-backoff status polling
- api: FastAPI server
"""

from .generation import GenerationDispatcher, GenerationJob, GenerationStatus, MediaType
from .polling import PollOptions, PollResult, poll

__all__ = [
    "GenerationDispatcher",
    "GenerationJob",
    "GenerationStatus",
    "MediaType",
    "PollOptions",
    "PollResult",
    "poll",
]
