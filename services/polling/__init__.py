"""
Polling Service

Exponential-backoff polling of job status with progress callbacks.
"""

from .poller import PollOptions, PollResult, backoff_schedule, poll
from .status import GenerationOutcome, GenerationSession, StatusCheckError, poll_video_status

__all__ = [
    "PollOptions",
    "PollResult",
    "backoff_schedule",
    "poll",
    "poll_video_status",
    "GenerationSession",
    "GenerationOutcome",
    "StatusCheckError",
]
