"""HTTP interface for the generation service."""

from .rate_limit import RateLimiter

__all__ = ["RateLimiter"]
