"""
Generation Dispatcher

Single entry point for starting and checking generation jobs.

Attempt chain (strictly sequential, first match wins):
1. Mock mode -> synthesized demo job, no network
2. Azure credentials -> Azure-hosted video job
3. Otherwise -> native video job
4. Any failure in 2/3 -> DALL-E image fallback
5. Fallback failure propagates to the caller
"""

import logging
import time
from typing import Any, Callable, Optional

import httpx

from core.cache import TimedCache
from core.config import Config, get_config
from core.feature_flags import BackendMode, get_backend_mode

from .backends import (
    AzureVideoBackend,
    ImageFallback,
    MockBackend,
    NativeVideoBackend,
    VideoBackend,
    is_fallback_id,
)
from .models import GenerationJob

logger = logging.getLogger(__name__)

_BACKENDS = {
    BackendMode.MOCK: MockBackend,
    BackendMode.AZURE: AzureVideoBackend,
    BackendMode.NATIVE: NativeVideoBackend,
}


class GenerationDispatcher:
    """
    Routes generation requests to the configured backend.

    Usage:
        dispatcher = GenerationDispatcher()

        job = await dispatcher.start_generation("A cat surfing at sunset")
        job = await dispatcher.check_status(job.id)

        await dispatcher.close()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        image_cache: Optional[TimedCache[str]] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the dispatcher.

        Args:
            config: Optional config override
            http_client: Optional shared HTTP client (created lazily otherwise)
            image_cache: Store for fallback image URLs
            clock: Wall clock in seconds, injectable for tests
        """
        self.config = config or get_config()
        self.mode = get_backend_mode(self.config)

        self._http_client = http_client
        self._owns_client = http_client is None

        self.image_cache = image_cache if image_cache is not None else TimedCache(
            name="image-fallback",
            ttl_seconds=self.config.generation.image_cache_ttl_seconds,
            clock=clock,
        )

        self.backend: VideoBackend = _BACKENDS[self.mode](self.config, self._get_client, clock)
        self.fallback = ImageFallback(self.config, self._get_client, self.image_cache, clock)

        logger.info(f"Generation dispatcher using {self.mode.value} backend")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.api.request_timeout)
        return self._http_client

    async def close(self):
        """Close the HTTP client if this dispatcher created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def start_generation(self, prompt: str) -> GenerationJob:
        """
        Start a generation job for an already validated prompt.

        Returns:
            GenerationJob with id, initial status and media type

        Raises:
            GenerationError: If the image fallback fails as well
        """
        if self.mode == BackendMode.MOCK:
            logger.info("Using mock mode - generating demo video")
            return await self.backend.submit(prompt)

        try:
            return await self.backend.submit(prompt)
        except Exception as e:
            logger.warning(
                f"{self.backend.name} video generation failed ({type(e).__name__}: {e}), "
                f"falling back to image generation"
            )

        try:
            return await self.fallback.submit(prompt)
        except Exception as e:
            logger.error(f"Image fallback failed: {e}")
            raise

    async def check_status(self, job_id: str) -> GenerationJob:
        """Get the current status of a job."""
        if is_fallback_id(job_id):
            return await self.fallback.check(job_id)

        return await self.backend.check(job_id)

    def get_status(self) -> dict[str, Any]:
        """Dispatcher state for health reporting."""
        return {
            "backend": self.mode.value,
            "mock": self.mode == BackendMode.MOCK,
            "cached_images": len(self.image_cache),
        }
