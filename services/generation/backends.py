"""
Generation Backends

One submit/check capability per remote service:
- MockBackend: demo jobs that complete after a few seconds, no network
- AzureVideoBackend: Azure OpenAI hosted video jobs
- NativeVideoBackend: OpenAI video generation API
- ImageFallback: DALL-E image generation used when video generation fails

Each backend maps its own status vocabulary onto GenerationStatus.
"""

import logging
import random
import string
import time
from typing import Any, Awaitable, Callable, Optional

import httpx

from core.cache import TimedCache
from core.config import Config

from .errors import ConfigurationError, NotFoundFallbackError, RemoteRequestError
from .models import GenerationJob, GenerationStatus, MediaType

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Awaitable[httpx.AsyncClient]]

MOCK_PREFIX = "mock_"
FALLBACK_PREFIX = "dalle_"

# Simulated mock timings (milliseconds since submission)
MOCK_QUEUED_MS = 2000
MOCK_PROCESSING_MS = 3000

NATIVE_NOT_AVAILABLE = (
    "The OpenAI Sora API is not yet publicly available. Please set USE_SORA_MOCK=true "
    "to use demo mode, or configure Azure OpenAI credentials."
)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def make_job_id(prefix: str, now_ms: int) -> str:
    """Build a locally generated id: <prefix><epoch-ms>_<9 base36 chars>."""
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}{now_ms}_{suffix}"


def is_fallback_id(job_id: str) -> bool:
    return job_id.startswith(FALLBACK_PREFIX)


# =============================================================================
# STATUS NORMALIZATION
# =============================================================================

AZURE_STATUS_MAP = {
    "notStarted": GenerationStatus.QUEUED,
    "queued": GenerationStatus.QUEUED,
    "preprocessing": GenerationStatus.QUEUED,
    "running": GenerationStatus.PROCESSING,
    "processing": GenerationStatus.PROCESSING,
    "succeeded": GenerationStatus.SUCCEEDED,
    "failed": GenerationStatus.FAILED,
    "cancelled": GenerationStatus.FAILED,
    "canceled": GenerationStatus.FAILED,
    "expired": GenerationStatus.FAILED,
}


def normalize_native_status(value: Any) -> GenerationStatus:
    """Native statuses already use our vocabulary."""
    try:
        return GenerationStatus(value)
    except ValueError:
        logger.warning(f"Unrecognized native status {value!r}, treating as processing")
        return GenerationStatus.PROCESSING


def normalize_azure_status(value: Any) -> GenerationStatus:
    """Map Azure job states; anything unrecognized keeps the job polling."""
    status = AZURE_STATUS_MAP.get(value)
    if status is None:
        logger.warning(f"Unrecognized Azure status {value!r}, treating as processing")
        return GenerationStatus.PROCESSING
    return status


def _remote_error_message(response: httpx.Response, label: str) -> str:
    """Prefer the backend's own error message when the body parses."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])

    return f"{label} request failed with status {response.status_code}"


def _nested(data: Any, *keys: str) -> Optional[Any]:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


# =============================================================================
# BACKENDS
# =============================================================================

class VideoBackend:
    """Base class for video backends: submit a prompt, check a job."""

    name = "base"
    label = "API"

    def __init__(
        self,
        config: Config,
        client_factory: ClientFactory,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._client_factory = client_factory
        self._clock = clock

    def _now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    async def submit(self, prompt: str) -> GenerationJob:
        raise NotImplementedError

    async def check(self, job_id: str) -> GenerationJob:
        raise NotImplementedError

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, converting transport failures to RemoteRequestError."""
        client = await self._client_factory()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteRequestError(
                f"{self.label} timeout: {type(e).__name__}",
                error_code="TIMEOUT",
                provider=self.name,
            ) from e
        except httpx.RequestError as e:
            raise RemoteRequestError(
                f"{self.label} request failed: {type(e).__name__}: {e}",
                provider=self.name,
            ) from e

    def _raise_for_response(self, response: httpx.Response):
        if response.is_success:
            return
        raise RemoteRequestError(
            _remote_error_message(response, self.label),
            status_code=response.status_code,
            provider=self.name,
        )


class MockBackend(VideoBackend):
    """Synthesized demo jobs: queued, then processing, then a fixed demo video."""

    name = "mock"
    label = "Mock"

    async def submit(self, prompt: str) -> GenerationJob:
        job_id = make_job_id(MOCK_PREFIX, self._now_ms())
        logger.info(f"Mock job {job_id} created for prompt: {prompt[:50]}")
        return GenerationJob(
            id=job_id,
            status=GenerationStatus.QUEUED,
            media_type=MediaType.VIDEO,
            provider=self.name,
        )

    async def check(self, job_id: str) -> GenerationJob:
        parts = job_id.split("_")
        try:
            created_at = int(parts[1]) if len(parts) > 1 else 0
        except ValueError:
            created_at = 0

        elapsed = self._now_ms() - created_at

        if elapsed < MOCK_QUEUED_MS:
            status = GenerationStatus.QUEUED
        elif elapsed < MOCK_PROCESSING_MS:
            status = GenerationStatus.PROCESSING
        else:
            return GenerationJob(
                id=job_id,
                status=GenerationStatus.SUCCEEDED,
                media_type=MediaType.VIDEO,
                result_url=self.config.generation.demo_video_url,
                provider=self.name,
            )

        return GenerationJob(id=job_id, status=status, media_type=MediaType.VIDEO, provider=self.name)


class NativeVideoBackend(VideoBackend):
    """Video generation through the OpenAI video API."""

    name = "native"
    label = "API"

    def _headers(self) -> dict:
        api_key = self.config.api.openai_api_key
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured", provider=self.name)
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def submit(self, prompt: str) -> GenerationJob:
        headers = self._headers()
        gen = self.config.generation
        payload = {
            "model": gen.video_model,
            "prompt": prompt.strip(),
            "duration_seconds": gen.duration_seconds,
            "size": gen.video_size,
            "format": gen.video_format,
        }

        response = await self._request(
            "POST", self.config.api.openai_video_base, json=payload, headers=headers
        )

        if response.status_code == 404:
            raise RemoteRequestError(NATIVE_NOT_AVAILABLE, status_code=404, provider=self.name)
        self._raise_for_response(response)

        data = response.json()
        job_id = data.get("id")
        if not job_id:
            raise RemoteRequestError(
                "No job id in video API response", error_code="NO_JOB_ID", provider=self.name
            )

        logger.info(f"Native video job created: {job_id}")
        return GenerationJob(
            id=job_id,
            status=normalize_native_status(data.get("status")),
            media_type=MediaType.VIDEO,
            provider=self.name,
        )

    async def check(self, job_id: str) -> GenerationJob:
        headers = self._headers()
        headers.pop("Content-Type")

        response = await self._request(
            "GET", f"{self.config.api.openai_video_base}/{job_id}", headers=headers
        )

        if response.status_code == 404:
            raise RemoteRequestError(
                "The OpenAI Sora API is not yet publicly available. Please use mock mode or Azure OpenAI.",
                status_code=404,
                provider=self.name,
            )
        self._raise_for_response(response)

        data = response.json()
        return GenerationJob(
            id=data.get("id") or job_id,
            status=normalize_native_status(data.get("status")),
            media_type=MediaType.VIDEO,
            result_url=_nested(data, "output", "url"),
            error_message=_nested(data, "error", "message"),
            provider=self.name,
        )


class AzureVideoBackend(VideoBackend):
    """Video generation through an Azure OpenAI deployment."""

    name = "azure"
    label = "Azure API"

    def _headers(self) -> dict:
        api = self.config.api
        if not api.has_azure_credentials:
            raise ConfigurationError("Azure OpenAI credentials are not configured", provider=self.name)
        return {
            "api-key": api.azure_api_key,
            "Content-Type": "application/json",
        }

    def _jobs_url(self, job_id: Optional[str] = None) -> str:
        api = self.config.api
        base = f"{api.azure_endpoint}/openai/v1/video/generations/jobs"
        if job_id:
            base = f"{base}/{job_id}"
        return f"{base}?api-version={api.azure_api_version}"

    async def submit(self, prompt: str) -> GenerationJob:
        headers = self._headers()
        gen = self.config.generation
        payload = {
            "prompt": prompt.strip(),
            "duration_seconds": gen.duration_seconds,
            "size": gen.video_size,
            "format": gen.video_format,
        }

        response = await self._request("POST", self._jobs_url(), json=payload, headers=headers)
        self._raise_for_response(response)

        data = response.json()
        job_id = data.get("id")
        if not job_id:
            raise RemoteRequestError(
                "No job id in Azure API response", error_code="NO_JOB_ID", provider=self.name
            )

        logger.info(f"Azure video job created: {job_id}")
        return GenerationJob(
            id=job_id,
            status=GenerationStatus.QUEUED,
            media_type=MediaType.VIDEO,
            provider=self.name,
        )

    async def check(self, job_id: str) -> GenerationJob:
        headers = self._headers()
        headers.pop("Content-Type")

        response = await self._request("GET", self._jobs_url(job_id), headers=headers)
        self._raise_for_response(response)

        data = response.json()
        return GenerationJob(
            id=data.get("id") or job_id,
            status=normalize_azure_status(data.get("status")),
            media_type=MediaType.VIDEO,
            result_url=_nested(data, "result", "url"),
            error_message=_nested(data, "error", "message"),
            provider=self.name,
        )


class ImageFallback(VideoBackend):
    """
    DALL-E image generation used when the video backend fails.

    Completes synchronously at submission: the image URL is kept in the
    fallback cache under a locally generated id, so status checks never
    need the network.
    """

    name = "image"
    label = "DALL-E API"

    def __init__(
        self,
        config: Config,
        client_factory: ClientFactory,
        cache: TimedCache[str],
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(config, client_factory, clock)
        self.cache = cache

    async def submit(self, prompt: str) -> GenerationJob:
        api_key = self.config.api.openai_api_key
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured", provider=self.name)

        logger.info("Falling back to DALL-E image generation")

        gen = self.config.generation
        payload = {
            "model": gen.image_model,
            "prompt": prompt.strip(),
            "n": 1,
            "size": gen.image_size,
            "quality": gen.image_quality,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        response = await self._request(
            "POST", self.config.api.openai_image_base, json=payload, headers=headers
        )
        self._raise_for_response(response)

        data = response.json()
        images = data.get("data") or []
        image_url = images[0].get("url") if images and isinstance(images[0], dict) else None
        if not image_url:
            raise RemoteRequestError(
                "No image URL returned from DALL-E", error_code="NO_IMAGE_URL", provider=self.name
            )

        job_id = make_job_id(FALLBACK_PREFIX, self._now_ms())
        self.cache.set(job_id, image_url)
        logger.info(f"Fallback image stored as {job_id}")

        return GenerationJob(
            id=job_id,
            status=GenerationStatus.SUCCEEDED,
            media_type=MediaType.IMAGE,
            result_url=image_url,
            provider=self.name,
        )

    def lookup(self, job_id: str) -> str:
        """Return the stored image URL or raise NotFoundFallbackError."""
        image_url = self.cache.get(job_id)
        if not image_url:
            raise NotFoundFallbackError(job_id)
        return image_url

    async def check(self, job_id: str) -> GenerationJob:
        try:
            image_url = self.lookup(job_id)
        except NotFoundFallbackError as e:
            logger.warning(f"Fallback image {job_id} not in cache")
            return GenerationJob(
                id=job_id,
                status=GenerationStatus.FAILED,
                media_type=MediaType.IMAGE,
                error_message=str(e),
                provider=self.name,
            )

        return GenerationJob(
            id=job_id,
            status=GenerationStatus.SUCCEEDED,
            media_type=MediaType.IMAGE,
            result_url=image_url,
            provider=self.name,
        )
