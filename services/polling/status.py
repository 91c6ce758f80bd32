"""
Client-side job tracking against the PromptReel HTTP API.

poll_video_status() polls GET /status for one job and reports every status
it sees. GenerationSession wraps submit + poll and keeps at most one
submission in flight: starting a new one cancels the previous one.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from services.generation.errors import AbortedError, GenerationError, PollTimeoutError
from services.generation.models import GenerationStatus, MediaType

from .poller import PollOptions, PollResult, poll

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = tuple(s.value for s in GenerationStatus if not s.is_terminal)


class StatusCheckError(GenerationError):
    """The status endpoint answered with a non-2xx response."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__("Failed to check status", error_code=f"HTTP_{status_code}")


def is_active(payload: dict[str, Any]) -> bool:
    """Keep polling while the job is queued or processing."""
    return payload.get("status") in ACTIVE_STATUSES


async def poll_video_status(
    client: httpx.AsyncClient,
    job_id: str,
    on_progress: Optional[Callable[[str], None]] = None,
    options: Optional[PollOptions] = None,
    **poll_kwargs,
) -> PollResult[dict[str, Any]]:
    """
    Poll the status endpoint until the job is terminal.

    Args:
        client: HTTP client whose base_url points at the service
        job_id: Job to poll
        on_progress: Called with the raw status string of every response
        options: Polling schedule
        **poll_kwargs: clock / sleep / rand overrides passed to poll()
    """

    async def fetch_once() -> dict[str, Any]:
        response = await client.get("/status", params={"id": job_id})
        if not response.is_success:
            raise StatusCheckError(response.status_code)

        data = response.json()
        if on_progress and data.get("status"):
            on_progress(data["status"])
        return data

    return await poll(fetch_once, is_active, options, **poll_kwargs)


@dataclass
class GenerationOutcome:
    """Finished job as seen by the client."""
    job_id: str
    media_url: str
    media_type: MediaType = MediaType.VIDEO


class GenerationSession:
    """
    Submit prompts and wait for their media.

    Usage:
        async with GenerationSession("http://localhost:8000") as session:
            outcome = await session.submit("A paper boat in a storm")
            print(outcome.media_url)
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        options: Optional[PollOptions] = None,
        on_progress: Optional[Callable[[str], None]] = None,
        **poll_kwargs,
    ):
        self.base_url = base_url.rstrip("/")
        self.options = options or PollOptions()
        self.on_progress = on_progress
        self._poll_kwargs = poll_kwargs

        self._client = client
        self._owns_client = client is None
        self._current: Optional[asyncio.Task] = None
        # Tasks stopped by cancel(), as opposed to cancellation from outside
        self._superseded: set[asyncio.Task] = set()

    async def __aenter__(self) -> "GenerationSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=30.0)
        return self._client

    async def close(self):
        self.cancel()
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    def cancel(self):
        """Cancel the in-flight submission, if any."""
        if self.in_flight:
            logger.info("Cancelling previous generation")
            self._superseded.add(self._current)
            self._current.cancel()

    async def submit(self, prompt: str) -> GenerationOutcome:
        """
        Start a generation and wait for its result.

        Raises:
            AbortedError: The submission was superseded or cancelled
            PollTimeoutError: The job did not finish in time
            GenerationError: The service reported a failure
        """
        return await self._run(self._generate(prompt))

    async def resume(self, job_id: str, media_type: MediaType = MediaType.VIDEO) -> GenerationOutcome:
        """Wait for a job submitted earlier (e.g. from a shared link)."""
        return await self._run(self._wait_for(job_id, media_type))

    async def _run(self, coro) -> GenerationOutcome:
        self.cancel()
        task = asyncio.ensure_future(coro)
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                raise AbortedError() from None
            raise
        finally:
            self._superseded.discard(task)
            if self._current is task:
                self._current = None

    async def _generate(self, prompt: str) -> GenerationOutcome:
        client = self._get_client()
        response = await client.post("/generate", json={"prompt": prompt})

        if not response.is_success:
            try:
                data = response.json()
            except ValueError:
                data = {}
            raise GenerationError(
                data.get("error") or f"Failed to start generation ({response.status_code})",
                error_code=f"HTTP_{response.status_code}",
            )

        data = response.json()
        job_id = data.get("id")
        if not job_id:
            raise GenerationError("No video ID returned from server")

        media_type = MediaType(data.get("type") or MediaType.VIDEO.value)
        logger.info(f"Job {job_id} submitted ({media_type.value})")

        return await self._wait_for(job_id, media_type)

    async def _wait_for(self, job_id: str, media_type: MediaType) -> GenerationOutcome:
        result = await poll_video_status(
            self._get_client(),
            job_id,
            on_progress=self.on_progress,
            options=self.options,
            **self._poll_kwargs,
        )

        if result.error is not None:
            if isinstance(result.error, GenerationError):
                raise result.error
            raise GenerationError(str(result.error) or "Failed to check status") from result.error

        if result.timed_out:
            raise PollTimeoutError()

        data = result.data or {}
        media_url = data.get("videoUrl")
        if data.get("status") == GenerationStatus.SUCCEEDED.value and media_url:
            return GenerationOutcome(
                job_id=job_id,
                media_url=media_url,
                media_type=MediaType(data.get("type") or media_type.value),
            )

        raise GenerationError(data.get("error") or "Failed to generate video", error_code="JOB_FAILED")
