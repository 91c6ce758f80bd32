"""
PromptReel HTTP Server

FastAPI server that provides:
- POST /generate - Start a generation job
- GET /status?id= - Get job status
- GET /health - Health check
- GET / - API info

Usage:
    # Start server
    python -m uvicorn services.api.server:app --host 0.0.0.0 --port 8000

    # Or via main.py
    python main.py server
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from core.config import Config, get_config
from core.feature_flags import get_backend_status
from services.generation import GenerationDispatcher, validate_prompt

from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# Request/Response Models
class GenerateResponse(BaseModel):
    """Response from generate endpoint."""
    id: str
    status: str
    type: str


class StatusResponse(BaseModel):
    """Job status response."""
    id: str
    status: str
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    error: Optional[str] = None
    type: Optional[str] = None


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    config: Optional[Config] = None,
    dispatcher: Optional[GenerationDispatcher] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Build the application with its dispatcher and rate limiter."""
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"Starting PromptReel server ({app.state.dispatcher.mode.value} backend)...")
        for issue in config.validate():
            logger.warning(f"Configuration issue: {issue}")

        yield

        logger.info("Shutting down PromptReel server...")
        await app.state.dispatcher.close()

    app = FastAPI(
        title="PromptReel API",
        description="Text-to-video generation with image fallback",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.dispatcher = dispatcher or GenerationDispatcher(config)
    app.state.rate_limiter = rate_limiter or RateLimiter(
        window_seconds=config.rate_limit.window_seconds,
        max_entries=config.rate_limit.max_entries,
    )

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "service": "PromptReel",
            "version": VERSION,
            "endpoints": {
                "POST /generate": "Start a generation job",
                "GET /status?id=<id>": "Job status",
                "GET /health": "Health check",
            },
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            **app.state.dispatcher.get_status(),
            "config": get_backend_status(config),
            "timestamp": datetime.utcnow().isoformat(),
        }

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(request: Request):
        """Validate the prompt and start a generation job."""
        client_ip = request.headers.get("x-forwarded-for") or "unknown"
        if not app.state.rate_limiter.check(client_ip):
            return _error("Too many requests. Please wait a moment.", 429)

        try:
            body = await request.json()
        except ValueError:
            return _error("Invalid JSON body", 400)

        prompt = body.get("prompt") if isinstance(body, dict) else None
        validation = validate_prompt(prompt)
        if not validation.valid:
            return _error(validation.error, 400)

        try:
            job = await app.state.dispatcher.start_generation(validation.sanitized)
        except Exception as e:
            logger.error(f"Generation error: {e}")
            return _error(str(e) or "Failed to start generation", 500)

        logger.info(f"Job {job.id} started ({job.media_type.value}, {job.status.value})")
        return GenerateResponse(**job.to_submission())

    @app.get("/status", response_model=StatusResponse, response_model_exclude_none=True)
    async def status(id: Optional[str] = None):
        """Get the current status of a job."""
        if not id:
            return _error("Missing generation ID", 400)

        try:
            job = await app.state.dispatcher.check_status(id)
        except Exception as e:
            logger.error(f"Status check error: {e}")
            return _error(str(e) or "Failed to check status", 500)

        return StatusResponse(**job.to_status())

    return app


app = create_app()
