"""
Configuration management for PromptReel.

Centralizes all configuration including:
- Backend credentials and endpoints
- Mock mode switch
- Polling and rate limit settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


@dataclass
class APIConfig:
    """API configuration for the generation backends."""

    # Native OpenAI endpoints (video + image fallback share the key)
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", "").strip())
    openai_video_base: str = "https://api.openai.com/v1/video/generations"
    openai_image_base: str = "https://api.openai.com/v1/images/generations"

    # Azure-hosted video endpoint
    azure_endpoint: str = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_ENDPOINT", "").strip().rstrip("/")
    )
    azure_api_key: str = field(default_factory=lambda: os.getenv("AZURE_OPENAI_API_KEY", "").strip())
    azure_api_version: str = field(
        default_factory=lambda: os.getenv("AZURE_OPENAI_API_VERSION", "") or "2024-12-01-preview"
    )

    # Outbound request timeout in seconds
    request_timeout: float = 60.0

    @property
    def has_azure_credentials(self) -> bool:
        return bool(self.azure_endpoint and self.azure_api_key)


@dataclass
class GenerationConfig:
    """Request parameters sent to the backends."""
    video_model: str = "sora-1"
    image_model: str = "dall-e-3"
    duration_seconds: int = 5
    video_size: str = "square"
    video_format: str = "mp4"
    image_size: str = "1024x1024"
    image_quality: str = "standard"

    # Demo video served in mock mode
    demo_video_url: str = "https://pub-817e369ba858407788b831d759045d90.r2.dev/openai-devday-oct62025.mp4"

    # Seconds to keep fallback image URLs (None = process lifetime)
    image_cache_ttl_seconds: Optional[float] = field(
        default_factory=lambda: _env_optional_float("IMAGE_CACHE_TTL_SECONDS")
    )


@dataclass
class PollConfig:
    """Client-side polling defaults (milliseconds)."""
    interval_ms: int = field(default_factory=lambda: _env_int("POLL_INTERVAL_MS", 1500))
    max_interval_ms: int = field(default_factory=lambda: _env_int("POLL_MAX_INTERVAL_MS", 6000))
    timeout_ms: int = field(default_factory=lambda: _env_int("POLL_TIMEOUT_MS", 90000))
    backoff_multiplier: float = 1.5


@dataclass
class RateLimitConfig:
    """Per-address submission limits."""
    window_seconds: float = field(default_factory=lambda: float(_env_int("RATE_LIMIT_WINDOW_SECONDS", 10)))
    max_entries: int = 1000


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    # Mock mode is on unless explicitly disabled
    use_mock: bool = field(default_factory=lambda: os.getenv("USE_SORA_MOCK", "true").lower() != "false")

    # Server binding
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if self.use_mock:
            return issues

        if self.api.azure_endpoint and not self.api.azure_api_key:
            issues.append("AZURE_OPENAI_ENDPOINT is set but AZURE_OPENAI_API_KEY is missing")
        if self.api.azure_api_key and not self.api.azure_endpoint:
            issues.append("AZURE_OPENAI_API_KEY is set but AZURE_OPENAI_ENDPOINT is missing")

        if not self.api.openai_api_key:
            if self.api.has_azure_credentials:
                issues.append("OPENAI_API_KEY not configured (image fallback unavailable)")
            else:
                issues.append("OPENAI_API_KEY not configured (needed for video and image generation)")

        if self.poll.interval_ms <= 0:
            issues.append("POLL_INTERVAL_MS must be positive")
        if self.poll.max_interval_ms < self.poll.interval_ms:
            issues.append("POLL_MAX_INTERVAL_MS is smaller than POLL_INTERVAL_MS")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
    return _config
