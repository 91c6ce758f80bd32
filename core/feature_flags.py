"""
Backend selection flags.

The video backend is chosen once from configuration:
- mock mode enabled (default): synthesized demo jobs, no network
- Azure endpoint + key present: Azure-hosted video API
- otherwise: native video API

Usage:
    from core.feature_flags import get_backend_mode

    if get_backend_mode() == BackendMode.MOCK:
        ...
"""

from enum import Enum
from typing import Optional

from core.config import Config, get_config


class BackendMode(str, Enum):
    """Video backend routing mode."""
    MOCK = "mock"        # Local demo jobs
    AZURE = "azure"      # Azure-hosted video generation
    NATIVE = "native"    # Native video generation API


def get_backend_mode(config: Optional[Config] = None) -> BackendMode:
    """Get the backend mode for a configuration (first match wins)."""
    config = config or get_config()

    if config.use_mock:
        return BackendMode.MOCK

    if config.api.has_azure_credentials:
        return BackendMode.AZURE

    return BackendMode.NATIVE


def get_backend_status(config: Optional[Config] = None) -> dict:
    """Get current backend configuration status."""
    config = config or get_config()
    mode = get_backend_mode(config)
    return {
        "mode": mode.value,
        "description": {
            "mock": "Demo jobs generated locally, no API calls",
            "azure": "Video jobs submitted to Azure OpenAI",
            "native": "Video jobs submitted to the OpenAI video API",
        }[mode.value],
        "image_fallback": bool(config.api.openai_api_key) and mode != BackendMode.MOCK,
        "env_var": "USE_SORA_MOCK",
        "issues": config.validate(),
    }
