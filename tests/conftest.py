"""Shared fixtures for the PromptReel test suite."""

import os
import sys

import httpx
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import APIConfig, Config


class FakeClock:
    """Manually advanced clock; sleep() moves time forward instead of waiting."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays queued responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], list] = {}

    def add(self, method: str, path: str, response):
        self.routes.setdefault((method, path), []).append(response)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(500, json={"error": {"message": f"no route for {request.url.path}"}})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def transport():
    return RecordingTransport()


def make_config(**overrides) -> Config:
    """Config detached from the environment."""
    api = APIConfig(
        openai_api_key=overrides.pop("openai_api_key", "sk-test"),
        azure_endpoint=overrides.pop("azure_endpoint", ""),
        azure_api_key=overrides.pop("azure_api_key", ""),
        azure_api_version=overrides.pop("azure_api_version", "2024-12-01-preview"),
    )
    use_mock = overrides.pop("use_mock", False)
    config = Config(api=api, use_mock=use_mock)
    config.generation.image_cache_ttl_seconds = overrides.pop("image_cache_ttl_seconds", None)
    return config


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def native_config():
    return make_config()


@pytest.fixture
def azure_config():
    return make_config(azure_endpoint="https://example.openai.azure.com", azure_api_key="az-key")


@pytest.fixture
def mock_config():
    return make_config(use_mock=True)
