"""
HTTP endpoint tests.

Run with:
    python -m pytest tests/test_server.py -v
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from services.api.rate_limit import RateLimiter
from services.api.server import create_app
from services.generation import GenerationDispatcher

NATIVE_PATH = "/v1/video/generations"


@pytest.fixture
def limiter(fake_clock):
    return RateLimiter(window_seconds=10, clock=fake_clock)


@pytest.fixture
def mock_client(mock_config, limiter, fake_clock):
    dispatcher = GenerationDispatcher(mock_config, clock=fake_clock)
    app = create_app(mock_config, dispatcher=dispatcher, rate_limiter=limiter)
    return TestClient(app)


def _headers(ip: str = "203.0.113.7") -> dict:
    return {"x-forwarded-for": ip}


class TestGenerateEndpoint:
    """Test POST /generate."""

    def test_mock_generation(self, mock_client):
        response = mock_client.post("/generate", json={"prompt": "a koi pond"}, headers=_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["id"].startswith("mock_")
        assert data["status"] == "queued"
        assert data["type"] == "video"

    def test_empty_prompt_rejected(self, mock_client):
        response = mock_client.post("/generate", json={"prompt": "   "}, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Prompt cannot be empty"}

    def test_empty_string_prompt_rejected(self, mock_client):
        response = mock_client.post("/generate", json={"prompt": ""}, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Prompt cannot be empty"}

    def test_missing_prompt_rejected(self, mock_client):
        response = mock_client.post("/generate", json={}, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}

    def test_long_prompt_rejected(self, mock_client):
        response = mock_client.post("/generate", json={"prompt": "x" * 241}, headers=_headers())

        assert response.status_code == 400
        assert response.json() == {"error": "Prompt must be 240 characters or less"}

    def test_malformed_body_rejected(self, mock_client):
        response = mock_client.post(
            "/generate",
            content=b"{not json",
            headers={**_headers(), "content-type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_rate_limited_per_address(self, mock_client, fake_clock):
        first = mock_client.post("/generate", json={"prompt": "one"}, headers=_headers("198.51.100.1"))
        second = mock_client.post("/generate", json={"prompt": "two"}, headers=_headers("198.51.100.1"))
        other = mock_client.post("/generate", json={"prompt": "three"}, headers=_headers("198.51.100.2"))

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.json() == {"error": "Too many requests. Please wait a moment."}
        assert other.status_code == 200

        fake_clock.advance(10)
        again = mock_client.post("/generate", json={"prompt": "four"}, headers=_headers("198.51.100.1"))
        assert again.status_code == 200

    def test_validation_happens_before_network(self, native_config, limiter, transport):
        dispatcher = GenerationDispatcher(native_config, http_client=transport.client())
        client = TestClient(create_app(native_config, dispatcher=dispatcher, rate_limiter=limiter))

        response = client.post("/generate", json={"prompt": ""}, headers=_headers())

        assert response.status_code == 400
        assert transport.requests == []

    def test_generation_failure_is_500(self, config_factory, limiter, transport):
        config = config_factory(openai_api_key="")
        dispatcher = GenerationDispatcher(config, http_client=transport.client())
        client = TestClient(create_app(config, dispatcher=dispatcher, rate_limiter=limiter))

        response = client.post("/generate", json={"prompt": "a prompt"}, headers=_headers())

        assert response.status_code == 500
        assert response.json() == {"error": "OPENAI_API_KEY is not configured"}

    def test_sanitized_prompt_sent_upstream(self, native_config, limiter, transport):
        transport.add("POST", NATIVE_PATH, httpx.Response(200, json={"id": "video_1", "status": "queued"}))
        dispatcher = GenerationDispatcher(native_config, http_client=transport.client())
        client = TestClient(create_app(native_config, dispatcher=dispatcher, rate_limiter=limiter))

        response = client.post(
            "/generate", json={"prompt": " <i>slow</i> motion rain "}, headers=_headers()
        )

        assert response.json() == {"id": "video_1", "status": "queued", "type": "video"}
        assert json.loads(transport.requests[0].content)["prompt"] == "slow motion rain"


class TestStatusEndpoint:
    """Test GET /status."""

    def test_missing_id(self, mock_client):
        response = mock_client.get("/status")

        assert response.status_code == 400
        assert response.json() == {"error": "Missing generation ID"}

    def test_mock_job_progression(self, mock_client, fake_clock):
        job_id = mock_client.post("/generate", json={"prompt": "a koi pond"}, headers=_headers()).json()["id"]

        queued = mock_client.get("/status", params={"id": job_id}).json()
        assert queued == {"id": job_id, "status": "queued", "type": "video"}

        fake_clock.advance(2.5)
        assert mock_client.get("/status", params={"id": job_id}).json()["status"] == "processing"

        fake_clock.advance(1)
        done = mock_client.get("/status", params={"id": job_id}).json()
        assert done["status"] == "succeeded"
        assert done["videoUrl"].endswith(".mp4")

    def test_unknown_fallback_image(self, mock_client):
        response = mock_client.get("/status", params={"id": "dalle_1700000000000_abcdefghi"})

        assert response.status_code == 200
        assert response.json() == {
            "id": "dalle_1700000000000_abcdefghi",
            "status": "failed",
            "error": "Image not found",
            "type": "image",
        }

    def test_backend_error_is_500(self, native_config, limiter, transport):
        transport.add("GET", f"{NATIVE_PATH}/video_1", httpx.Response(503))
        dispatcher = GenerationDispatcher(native_config, http_client=transport.client())
        client = TestClient(create_app(native_config, dispatcher=dispatcher, rate_limiter=limiter))

        response = client.get("/status", params={"id": "video_1"})

        assert response.status_code == 500
        assert response.json() == {"error": "API request failed with status 503"}


class TestInfoEndpoints:
    """Test root and health endpoints."""

    def test_root(self, mock_client):
        data = mock_client.get("/").json()

        assert data["service"] == "PromptReel"
        assert "POST /generate" in data["endpoints"]

    def test_health(self, mock_client):
        data = mock_client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["backend"] == "mock"
        assert data["mock"] is True
        assert data["config"]["mode"] == "mock"
        assert "timestamp" in data
