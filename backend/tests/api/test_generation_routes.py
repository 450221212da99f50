"""Integration tests for the HTTP surface: /api/generate, /api/jobs/{id}, /api/providers, /api/health."""

import asyncio

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from appbuilder.api.deps import get_client_id
from appbuilder.main import create_app
from appbuilder.services.generation_service import GenerationService

pytestmark = pytest.mark.integration


@pytest.fixture
def make_client(fake_adapter, fast_settings, clock):
    """Build a TestClient around a GenerationService; settings overrides as kwargs."""

    def _make(**overrides) -> tuple[TestClient, GenerationService]:
        settings = fast_settings.model_copy(update=overrides)
        service = GenerationService(fake_adapter, settings=settings, clock=clock)
        return TestClient(create_app(service)), service

    return _make


def _generate(client: TestClient, prompt="todo app", target="frontend"):
    return client.post("/api/generate", json={"prompt": prompt, "target": target})


# ============================================================================
# POST /api/generate
# ============================================================================


def test_generate_returns_camel_case_result(make_client):
    client, _ = make_client()

    with client:
        response = _generate(client)

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"jobId", "files", "gitDiff"}
    assert body["jobId"].startswith("job_")
    assert body["files"] == [{"path": "src/App.tsx", "content": "line one\nline two", "language": "tsx"}]
    assert "+++ b/src/App.tsx" in body["gitDiff"]


@pytest.mark.parametrize(
    ("payload", "detail"),
    [
        ({"prompt": "", "target": "frontend"}, "Prompt is required"),
        ({"prompt": "todo app", "target": "desktop"}, "Invalid target. Must be one of: frontend, backend, infra, sql"),
        ({}, "Prompt is required"),
    ],
)
def test_generate_invalid_input_returns_400(make_client, payload, detail):
    client, service = make_client()

    with client:
        response = client.post("/api/generate", json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_argument"
    assert response.json()["detail"] == detail
    assert len(service.store) == 0


def test_generate_over_limit_returns_429_with_retry_after(make_client):
    client, _ = make_client(rate_limit_max_requests=1)

    with client:
        assert _generate(client).status_code == 200
        response = _generate(client)

    assert response.status_code == 429
    body = response.json()
    assert body["code"] == "resource_exhausted"
    assert body["retryAfter"] == 60
    assert response.headers["Retry-After"] == "60"


def test_rotating_client_headers_does_not_reset_limit(make_client):
    client, service = make_client(rate_limit_max_requests=2)

    with client:
        statuses = [
            client.post(
                "/api/generate",
                json={"prompt": "todo app", "target": "frontend"},
                headers={"X-Client-ID": f"client-{i}", "X-Forwarded-For": f"10.0.0.{i}"},
            ).status_code
            for i in range(5)
        ]

    assert statuses == [200, 200, 429, 429, 429]
    assert len(service.store) == 2
    # One window, keyed by the peer address
    assert len(service.rate_limiter) == 1


def test_client_id_falls_back_to_anonymous_without_peer():
    request = Request({"type": "http", "method": "POST", "path": "/api/generate", "headers": [], "client": None})

    assert get_client_id(request) == "anonymous"


def test_generate_failed_job_returns_500(make_client, fake_adapter):
    fake_adapter.error = RuntimeError("upstream exploded")
    client, _ = make_client()

    with client:
        response = _generate(client)

    assert response.status_code == 500
    assert response.json()["code"] == "internal"
    assert response.json()["detail"] == "Code generation failed: upstream exploded"


def test_generate_timeout_returns_504(make_client, fake_adapter):
    fake_adapter.gate = asyncio.Event()
    client, _ = make_client(job_wait_timeout=0.05)

    with client:
        response = _generate(client)

    assert response.status_code == 504
    assert response.json()["code"] == "deadline_exceeded"
    assert response.json()["detail"] == "Code generation timed out"


# ============================================================================
# GET /api/jobs/{id}
# ============================================================================


def test_get_completed_job(make_client):
    client, _ = make_client()

    with client:
        job_id = _generate(client).json()["jobId"]
        response = client.get(f"/api/jobs/{job_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == job_id
    assert body["status"] == "completed"
    assert body["progress"] == 100
    assert body["result"]["jobId"] == job_id
    assert "createdAt" in body
    assert "completedAt" in body
    assert "error" not in body


def test_get_failed_job(make_client, fake_adapter):
    fake_adapter.available = False
    client, service = make_client()

    with client:
        _generate(client)
        (job_id,) = list(service.store._jobs)
        response = client.get(f"/api/jobs/{job_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "failed"
    assert body["error"] == "LLM service is not available"
    assert "result" not in body


def test_get_unknown_job_returns_404(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/jobs/job_missing")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"
    assert response.json()["detail"] == "Job not found"


# ============================================================================
# Ancillary routes
# ============================================================================


def test_health(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "appbuilder-backend"}


def test_providers_lists_both_backends(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/providers")

    assert response.status_code == 200
    providers = {p["id"]: p for p in response.json()["providers"]}
    assert set(providers) == {"anthropic", "local"}
    # Key is empty in test settings
    assert providers["anthropic"]["available"] is False


def test_response_carries_request_id(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/health", headers={"X-Request-ID": "0f6a5d2e-3c1b-4f9e-8a7d-2b4c6e8f0a1b"})

    assert response.headers["X-Request-ID"] == "0f6a5d2e-3c1b-4f9e-8a7d-2b4c6e8f0a1b"


def test_malformed_body_returns_400(make_client):
    client, _ = make_client()

    with client:
        response = client.post("/api/generate", json={"prompt": ["not", "a", "string"], "target": "sql"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "invalid_argument"
    assert body["detail"].startswith("prompt:")


def test_unknown_route_uses_error_shape(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"
    assert "debug_id" in response.json()


# ============================================================================
# Templates and validation
# ============================================================================


def test_templates_lists_one_starter_per_target(make_client):
    client, _ = make_client()

    with client:
        response = client.get("/api/templates")

    assert response.status_code == 200
    templates = {t["target"]: t for t in response.json()["templates"]}
    assert set(templates) == {"frontend", "backend", "infra", "sql"}
    assert templates["frontend"] == {
        "id": "frontend-starter",
        "name": "React Component",
        "description": "React functional component with local state",
        "target": "frontend",
        "language": "tsx",
        "path": "src/App.tsx",
        "template": "frontend.tsx.j2",
        "variables": ["prompt"],
    }


def test_validate_reports_issues(make_client):
    client, _ = make_client()

    with client:
        response = client.post(
            "/api/validate",
            json={"code": "// view\nconst App = () => <div>React</div>;", "language": "tsx"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "valid": False,
        "errors": [{"line": 1, "column": 1, "message": "Missing React import", "severity": "error"}],
        "suggestions": [],
    }


def test_validate_accepts_generated_file(make_client):
    client, _ = make_client()

    with client:
        generated = _generate(client).json()["files"][0]
        response = client.post(
            "/api/validate", json={"code": generated["content"], "language": generated["language"]}
        )

    assert response.status_code == 200
    assert response.json()["valid"] is True


def test_validate_empty_code_returns_400(make_client):
    client, _ = make_client()

    with client:
        response = client.post("/api/validate", json={"language": "typescript"})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_argument"
    assert response.json()["detail"] == "Code is required"
