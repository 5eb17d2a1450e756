"""Tests for the HTTP surface: health, organized-data routes and error mapping."""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import app
from src.api.auth import require_api_key
from src.llm.exceptions import (
    CredentialInvalidError,
    CredentialMissingError,
    InvalidOutputError,
    ModelUnavailableError,
    RequestRejectedError,
    ReservedVariableError,
)
from src.services import json_service

MODEL = {"name": "gpt-3.5-turbo", "apiKey": "sk-test"}
SCHEMA = '{"title": "string", "description": "string"}'


@pytest.fixture
async def client():
    app.dependency_overrides[require_api_key] = lambda: "test-key"
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "organize-simple"


@pytest.mark.asyncio
async def test_schema_extraction(client, scripted_llm):
    scripted_llm('{"title": "A text", "description": "This is a text"}')

    resp = await client.post("/v1/organized-data/json/schema", json={
        "text": "This is a text", "model": MODEL, "jsonSchema": SCHEMA,
    })

    assert resp.status_code == 200
    data = resp.json()
    assert data["model"] == "gpt-3.5-turbo"
    assert data["refine"] is False
    assert json.loads(data["output"]) == {"title": "A text", "description": "This is a text"}
    assert "debug" not in data


@pytest.mark.asyncio
async def test_schema_extraction_with_refine_and_debug(client, scripted_llm):
    scripted_llm('{"title": "A", "description": "B"}')

    resp = await client.post("/v1/organized-data/json/schema", json={
        "text": "This is a text", "model": MODEL, "jsonSchema": SCHEMA,
        "refine": {"chunkSize": 500, "overlap": 50}, "debug": True,
    })

    assert resp.status_code == 200
    data = resp.json()
    assert data["refine"] == {"chunkSize": 500, "overlap": 50, "llmCallCount": 1}
    assert data["debug"]["llmCallCount"] == 1
    assert data["debug"]["chains"][0]["chainName"] == "RefineDocumentsChain"


@pytest.mark.asyncio
async def test_schema_extraction_refine_true_uses_defaults(client, scripted_llm):
    scripted_llm('{"title": "A", "description": "B"}')

    resp = await client.post("/v1/organized-data/json/schema", json={
        "text": "This is a text", "model": MODEL, "jsonSchema": SCHEMA, "refine": True,
    })

    assert resp.status_code == 200
    assert resp.json()["refine"] == {"chunkSize": 2000, "overlap": 100, "llmCallCount": 1}


@pytest.mark.asyncio
async def test_classification(client, scripted_llm):
    scripted_llm('{"classification": "invoice", "confidence": 90}')

    resp = await client.post("/v1/organized-data/json/classification", json={
        "text": "Total due: 42 EUR", "model": MODEL, "categories": ["invoice", "receipt"],
    })

    assert resp.status_code == 200
    assert resp.json()["classification"] == {"classification": "invoice", "confidence": 90}


@pytest.mark.asyncio
async def test_generic_output(client, scripted_llm):
    scripted_llm("Bonjour")

    resp = await client.post("/v1/organized-data/json/generic-output", json={
        "prompt": "Say hello in French", "model": MODEL,
    })

    assert resp.status_code == 200
    assert resp.json() == {"model": "gpt-3.5-turbo", "output": "Bonjour"}


@pytest.mark.asyncio
@pytest.mark.parametrize("error, status", [
    (InvalidOutputError("truncated"), 422),
    (RequestRejectedError("gpt-3.5-turbo"), 422),
    (ModelUnavailableError("llama-2"), 400),
    (CredentialMissingError("gpt-3.5-turbo"), 400),
    (CredentialInvalidError("gpt-3.5-turbo"), 400),
    (ReservedVariableError("context"), 400),
    (RuntimeError("provider down"), 500),
])
async def test_error_mapping(client, monkeypatch, error, status):
    async def failing(*args, **kwargs):
        raise error

    monkeypatch.setattr(json_service, "extract_with_example", failing)

    resp = await client.post("/v1/organized-data/json/example", json={
        "text": "Ada is 36.", "model": MODEL,
        "exampleInput": "Bob is 20.", "exampleOutput": '{"name": "Bob"}',
    })

    assert resp.status_code == status
    assert resp.json()["detail"] == str(error)


@pytest.mark.asyncio
async def test_unparseable_output_is_unprocessable(client, scripted_llm):
    scripted_llm('{"title": "x"')

    resp = await client.post("/v1/organized-data/json/schema", json={
        "text": "This is a text", "model": MODEL, "jsonSchema": SCHEMA,
    })

    assert resp.status_code == 422
    assert resp.json()["detail"].startswith("The output is not valid JSON")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"text": "", "model": MODEL, "jsonSchema": SCHEMA},
    {"text": "x", "model": MODEL, "jsonSchema": "not json"},
    {"text": "x", "model": MODEL, "jsonSchema": SCHEMA, "refine": {"chunkSize": 100, "overlap": 100}},
    {"text": "x", "model": MODEL, "jsonSchema": SCHEMA, "refine": {"chunkSize": 0, "overlap": 0}},
    {"model": MODEL, "jsonSchema": SCHEMA},
])
async def test_invalid_request_body(client, body):
    resp = await client.post("/v1/organized-data/json/schema", json=body)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_routes_require_api_key():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.post(
            "/v1/organized-data/json/generic-output",
            json={"prompt": "Hi", "model": MODEL},
            headers={"X-API-KEY": "not-a-uuid"},
        )
    assert resp.status_code == 401
