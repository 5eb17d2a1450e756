"""Tests for the PDF parser and its endpoints."""

import fitz
import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import app
from src.api.auth import require_api_key
from src.parsers.pdf import (
    PdfDownloadError,
    PdfNotParsedError,
    PdfSizeError,
    load_pdf_from_url,
    parse_pdf,
    post_process_text,
)

PDF_URL = "https://example.com/report.pdf"


def _pdf(*lines: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    for i, line in enumerate(lines):
        page.insert_text((72, 72 + 20 * i), line)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def mock_http(monkeypatch):
    """Route the parser's HTTP client through `handler`."""
    real_client = httpx.AsyncClient

    def install(handler):
        monkeypatch.setattr(
            "src.parsers.pdf.httpx.AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    return install


@pytest.fixture
async def client():
    app.dependency_overrides[require_api_key] = lambda: "test-key"
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def test_post_process_trims_lines():
    assert post_process_text("  Title  \n\tBody\t") == "Title\nBody"


def test_post_process_collapses_blank_lines():
    assert post_process_text("a\n\n\n\n b\n   \n\nc") == "a\n\nb\n\nc"


def test_post_process_collapses_wide_whitespace():
    assert post_process_text("Name      Amount\t\t\t\tTotal") == "Name   Amount   Total"
    # Two spaces are left alone
    assert post_process_text("a  b") == "a  b"


def test_parse_pdf():
    text = parse_pdf(_pdf("Invoice 2024-001", "Total due: 42 EUR"))
    assert "Invoice 2024-001" in text
    assert "Total due: 42 EUR" in text


def test_parse_pdf_without_text():
    with pytest.raises(PdfNotParsedError):
        parse_pdf(_pdf())


def test_parse_invalid_bytes():
    with pytest.raises(PdfNotParsedError):
        parse_pdf(b"definitely not a pdf")


@pytest.mark.asyncio
async def test_load_pdf_from_url(mock_http):
    data = _pdf("Hello")
    mock_http(lambda request: httpx.Response(200, content=data))

    assert await load_pdf_from_url(PDF_URL) == data


@pytest.mark.asyncio
async def test_load_pdf_too_large(mock_http):
    mock_http(lambda request: httpx.Response(200, content=b"x" * 64))

    with pytest.raises(PdfSizeError):
        await load_pdf_from_url(PDF_URL, max_bytes=32)


@pytest.mark.asyncio
async def test_load_pdf_not_found(mock_http):
    mock_http(lambda request: httpx.Response(404))

    with pytest.raises(PdfDownloadError):
        await load_pdf_from_url(PDF_URL)


@pytest.mark.asyncio
async def test_upload_endpoint(client):
    files = {"file": ("invoice.pdf", _pdf("Invoice 2024-001"), "application/pdf")}
    resp = await client.post("/v1/parsers/pdf/upload", files=files)

    assert resp.status_code == 200
    data = resp.json()
    assert data["originalFileName"] == "invoice.pdf"
    assert "Invoice 2024-001" in data["content"]


@pytest.mark.asyncio
async def test_upload_rejects_non_pdf(client):
    files = {"file": ("notes.txt", b"plain text", "text/plain")}
    resp = await client.post("/v1/parsers/pdf/upload", files=files)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_upload_without_text_is_unprocessable(client):
    files = {"file": ("scan.pdf", _pdf(), "application/pdf")}
    resp = await client.post("/v1/parsers/pdf/upload", files=files)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_url_endpoint(client, mock_http):
    data = _pdf("Annual report")
    mock_http(lambda request: httpx.Response(200, content=data))

    resp = await client.post("/v1/parsers/pdf/url", json={"url": PDF_URL})

    assert resp.status_code == 200
    body = resp.json()
    assert body["originalUrl"] == PDF_URL
    assert "Annual report" in body["content"]


@pytest.mark.asyncio
async def test_url_endpoint_download_failure(client, mock_http):
    mock_http(lambda request: httpx.Response(500))
    resp = await client.post("/v1/parsers/pdf/url", json={"url": PDF_URL})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_url_endpoint_rejects_non_http_url(client):
    resp = await client.post("/v1/parsers/pdf/url", json={"url": "ftp://example.com/a.pdf"})
    assert resp.status_code == 400
