"""PDF → plain text.

  parse_pdf(data)          → text of every page, post-processed
  load_pdf_from_url(url)   → raw bytes, at most PDF_MAX_BYTES

Only PDFs that carry a text layer are supported; scanned images come back
empty and raise PdfNotParsedError.
"""

import re

import fitz  # PyMuPDF
import httpx

from src.config import PDF_FETCH_TIMEOUT, PDF_MAX_BYTES
from src.utils.logging import log, get_logger

MODULE = "parsers.pdf"
logger = get_logger()

_WIDE_WHITESPACE = re.compile(r"\s{3,}")


class PdfParserError(Exception):
    """Base class for PDF parser errors."""


class PdfSizeError(PdfParserError):
    def __init__(self, max_bytes: int = PDF_MAX_BYTES):
        self.max_bytes = max_bytes
        super().__init__(f"The PDF file is larger than {max_bytes // (1024 * 1024)}MB")


class PdfNotParsedError(PdfParserError):
    def __init__(self):
        super().__init__(
            "The PDF file could not be parsed. It may not contain plain text "
            "or information in text format."
        )


class PdfDownloadError(PdfParserError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"The PDF file could not be downloaded: {reason}")


def post_process_text(text: str) -> str:
    """Tidy extracted text.

    - every line is trimmed
    - runs of empty lines collapse to a single empty line
    - 3+ consecutive whitespace characters inside a line become exactly 3 spaces
    """
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line == "" and lines and lines[-1] == "":
            continue
        lines.append(_WIDE_WHITESPACE.sub("   ", line))
    return "\n".join(lines)


def parse_pdf(data: bytes) -> str:
    """Extract the text of a PDF document.

    Raises:
        PdfNotParsedError: the bytes are not a readable PDF, or it has no text
    """
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            page_count = doc.page_count
            text = "".join(page.get_text("text", sort=True) for page in doc)
    except (RuntimeError, ValueError) as e:
        log.warning(logger, MODULE, "parse_failed", "PDF could not be opened",
                    error=str(e), error_type=type(e).__name__, size=len(data))
        raise PdfNotParsedError() from e

    if not text.strip():
        log.warning(logger, MODULE, "parse_empty", "PDF has no text layer",
                    pages=page_count, size=len(data))
        raise PdfNotParsedError()

    log.info(logger, MODULE, "parse_done", "PDF parsed",
             pages=page_count, size=len(data), text_length=len(text))
    return post_process_text(text)


async def load_pdf_from_url(url: str, max_bytes: int = PDF_MAX_BYTES) -> bytes:
    """Download a PDF, refusing anything larger than `max_bytes`.

    The declared Content-Length is checked first; the body is streamed and
    the download aborted as soon as it passes the limit.

    Raises:
        PdfSizeError: the file is over the limit
        PdfDownloadError: network error or non-2xx response
    """
    log.info(logger, MODULE, "download_start", "Downloading PDF", url=url)
    try:
        async with httpx.AsyncClient(timeout=PDF_FETCH_TIMEOUT, follow_redirects=True) as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    log.warning(logger, MODULE, "download_too_large", "Declared PDF size over limit",
                                url=url, declared=int(declared), max_bytes=max_bytes)
                    raise PdfSizeError(max_bytes)

                data = bytearray()
                async for chunk in response.aiter_bytes():
                    data.extend(chunk)
                    if len(data) > max_bytes:
                        log.warning(logger, MODULE, "download_too_large", "PDF size over limit",
                                    url=url, max_bytes=max_bytes)
                        raise PdfSizeError(max_bytes)
    except httpx.HTTPError as e:
        log.warning(logger, MODULE, "download_failed", "PDF download failed",
                    url=url, error=str(e), error_type=type(e).__name__)
        raise PdfDownloadError(url, str(e) or type(e).__name__) from e

    log.info(logger, MODULE, "download_done", "PDF downloaded", url=url, size=len(data))
    return bytes(data)
