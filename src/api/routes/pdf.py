"""PDF parser endpoints.

  POST /v1/parsers/pdf/upload   multipart upload (field "file"), PDF only, ≤ PDF_MAX_BYTES
  POST /v1/parsers/pdf/url      {"url": ...}, downloaded then parsed

No text layer → 422. Bad upload, oversized file or failed download → 400.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from src.api.auth import require_api_key
from src.config import PDF_MAX_BYTES
from src.parsers.pdf import PdfNotParsedError, PdfParserError, load_pdf_from_url, parse_pdf
from src.schemas import PdfParserUploadResult, PdfParserUrlRequest, PdfParserUrlResult
from src.utils.logging import log, get_logger

MODULE = "pdf_parser"
logger = get_logger()

PDF_CONTENT_TYPE = "application/pdf"

router = APIRouter(dependencies=[Depends(require_api_key)])


def _check_upload(file: UploadFile, data: bytes) -> None:
    filename = (file.filename or "").lower()
    if file.content_type != PDF_CONTENT_TYPE and not filename.endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Validation failed (expected type is pdf)")
    if not data:
        raise HTTPException(status_code=400, detail="File is required")
    if len(data) > PDF_MAX_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"Validation failed (expected size is less than {PDF_MAX_BYTES})",
        )


@router.post("/upload", response_model=PdfParserUploadResult)
async def parse_pdf_from_upload(file: UploadFile = File(...)):
    """Return the text of an uploaded PDF file."""
    data = await file.read()
    _check_upload(file, data)

    try:
        text = await run_in_threadpool(parse_pdf, data)
    except PdfNotParsedError as e:
        log.warning(logger, MODULE, "upload_unprocessable", "Uploaded PDF has no text",
                    file_name=file.filename)
        raise HTTPException(status_code=422, detail=str(e)) from e

    log.info(logger, MODULE, "upload_done", "Uploaded PDF parsed",
             file_name=file.filename, text_length=len(text))
    return PdfParserUploadResult(original_file_name=file.filename or "", content=text)


@router.post("/url", response_model=PdfParserUrlResult)
async def parse_pdf_from_url(request: PdfParserUrlRequest):
    """Return the text of a PDF available at a URL."""
    try:
        data = await load_pdf_from_url(request.url)
        text = await run_in_threadpool(parse_pdf, data)
    except PdfNotParsedError as e:
        log.warning(logger, MODULE, "url_unprocessable", "PDF has no text", url=request.url)
        raise HTTPException(status_code=422, detail=str(e)) from e
    except PdfParserError as e:
        log.warning(logger, MODULE, "url_bad_request", "PDF could not be fetched",
                    url=request.url, error=str(e), error_type=type(e).__name__)
        raise HTTPException(status_code=400, detail=str(e)) from e

    log.info(logger, MODULE, "url_done", "PDF from URL parsed",
             url=request.url, text_length=len(text))
    return PdfParserUrlResult(original_url=request.url, content=text)
