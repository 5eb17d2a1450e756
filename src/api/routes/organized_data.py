"""Organized-data endpoints: structured JSON from unstructured text.

  POST /v1/organized-data/json/schema          extraction from a JSON schema (+ refine)
  POST /v1/organized-data/json/example         extraction from an input/output example
  POST /v1/organized-data/json/analysis        analysis of a previous extraction
  POST /v1/organized-data/json/classification  text classification
  POST /v1/organized-data/json/generic-output  free prompt

Service errors map to status codes in one place (`_http_error`).
"""

import json

from fastapi import APIRouter, Depends, HTTPException

from src.api.auth import require_api_key
from src.llm.exceptions import (
    CredentialInvalidError,
    CredentialMissingError,
    InvalidOutputError,
    ModelUnavailableError,
    RequestRejectedError,
    ReservedVariableError,
)
from src.schemas import (
    JsonAnalyzeRequest,
    JsonAnalyzeResult,
    JsonClassificationRequest,
    JsonClassificationResult,
    JsonExtractExampleRequest,
    JsonExtractResult,
    JsonExtractSchemaRequest,
    JsonGenericOutputRequest,
    JsonGenericOutputResult,
    RefineParams,
)
from src.services import json_service
from src.utils.logging import log, get_logger

MODULE = "organized_data"
logger = get_logger()

UNPROCESSABLE = (InvalidOutputError, RequestRejectedError)
BAD_REQUEST = (
    ModelUnavailableError,
    CredentialMissingError,
    CredentialInvalidError,
    ReservedVariableError,
)

router = APIRouter(dependencies=[Depends(require_api_key)])


def _http_error(e: Exception, endpoint: str) -> HTTPException:
    if isinstance(e, UNPROCESSABLE):
        log.warning(logger, MODULE, "unprocessable", "Request could not be processed",
                    endpoint=endpoint, error=str(e), error_type=type(e).__name__)
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, BAD_REQUEST):
        log.warning(logger, MODULE, "bad_request", "Request rejected",
                    endpoint=endpoint, error=str(e), error_type=type(e).__name__)
        return HTTPException(status_code=400, detail=str(e))
    log.error(logger, MODULE, "internal_error", "Unexpected error while processing request",
              endpoint=endpoint, error=str(e), error_type=type(e).__name__)
    return HTTPException(status_code=500, detail=str(e) or "Internal Server Error")


@router.post("/schema", response_model=JsonExtractResult, response_model_exclude_none=True)
async def extract_with_schema(request: JsonExtractSchemaRequest):
    """Generate structured JSON from a text and a JSON schema.

    With `refine` (true, or chunking parameters) the text is split into
    chunks and the answer is refined chunk by chunk.
    """
    try:
        if request.refine:
            params = request.refine if isinstance(request.refine, RefineParams) else None
            result = await json_service.extract_with_schema_and_refine(
                request.text, request.model, request.json_schema, params, request.debug,
            )
        else:
            result = await json_service.extract_with_schema(
                request.text, request.model, request.json_schema, request.debug,
            )
    except Exception as e:
        raise _http_error(e, "schema") from e

    return JsonExtractResult(
        model=request.model.name,
        refine=result.refine_recap or False,
        output=json.dumps(result.json),
        debug=result.debug_report if request.debug else None,
    )


@router.post("/example", response_model=JsonExtractResult, response_model_exclude_none=True)
async def extract_with_example(request: JsonExtractExampleRequest):
    """Generate structured JSON from a text and an input/output example."""
    try:
        result = await json_service.extract_with_example(
            request.text, request.model, request.example_input, request.example_output, request.debug,
        )
    except Exception as e:
        raise _http_error(e, "example") from e

    return JsonExtractResult(
        model=request.model.name,
        refine=False,
        output=json.dumps(result.json),
        debug=result.debug_report if request.debug else None,
    )


@router.post("/analysis", response_model=JsonAnalyzeResult, response_model_exclude_none=True)
async def analyze_json_output(request: JsonAnalyzeRequest):
    """Point out fields of a generated JSON that look wrong, with suggestions."""
    try:
        result = await json_service.analyze_json_output(
            request.model, request.json_output, request.original_text, request.json_schema, request.debug,
        )
    except Exception as e:
        raise _http_error(e, "analysis") from e

    return JsonAnalyzeResult(
        model=request.model.name,
        analysis=result.analysis,
        debug=result.debug_report,
    )


@router.post("/classification", response_model=JsonClassificationResult, response_model_exclude_none=True)
async def classify_text(request: JsonClassificationRequest):
    """Classify a text into one of the given categories."""
    try:
        result = await json_service.classify_text(
            request.model, request.text, request.categories, request.debug,
        )
    except Exception as e:
        raise _http_error(e, "classification") from e

    return JsonClassificationResult(
        model=request.model.name,
        classification=result.classification,
        debug=result.debug_report,
    )


@router.post("/generic-output", response_model=JsonGenericOutputResult, response_model_exclude_none=True)
async def generic_output(request: JsonGenericOutputRequest):
    try:
        result = await json_service.handle_generic_prompt(request.model, request.prompt, request.debug)
    except Exception as e:
        raise _http_error(e, "generic-output") from e

    return JsonGenericOutputResult(
        model=request.model.name,
        output=result.output,
        debug=result.debug_report,
    )
