"""Pydantic schemas for structured data validation.

This package contains:
- api.py: Request/response schemas for the REST API
- llm_outputs.py: Schemas for validating LLM outputs
- debug.py: The execution trace (debug report) returned on request

All LLM outputs are validated against Pydantic models BEFORE being returned
to a caller.
"""

from src.schemas.llm_outputs import (
    Correction,
    Analysis,
    Classification,
    GenericOutput,
)

from src.schemas.debug import (
    ChainCall,
    LlmCall,
    DebugReport,
)

from src.schemas.api import (
    ModelRequest,
    RefineParams,
    RefineRecap,
    JsonExtractSchemaRequest,
    JsonExtractExampleRequest,
    JsonAnalyzeRequest,
    JsonClassificationRequest,
    JsonGenericOutputRequest,
    JsonExtractResult,
    JsonAnalyzeResult,
    JsonClassificationResult,
    JsonGenericOutputResult,
    PdfParserUrlRequest,
    PdfParserUploadResult,
    PdfParserUrlResult,
)

__all__ = [
    # LLM outputs
    "Correction",
    "Analysis",
    "Classification",
    "GenericOutput",
    # Debug report
    "ChainCall",
    "LlmCall",
    "DebugReport",
    # API
    "ModelRequest",
    "RefineParams",
    "RefineRecap",
    "JsonExtractSchemaRequest",
    "JsonExtractExampleRequest",
    "JsonAnalyzeRequest",
    "JsonClassificationRequest",
    "JsonGenericOutputRequest",
    "JsonExtractResult",
    "JsonAnalyzeResult",
    "JsonClassificationResult",
    "JsonGenericOutputResult",
    "PdfParserUrlRequest",
    "PdfParserUploadResult",
    "PdfParserUrlResult",
]
