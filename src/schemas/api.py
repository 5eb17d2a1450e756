"""Pydantic schemas for API requests/responses."""

import json
from typing import Optional, Union

from pydantic import ConfigDict, Field, field_validator, model_validator

from src.config import REFINE_CHUNK_SIZE, REFINE_OVERLAP
from src.schemas.base import CamelModel
from src.schemas.debug import DebugReport
from src.schemas.llm_outputs import Analysis, Classification


def _must_be_json(v: str) -> str:
    try:
        json.loads(v)
    except (TypeError, ValueError):
        raise ValueError("must be a valid JSON string")
    return v


def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("must not be empty")
    return v


# =============================================================================
# SHARED
# =============================================================================

class ModelRequest(CamelModel):
    """Which provider model to use and the credential to call it with."""
    name: str = Field("gpt-3.5-turbo", description="Name of the model")
    api_key: Optional[str] = Field(None, description="API key of the model")

    model_config = ConfigDict(frozen=True)


class RefineParams(CamelModel):
    """Chunking parameters for refine extraction."""
    chunk_size: int = Field(REFINE_CHUNK_SIZE, gt=0, description="Size of chunks to split the document into")
    overlap: int = Field(REFINE_OVERLAP, ge=0, description="Overlap between chunks")

    @model_validator(mode="after")
    def overlap_below_chunk_size(self) -> "RefineParams":
        if self.overlap >= self.chunk_size:
            raise ValueError("chunkSize must be greater than overlap")
        return self


class RefineRecap(RefineParams):
    """How a refine extraction ran: its parameters and how many model calls it made."""
    llm_call_count: int


# =============================================================================
# ORGANIZED DATA — REQUESTS
# =============================================================================

class _ModelBoundRequest(CamelModel):
    model: ModelRequest
    debug: bool = Field(False, description="If a debug report should be generated")


class JsonExtractSchemaRequest(_ModelBoundRequest):
    text: str = Field(..., description="Text to extract structured data from")
    json_schema: str = Field(..., description="JSON schema to use as model for data extraction")
    refine: Optional[Union[RefineParams, bool]] = Field(
        None, description="true, or chunking parameters, to use multi-step refine extraction"
    )

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("json_schema")
    @classmethod
    def schema_is_json(cls, v: str) -> str:
        return _must_be_json(v)


class JsonExtractExampleRequest(_ModelBoundRequest):
    text: str = Field(..., description="Text to extract structured data from")
    example_input: str = Field(..., description="Example input text")
    example_output: str = Field(..., description="Example of desired JSON output")

    @field_validator("text", "example_input")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("example_output")
    @classmethod
    def example_is_json(cls, v: str) -> str:
        return _must_be_json(v)


class JsonAnalyzeRequest(_ModelBoundRequest):
    original_text: str = Field(..., description="Original text the JSON was generated from")
    json_output: str = Field(..., description="JSON output from the data extraction")
    json_schema: str = Field(..., description="JSON schema used for data extraction")


class JsonClassificationRequest(_ModelBoundRequest):
    text: str = Field(..., description="Text to classify")
    categories: list[str] = Field(..., min_length=1, description="Categories to classify the text into")

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, v: str) -> str:
        return _not_blank(v)


class JsonGenericOutputRequest(_ModelBoundRequest):
    prompt: str = Field(..., description="Prompt to provide to the model")

    @field_validator("prompt")
    @classmethod
    def prompt_not_empty(cls, v: str) -> str:
        return _not_blank(v)


# =============================================================================
# ORGANIZED DATA — RESPONSES
# =============================================================================

class JsonExtractResult(CamelModel):
    model: str
    refine: Union[RefineRecap, bool] = False
    output: str
    debug: Optional[DebugReport] = None


class JsonAnalyzeResult(CamelModel):
    model: str
    analysis: Analysis
    debug: Optional[DebugReport] = None


class JsonClassificationResult(CamelModel):
    model: str
    classification: Classification
    debug: Optional[DebugReport] = None


class JsonGenericOutputResult(CamelModel):
    model: str
    output: str
    debug: Optional[DebugReport] = None


# =============================================================================
# PARSERS
# =============================================================================

class PdfParserUrlRequest(CamelModel):
    url: str = Field(..., description="URL of the PDF file to parse")

    @field_validator("url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v


class PdfParserUploadResult(CamelModel):
    original_file_name: str
    content: str


class PdfParserUrlResult(CamelModel):
    original_url: str
    content: str
