"""Organized-data operations: unstructured text → structured JSON.

Each operation picks a prompt, runs the model through the orchestration
layer (src.llm), and validates the raw text against its output contract:

  extract_with_schema            → SCHEMA_EXTRACTION,  JSON object
  extract_with_schema_and_refine → split + refine fold, JSON object + recap
  extract_with_example           → EXAMPLE_EXTRACTION, JSON object
  analyze_json_output            → ANALYSIS,           Analysis
  classify_text                  → CLASSIFICATION,     Classification
  handle_generic_prompt          → GENERIC,            free text

Errors are not caught here: InvalidOutputError, the src.llm taxonomy and
opaque provider errors all reach the caller unchanged (the API layer maps
them to HTTP status codes).
"""

import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Optional

from src.llm import generate, refine, split_document
from src.llm.validators import (
    validate_analysis,
    validate_classification,
    validate_extraction,
    validate_generic,
)
from src.prompts.organized_data import (
    ANALYSIS,
    CLASSIFICATION,
    EXAMPLE_EXTRACTION,
    GENERIC,
    SCHEMA_EXTRACTION,
    SCHEMA_EXTRACTION_REFINE,
)
from src.schemas.api import ModelRequest, RefineParams, RefineRecap
from src.schemas.debug import DebugReport
from src.schemas.llm_outputs import (
    ANALYSIS_OUTPUT_FORMAT,
    CLASSIFICATION_OUTPUT_FORMAT,
    Analysis,
    Classification,
)
from src.utils.logging import log, get_logger

MODULE = "json_service"
logger = get_logger()


@contextmanager
def _failures_logged(operation: str, model: ModelRequest):
    """Log `<operation>_failed` for any error escaping the block, then re-raise."""
    try:
        yield
    except Exception as e:
        log.warning(logger, MODULE, f"{operation}_failed", f"{operation} failed",
                    model=model.name, error=str(e)[:300], error_type=type(e).__name__)
        raise


@dataclass
class ExtractionResult:
    json: dict[str, Any]
    debug_report: Optional[DebugReport] = None
    refine_recap: Optional[RefineRecap] = None


@dataclass
class AnalysisResult:
    analysis: Analysis
    debug_report: Optional[DebugReport] = None


@dataclass
class ClassificationResult:
    classification: Classification
    debug_report: Optional[DebugReport] = None


@dataclass
class GenericResult:
    output: str
    debug_report: Optional[DebugReport] = None


async def extract_with_schema(
    text: str,
    model: ModelRequest,
    json_schema: str,
    debug: bool = False,
) -> ExtractionResult:
    """Zero-shot extraction of `text` into a JSON object following `json_schema`."""
    log.info(logger, MODULE, "extract_schema_start", "Extracting with schema",
             model=model.name, text_length=len(text))

    with _failures_logged("extract_schema", model):
        generation = await generate(
            model, SCHEMA_EXTRACTION, {"context": text, "json_schema": json_schema}, debug=debug,
        )
        parsed = validate_extraction(generation.text).unwrap()

    log.info(logger, MODULE, "extract_schema_done", "Extraction with schema complete",
             model=model.name, fields=len(parsed))
    return ExtractionResult(json=parsed, debug_report=generation.debug_report)


async def extract_with_schema_and_refine(
    text: str,
    model: ModelRequest,
    json_schema: str,
    refine_params: Optional[RefineParams] = None,
    debug: bool = False,
) -> ExtractionResult:
    """Extraction for long texts: split into chunks, refine the answer chunk by chunk.

    Without `refine_params` the defaults (REFINE_CHUNK_SIZE / REFINE_OVERLAP)
    are used.
    """
    params = refine_params or RefineParams()
    log.info(logger, MODULE, "extract_refine_start", "Extracting with schema and refine",
             model=model.name, text_length=len(text),
             chunk_size=params.chunk_size, overlap=params.overlap)

    with _failures_logged("extract_refine", model):
        chunks = split_document(text, params.chunk_size, params.overlap)
        output = await refine(
            model,
            SCHEMA_EXTRACTION,
            SCHEMA_EXTRACTION_REFINE,
            chunks,
            {"json_schema": json_schema},
            debug=debug,
        )
        parsed = validate_extraction(output.text).unwrap()

    recap = RefineRecap(
        chunk_size=params.chunk_size,
        overlap=params.overlap,
        llm_call_count=output.llm_call_count,
    )
    log.info(logger, MODULE, "extract_refine_done", "Extraction with refine complete",
             model=model.name, chunk_count=len(chunks), llm_call_count=output.llm_call_count)
    return ExtractionResult(json=parsed, debug_report=output.debug_report, refine_recap=recap)


async def extract_with_example(
    text: str,
    model: ModelRequest,
    example_input: str,
    example_output: str,
    debug: bool = False,
) -> ExtractionResult:
    """One-shot extraction: the JSON shape comes from an input/output example."""
    log.info(logger, MODULE, "extract_example_start", "Extracting with example",
             model=model.name, text_length=len(text))

    with _failures_logged("extract_example", model):
        generation = await generate(
            model,
            EXAMPLE_EXTRACTION,
            {"context": text, "example_input": example_input, "example_output": example_output},
            debug=debug,
        )
        parsed = validate_extraction(generation.text).unwrap()

    log.info(logger, MODULE, "extract_example_done", "Extraction with example complete",
             model=model.name, fields=len(parsed))
    return ExtractionResult(json=parsed, debug_report=generation.debug_report)


async def analyze_json_output(
    model: ModelRequest,
    json_output: str,
    original_text: str,
    json_schema: str,
    debug: bool = False,
) -> AnalysisResult:
    """Ask the model which fields of a generated JSON look wrong, and why."""
    log.info(logger, MODULE, "analysis_start", "Analyzing JSON output",
             model=model.name, text_length=len(original_text))

    with _failures_logged("analysis", model):
        generation = await generate(
            model,
            ANALYSIS,
            {
                "json_schema": json_schema,
                "original_text": original_text,
                "json_output": json_output,
                "output_format": json.dumps(ANALYSIS_OUTPUT_FORMAT),
            },
            debug=debug,
        )
        analysis = validate_analysis(generation.text).unwrap()

    log.info(logger, MODULE, "analysis_done", "Analysis complete",
             model=model.name, corrections=len(analysis.corrections))
    return AnalysisResult(analysis=analysis, debug_report=generation.debug_report)


def _render_categories(categories: list[str]) -> str:
    return "\n".join(f"- {category}" for category in categories)


async def classify_text(
    model: ModelRequest,
    text: str,
    categories: list[str],
    debug: bool = False,
) -> ClassificationResult:
    """Pick the best-fitting category for `text` (or "other")."""
    log.info(logger, MODULE, "classification_start", "Classifying text",
             model=model.name, text_length=len(text), category_count=len(categories))

    with _failures_logged("classification", model):
        generation = await generate(
            model,
            CLASSIFICATION,
            {
                "categories": _render_categories(categories),
                "text": text,
                "output_format": json.dumps(CLASSIFICATION_OUTPUT_FORMAT),
            },
            debug=debug,
        )
        classification = validate_classification(generation.text).unwrap()

    log.info(logger, MODULE, "classification_done", "Classification complete",
             model=model.name, classification=classification.classification,
             confidence=classification.confidence)
    return ClassificationResult(classification=classification, debug_report=generation.debug_report)


async def handle_generic_prompt(
    model: ModelRequest,
    prompt: str,
    debug: bool = False,
) -> GenericResult:
    log.info(logger, MODULE, "generic_start", "Running generic prompt",
             model=model.name, prompt_length=len(prompt))

    with _failures_logged("generic", model):
        generation = await generate(model, GENERIC, {"prompt": prompt}, debug=debug)
        result = validate_generic(generation.text).unwrap()

    log.info(logger, MODULE, "generic_done", "Generic prompt complete",
             model=model.name, output_length=len(result.output))
    return GenericResult(output=result.output, debug_report=generation.debug_report)
