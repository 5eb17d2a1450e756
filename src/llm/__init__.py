"""LLM orchestration package.

  from src.llm import generate, refine, split_document

  # One prompt, one call
  generation = await generate(model, SCHEMA_EXTRACTION,
                              {"context": text, "json_schema": schema},
                              debug=True)

  # Long text: split, then fold the model over the chunks in order
  chunks = split_document(text, chunk_size=2000, overlap=100)
  result = await refine(model, SCHEMA_EXTRACTION, SCHEMA_EXTRACTION_REFINE,
                        chunks, {"json_schema": schema})

Architecture:
  client.py     → model name + API key → ChatOpenAI
  prompts.py    → strict template formatting, refine-protocol checks
  splitter.py   → overlapping chunks on natural boundaries
  tracing.py    → event sinks: TraceRecorder (debug report), CallCounter
  generator.py  → single-shot call + provider error translation
  refinement.py → ordered fold over chunks (refine)
  parser.py     → JSON extraction from raw model text
  validators.py → per-use-case output contracts (Checked outcomes)
  exceptions.py → error taxonomy
"""

from src.llm.client import resolve_model, SUPPORTED_MODELS

from src.llm.exceptions import (
    LLMServiceError,
    ModelUnavailableError,
    CredentialMissingError,
    CredentialInvalidError,
    RequestRejectedError,
    TemplateFormatError,
    RefineTemplateVariableError,
    ReservedVariableError,
    InvalidOutputError,
)

from src.llm.prompts import (
    format_prompt,
    check_refine_templates,
    check_reserved_values,
    RESERVED_VARIABLES,
)

from src.llm.splitter import split_document, Chunk

from src.llm.tracing import EventSink, TraceRecorder, CallCounter

from src.llm.generator import generate, run_chain, Generation

from src.llm.refinement import refine, RefineOutput

from src.llm.parser import extract_json

from src.llm.validators import (
    Checked,
    validate_extraction,
    validate_analysis,
    validate_classification,
    validate_generic,
)

__all__ = [
    # Client
    "resolve_model",
    "SUPPORTED_MODELS",
    # Errors
    "LLMServiceError",
    "ModelUnavailableError",
    "CredentialMissingError",
    "CredentialInvalidError",
    "RequestRejectedError",
    "TemplateFormatError",
    "RefineTemplateVariableError",
    "ReservedVariableError",
    "InvalidOutputError",
    # Prompts
    "format_prompt",
    "check_refine_templates",
    "check_reserved_values",
    "RESERVED_VARIABLES",
    # Splitting
    "split_document",
    "Chunk",
    # Tracing
    "EventSink",
    "TraceRecorder",
    "CallCounter",
    # Generation
    "generate",
    "run_chain",
    "Generation",
    "refine",
    "RefineOutput",
    # Output validation
    "extract_json",
    "Checked",
    "validate_extraction",
    "validate_analysis",
    "validate_classification",
    "validate_generic",
]
