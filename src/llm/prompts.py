"""Prompt formatting and refine-protocol checks.

Templates are LangChain PromptTemplates; their `input_variables` is the
declared set of names a caller must supply. Formatting is strict: the
supplied keys must be EXACTLY that set. A missing key and an extra key are
both TemplateFormatError, and both are caught here, before any model is
resolved or called, so a malformed request never costs a provider call.

The refine protocol owns two variable names:

  context          → the current chunk (both templates)
  existing_answer  → the running answer (refine template only)

Callers may not supply them; templates must declare them.
"""

from typing import Any, Mapping

from langchain_core.prompts import PromptTemplate

from src.llm.exceptions import (
    RefineTemplateVariableError,
    ReservedVariableError,
    TemplateFormatError,
)
from src.utils.logging import log, get_logger

MODULE = "llm.prompts"
logger = get_logger()

CONTEXT_VARIABLE = "context"
EXISTING_ANSWER_VARIABLE = "existing_answer"
RESERVED_VARIABLES = (CONTEXT_VARIABLE, EXISTING_ANSWER_VARIABLE)


def format_prompt(template: PromptTemplate, values: Mapping[str, Any]) -> str:
    """Render `template` with `values`, failing unless the keys match exactly.

    None values count as missing.

    Raises:
        TemplateFormatError: keys missing from or not declared by the template
    """
    expected = set(template.input_variables)
    supplied = {key for key, value in values.items() if value is not None}
    missing = expected - supplied
    unexpected = set(values) - expected

    if missing or unexpected:
        log.error(logger, MODULE, "format_failed",
                  "Prompt template doesn't match input variables",
                  missing=sorted(missing) or None, unexpected=sorted(unexpected) or None)
        raise TemplateFormatError(missing=missing, unexpected=unexpected)

    try:
        return template.format(**values)
    except (KeyError, IndexError, ValueError) as e:
        log.error(logger, MODULE, "format_failed", "Prompt template could not be rendered",
                  error=str(e), error_type=type(e).__name__)
        raise TemplateFormatError(message=f"Prompt template could not be rendered: {e}") from e


def check_reserved_values(values: Mapping[str, Any]) -> None:
    """Reject caller values that reuse a name the refine protocol fills in."""
    for key in RESERVED_VARIABLES:
        if key in values:
            log.warning(logger, MODULE, "reserved_variable",
                        "Reserved chain value can't be supplied by the caller", key=key)
            raise ReservedVariableError(key)


def _require_variable(template_name: str, template: PromptTemplate, variable: str) -> None:
    if variable not in template.input_variables:
        log.error(logger, MODULE, "refine_variable_missing",
                  f"Input variable {variable} is missing from {template_name}",
                  template=template_name, variable=variable)
        raise RefineTemplateVariableError(template_name, variable)


def check_refine_templates(initial: PromptTemplate, refine: PromptTemplate) -> None:
    """Both templates take `context`; the refine template also takes `existing_answer`."""
    _require_variable("initialPromptTemplate", initial, CONTEXT_VARIABLE)
    _require_variable("refinePromptTemplate", refine, CONTEXT_VARIABLE)
    _require_variable("refinePromptTemplate", refine, EXISTING_ANSWER_VARIABLE)
