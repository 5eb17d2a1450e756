"""Pydantic schemas for LLM outputs.

These schemas define the EXACT structure expected back from each prompt.
Raw model text is parsed and validated against them before anything is
returned to a caller. Validation is all-or-nothing: a result with one bad
field is rejected as a whole.

Strings are StrictStr: a model answering {"field": 3} instead
of {"field": "3"} did not follow the output format.
"""

from typing import Any

from pydantic import Field, StrictStr

from src.schemas.base import CamelModel


# =============================================================================
# ANALYSIS OUTPUT
# =============================================================================

class Correction(CamelModel):
    """One field of a generated JSON that the analysis wants corrected."""
    field: StrictStr = Field(..., description="Field in the generated JSON that needs to be corrected")
    issue: StrictStr = Field(..., description="Issue found in the field")
    description: StrictStr = Field(..., description="Why it is an issue")
    suggestion: StrictStr = Field(..., description="Suggested correction")


class Analysis(CamelModel):
    """Review of a generated JSON against its source text and schema."""
    corrections: list[Correction]
    text_analysis: StrictStr = Field(..., description="Full textual analysis, markdown")


# Shown to the model so it knows the shape to produce
ANALYSIS_OUTPUT_FORMAT: dict[str, Any] = {
    "corrections": [
        {
            "field": "the field in the generated JSON that needs to be corrected",
            "issue": "the issue you identified",
            "description": "your description of the issue, give your full reasoning for why it is an issue",
            "suggestion": "your suggestion for correction",
        }
    ],
    "textAnalysis": (
        "Your detailed and precise analysis, exposing your whole thought process, "
        "step by step. Do not provide a corrected JSON output in this field. "
        "Generate a readable text in markdown."
    ),
}


# =============================================================================
# CLASSIFICATION OUTPUT
# =============================================================================

class Classification(CamelModel):
    """Category picked for a text, with a confidence percentage."""
    classification: StrictStr = Field(..., min_length=1)
    confidence: float = Field(..., ge=0, le=100, description="Confidence in percent")


CLASSIFICATION_OUTPUT_FORMAT: dict[str, str] = {
    "classification": "classification of the text",
    "confidence": (
        "number representing your confidence of the classification in percentage. "
        "display only the number, not the percentage sign"
    ),
}


# =============================================================================
# GENERIC OUTPUT
# =============================================================================

class GenericOutput(CamelModel):
    """Free-form completion; nothing to validate beyond being text."""
    output: str
