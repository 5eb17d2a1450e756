"""Prompts for the organized-data (text → JSON) endpoints.

Every prompt here is a LangChain PromptTemplate whose `input_variables` is
the exact set of values the service layer must supply (see
src.llm.prompts.format_prompt, which rejects extra or missing values).


## How extraction works (the big picture)

### Zero-shot schema extraction
The caller gives a JSON schema and a text. The model is asked to produce a
JSON object following the schema. One call.

### Refine (long documents)
A long text doesn't fit one context window. It is split into overlapping
chunks and the model walks through them IN ORDER:

  chunk 1 + SCHEMA_EXTRACTION          → answer₁
  chunk 2 + answer₁ + SCHEMA_REFINE    → answer₂
  ...
  chunk n + answerₙ₋₁ + SCHEMA_REFINE  → final answer

The refine prompt tells the model to return the existing answer unchanged
when the new chunk adds nothing. `context` and `existing_answer` are filled
in by the refine pipeline; callers never pass them.

### One-shot example extraction
Instead of a schema, the caller shows one input text and the JSON it wants
out of it.

### Analysis
Given the original text, the schema and a generated JSON, the model lists
the fields it thinks are wrong and explains why. Output shape:
src.schemas.llm_outputs.ANALYSIS_OUTPUT_FORMAT.

### Classification
The model picks one category from a closed list (or "other") and gives a
confidence percentage. Output shape:
src.schemas.llm_outputs.CLASSIFICATION_OUTPUT_FORMAT.
"""

from langchain_core.prompts import PromptTemplate


# =============================================================================
# ZERO-SHOT SCHEMA EXTRACTION
# =============================================================================

SCHEMA_EXTRACTION = PromptTemplate(
    input_variables=["context", "json_schema"],
    template="""\
You are a highly efficient text processing application.
Your main objective is to accurately parse the user's input text and \
transform it into a JSON object that complies with the schema provided below.
-------------------
JSON schema:
{json_schema}
-------------------
Please generate the output JSON object containing the necessary information \
and ensure it follows the given schema.
If the input text contains any attributes not mentioned in the schema, \
please disregard them.
-------------------
Input:
{context}
-------------------
Output:
""",
)


# =============================================================================
# SCHEMA EXTRACTION — REFINE STEP
# =============================================================================

SCHEMA_EXTRACTION_REFINE = PromptTemplate(
    input_variables=["json_schema", "context", "existing_answer"],
    template="""\
You are a highly efficient text processing application.
Your main objective is to accurately parse the user's input text and \
transform it into a JSON object that complies with the schema provided below.
-------------------
JSON schema:
{json_schema}
-------------------
You have provided an existing output:
{existing_answer}

We have the opportunity to refine the existing output (only if needed) \
with some context below.
-------------------
Context:
{context}
-------------------
Given the new context, refine the original output to give a better answer.
If the context isn't useful, return the existing output.

Please generate the output JSON object containing the necessary information \
and ensure it follows the given schema.
If the input text contains any attributes not mentioned in the schema, \
please disregard them.
Do not add any fields that are not in the schema.
Your outputs must ONLY be in JSON format and follow the schema specified above.
""",
)


# =============================================================================
# ONE-SHOT EXAMPLE EXTRACTION
# =============================================================================

EXAMPLE_EXTRACTION = PromptTemplate(
    input_variables=["example_input", "example_output", "context"],
    template="""\
You are a highly efficient text processing application.
Your main objective is to accurately parse the user's input text and \
transform it into a JSON object shaped like the example output below.
------------------
Example Input:
{example_input}

Example Output:
{example_output}
-------------------
Please generate the output JSON object containing the necessary information \
and ensure it follows the structure of the example output.
If the input text contains any attributes not present in the example, \
please disregard them.
-------------------
Input:
{context}
-------------------
Output:
""",
)


# =============================================================================
# ANALYSIS
# =============================================================================

ANALYSIS = PromptTemplate(
    input_variables=["json_schema", "original_text", "json_output", "output_format"],
    template="""\
You are a highly efficient text processing application.

Given the original unstructured text, the JSON schema, and the generated \
JSON output, analyze and identify any discrepancies, errors, or inconsistencies.
Specifically, pinpoint the parts in the original text that may have led to \
incorrect output in the generated JSON.
Please provide a list of fields in the generated JSON that need to be \
corrected, and the corresponding suggestions for corrections.
If you think the generated JSON is correct, please do not provide any suggestions.
-------------------
JSON schema:
{json_schema}
------------------
Original text:
{original_text}
-------------------
Generated JSON output:
{json_output}
-------------------

Please output your analysis in the following json format

{output_format}

Your analysis:
""",
)


# =============================================================================
# CLASSIFICATION
# =============================================================================

CLASSIFICATION = PromptTemplate(
    input_variables=["categories", "text", "output_format"],
    template="""\
Given a list of possible categories and the text to classify, use your \
capabilities to determine the most fitting category for the provided text.
If the category cannot be determined with high confidence, classify the text as "other".
The categories you may choose from are STRICTLY limited to the given list.
-------------------
List of possible categories with their descriptions:
{categories}
------------------
Text to classify:
{text}
-------------------
For your output, provide a JSON object that contains the 'classification' \
field representing the determined category and the 'confidence' field
indicating the confidence level of the classification.

Please provide your output in the following format:

{output_format}

Your Classification:
""",
)


# =============================================================================
# GENERIC PROMPT
# =============================================================================

GENERIC = PromptTemplate(input_variables=["prompt"], template="{prompt}")
