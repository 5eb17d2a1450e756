"""Refine pipeline: fold a model over document chunks, in order.

  chunks:   c₁        c₂             c₃
            │         │              │
  step:   initial → refine(a₁) →  refine(a₂) → a₃ (final answer)

  step 1  initial template with {context: c₁, **extra}
  step i  refine template  with {context: cᵢ, existing_answer: aᵢ₋₁, **extra}

Each step needs the previous answer, so steps run strictly one after the
other. The model may hand back the existing answer unchanged when a chunk
adds nothing; that is a normal outcome.

Everything that can be checked without the network is checked before the
first call: reserved names in caller values, the variables both templates
declare, a dry format of both templates, and model resolution.

llm_call_count is the number of steps the loop completed (one per chunk).
The CallCounter sink separately tallies the model requests LangChain
reported; it only feeds the refine_done log line.

Any step failure aborts the run and the error reaches the caller as-is.
There is no partial answer and no retry here (the OpenAI client retries
transient failures itself).
"""

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union
from uuid import uuid4

from langchain_core.prompts import PromptTemplate

from src.llm.client import resolve_model
from src.llm.generator import run_chain
from src.llm.prompts import (
    CONTEXT_VARIABLE,
    EXISTING_ANSWER_VARIABLE,
    check_refine_templates,
    check_reserved_values,
    format_prompt,
)
from src.llm.splitter import Chunk
from src.llm.tracing import CallCounter, TraceRecorder, emit
from src.schemas.api import ModelRequest
from src.schemas.debug import DebugReport
from src.utils.logging import log, get_logger

MODULE = "llm.refinement"
logger = get_logger()

REFINE_CHAIN_NAME = "RefineDocumentsChain"


@dataclass
class RefineOutput:
    """Final answer, how many model calls produced it, and the optional trace."""

    text: str
    llm_call_count: int
    debug_report: Optional[DebugReport] = None


async def refine(
    model: ModelRequest,
    initial_template: PromptTemplate,
    refine_template: PromptTemplate,
    chunks: Sequence[Union[Chunk, str]],
    extra_values: Mapping[str, Any],
    *,
    debug: bool = False,
) -> RefineOutput:
    """Run the refine fold over `chunks`.

    No chunks means no calls: the answer is "" and llm_call_count is 0.

    Raises:
        ReservedVariableError: extra_values contains context or existing_answer
        RefineTemplateVariableError: a template lacks context / existing_answer
        TemplateFormatError: extra_values don't match the templates
        ModelUnavailableError / CredentialMissingError: from resolution
        CredentialInvalidError / RequestRejectedError / provider errors: from a step
    """
    check_reserved_values(extra_values)
    check_refine_templates(initial_template, refine_template)
    format_prompt(initial_template, {CONTEXT_VARIABLE: "", **extra_values})
    format_prompt(refine_template, {CONTEXT_VARIABLE: "", EXISTING_ANSWER_VARIABLE: "", **extra_values})
    llm = resolve_model(model)

    texts = [chunk.text if isinstance(chunk, Chunk) else chunk for chunk in chunks]

    counter = CallCounter()
    recorder = TraceRecorder() if debug else None
    sinks = [counter, recorder] if recorder else [counter]

    run_id = str(uuid4())
    emit(sinks, "on_chain_start", run_id, None, REFINE_CHAIN_NAME,
         {"input_documents": texts, **extra_values})
    log.info(logger, MODULE, "refine_start", "Refine run started",
             model=model.name, chunk_count=len(texts), debug=debug)
    _t0 = time.monotonic()

    answer = ""
    step = 0
    completed = 0
    try:
        for step, chunk_text in enumerate(texts, start=1):
            if step == 1:
                template = initial_template
                values = {CONTEXT_VARIABLE: chunk_text, **extra_values}
            else:
                template = refine_template
                values = {CONTEXT_VARIABLE: chunk_text, EXISTING_ANSWER_VARIABLE: answer, **extra_values}

            previous = answer
            answer = await run_chain(
                llm,
                format_prompt(template, values),
                values,
                model_name=model.name,
                sinks=sinks,
                parent_run_id=run_id,
            )
            completed += 1
            log.debug(logger, MODULE, "refine_step_done", f"Refine step {step}/{len(texts)} done",
                      step=step, unchanged=(step > 1 and answer == previous))
    except Exception as e:
        emit(sinks, "on_chain_error", run_id, e)
        log.debug(logger, MODULE, "refine_aborted", f"Refine aborted at step {step}/{len(texts)}",
                  model=model.name, step=step, error_type=type(e).__name__)
        raise

    emit(sinks, "on_chain_end", run_id, {"output_text": answer})
    log.info(logger, MODULE, "refine_done", "Refine run complete",
             model=model.name, chunk_count=len(texts), llm_call_count=completed,
             provider_requests=counter.count,
             latency_ms=int((time.monotonic() - _t0) * 1000))
    return RefineOutput(
        text=answer,
        llm_call_count=completed,
        debug_report=recorder.report if recorder else None,
    )
