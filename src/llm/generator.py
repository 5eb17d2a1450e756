"""Single-shot generation: one prompt, one model call.

  generate(model, template, values, debug=...)
    1. FORMAT   — render the prompt; bad values fail here, before any network
    2. RESOLVE  — pick the ChatOpenAI client for model.name
    3. INVOKE   — one ainvoke, traced when debug=True
    4. TRANSLATE— provider 401 → CredentialInvalidError
                  provider 400 → RequestRejectedError
                  anything else propagates unchanged

run_chain() is the shared step used by both generate() and the refine
pipeline, so both translate provider errors in exactly one place.
"""

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence
from uuid import uuid4

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.prompts import PromptTemplate

from src.llm.client import resolve_model
from src.llm.exceptions import (
    CredentialInvalidError,
    RequestRejectedError,
)
from src.llm.prompts import format_prompt
from src.llm.tracing import EventSink, LangChainCallbackBridge, TraceRecorder, emit
from src.schemas.api import ModelRequest
from src.schemas.debug import DebugReport
from src.utils.logging import log, get_logger

MODULE = "llm.generator"
logger = get_logger()

CHAIN_NAME = "LLMChain"


@dataclass
class Generation:
    """Raw model text, plus the debug report when one was requested."""

    text: str
    debug_report: Optional[DebugReport] = None


def provider_status(error: BaseException) -> Optional[int]:
    """HTTP status carried by a provider exception, if any.

    The OpenAI client puts it on `status_code`; other HTTP-backed clients
    expose it on `response.status_code`.
    """
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(getattr(error, "response", None), "status_code", None)
    return status if isinstance(status, int) else None


def translate_provider_error(error: Exception, model_name: str) -> Exception:
    status = provider_status(error)
    if status == 401:
        return CredentialInvalidError(model_name)
    if status == 400:
        return RequestRejectedError(model_name)
    return error


def _message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content.strip()
    # Content blocks: keep the text parts
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts).strip()


async def run_chain(
    llm: BaseChatModel,
    prompt: str,
    inputs: Mapping[str, Any],
    *,
    model_name: str,
    sinks: Sequence[EventSink] = (),
    parent_run_id: Optional[str] = None,
    chain_name: str = CHAIN_NAME,
) -> str:
    """Send one already-formatted prompt to `llm` and return its text.

    Emits chain start/end/error to `sinks`; model call events reach them via
    LangChain callbacks. With no sinks, no callbacks are attached at all.

    Raises:
        CredentialInvalidError: provider answered 401
        RequestRejectedError: provider answered 400
        Exception: any other provider error, unchanged
    """
    run_id = str(uuid4())
    emit(sinks, "on_chain_start", run_id, parent_run_id, chain_name, dict(inputs))

    config = {"callbacks": [LangChainCallbackBridge(sinks, run_id)]} if sinks else None
    _t0 = time.monotonic()
    try:
        response = await llm.ainvoke([HumanMessage(content=prompt)], config=config)
    except Exception as e:
        emit(sinks, "on_chain_error", run_id, e)
        translated = translate_provider_error(e, model_name)
        if translated is e:
            raise
        raise translated from e

    text = _message_text(response)
    emit(sinks, "on_chain_end", run_id, {"text": text})
    log.debug(logger, MODULE, "invoke_done", "Provider call complete",
              model=model_name, latency_ms=int((time.monotonic() - _t0) * 1000),
              raw_length=len(text))
    return text


async def generate(
    model: ModelRequest,
    template: PromptTemplate,
    values: Mapping[str, Any],
    *,
    debug: bool = False,
) -> Generation:
    """Format `template` with `values`, call the model once, return its text.

    Args:
        model: model name + API key
        template: prompt template; `values` must match its variables exactly
        values: template values
        debug: attach a TraceRecorder and return its report

    Raises:
        TemplateFormatError: values don't match the template (no call made)
        ModelUnavailableError / CredentialMissingError: from resolution (no call made)
        CredentialInvalidError / RequestRejectedError: provider 401 / 400
    """
    prompt = format_prompt(template, values)
    llm = resolve_model(model)

    recorder = TraceRecorder() if debug else None
    sinks = [recorder] if recorder else []

    log.info(logger, MODULE, "generate_start", "Single-shot generation",
             model=model.name, prompt_length=len(prompt), debug=debug)
    _t0 = time.monotonic()
    text = await run_chain(llm, prompt, values, model_name=model.name, sinks=sinks)

    log.info(logger, MODULE, "generate_done", "Single-shot generation complete",
             model=model.name, latency_ms=int((time.monotonic() - _t0) * 1000),
             raw_length=len(text))
    return Generation(text=text, debug_report=recorder.report if recorder else None)
