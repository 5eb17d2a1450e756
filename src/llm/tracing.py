"""Execution tracing for LLM invocations.

An invocation (one generate() call or one refine() run) reports lifecycle
events to any number of EventSinks:

  on_chain_start / on_chain_end / on_chain_error   — one prompt → answer step
  on_call_start  / on_call_end  / on_call_error    — one request to the model

Each event carries a run_id; nested events also carry the parent run_id,
so a refine run looks like:

  RefineDocumentsChain            (chain, parent=None)
    ├─ LLMChain                   (chain, parent=refine run)
    │    └─ ChatOpenAI            (call,  parent=LLMChain run)
    └─ LLMChain ...

Sinks are plain objects with those six methods; they share nothing.
  TraceRecorder → builds the DebugReport returned when debug=True
  CallCounter   → counts model calls for the refine recap

Chain events are emitted by our own code (generator / refine). Call events
come from LangChain's callback system through LangChainCallbackBridge.

Sinks are created per invocation and never shared between requests.
A misbehaving event (end for an unknown run, a second end for the same
run) is logged and dropped; tracing never fails a request.
"""

from typing import Any, Iterable, Optional, Protocol, Sequence
from uuid import UUID

from langchain_core.callbacks import AsyncCallbackHandler
from langchain_core.messages import BaseMessage, get_buffer_string
from langchain_core.outputs import LLMResult

from src.schemas.debug import (
    CallStart,
    ChainCall,
    ChainStart,
    DebugReport,
    LlmCall,
)
from src.utils.logging import log, get_logger

MODULE = "llm.tracing"
logger = get_logger()


class EventSink(Protocol):
    def on_chain_start(self, run_id: str, parent_run_id: Optional[str], name: str,
                       inputs: dict[str, Any]) -> None: ...

    def on_chain_end(self, run_id: str, outputs: dict[str, Any]) -> None: ...

    def on_chain_error(self, run_id: str, error: BaseException) -> None: ...

    def on_call_start(self, run_id: str, parent_run_id: Optional[str], name: str,
                      prompts: list[str]) -> None: ...

    def on_call_end(self, run_id: str, outputs: dict[str, Any]) -> None: ...

    def on_call_error(self, run_id: str, error: BaseException) -> None: ...


def emit(sinks: Iterable[EventSink], event: str, *args: Any) -> None:
    """Deliver one event to every sink. A failing sink is logged, not raised."""
    for sink in sinks:
        try:
            getattr(sink, event)(*args)
        except Exception as e:
            log.error(logger, MODULE, "sink_failed", f"Event sink raised on {event}",
                      error=str(e), error_type=type(e).__name__,
                      sink=type(sink).__name__)


def _describe_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


class TraceRecorder:
    """Builds a DebugReport from lifecycle events."""

    def __init__(self) -> None:
        self.report = DebugReport()
        self._chains: dict[str, ChainCall] = {}
        self._llms: dict[str, LlmCall] = {}

    # -- chains ---------------------------------------------------------------

    def on_chain_start(self, run_id, parent_run_id, name, inputs) -> None:
        if run_id in self._chains:
            log.warning(logger, MODULE, "trace_duplicate_run", "Chain run started twice",
                        run_id=run_id)
            return
        record = ChainCall(
            chain_name=name,
            run_id=run_id,
            parent_run_id=parent_run_id,
            start=ChainStart(inputs=dict(inputs)),
        )
        self._chains[run_id] = record
        self.report.chains.append(record)
        self.report.chain_call_count += 1

    def on_chain_end(self, run_id, outputs) -> None:
        record = self._open_record(self._chains, run_id, "chain")
        if record is not None:
            record.end.outputs = outputs if outputs is not None else {}

    def on_chain_error(self, run_id, error) -> None:
        record = self._open_record(self._chains, run_id, "chain")
        if record is not None:
            record.error.err = _describe_error(error)

    # -- model calls ------------------------------------------------------------

    def on_call_start(self, run_id, parent_run_id, name, prompts) -> None:
        if run_id in self._llms:
            log.warning(logger, MODULE, "trace_duplicate_run", "Model call started twice",
                        run_id=run_id)
            return
        record = LlmCall(
            llm_name=name,
            run_id=run_id,
            parent_run_id=parent_run_id,
            start=CallStart(prompts=list(prompts)),
        )
        self._llms[run_id] = record
        self.report.llms.append(record)
        self.report.llm_call_count += 1

    def on_call_end(self, run_id, outputs) -> None:
        record = self._open_record(self._llms, run_id, "call")
        if record is not None:
            record.end.outputs = outputs if outputs is not None else {}

    def on_call_error(self, run_id, error) -> None:
        record = self._open_record(self._llms, run_id, "call")
        if record is not None:
            record.error.err = _describe_error(error)

    def _open_record(self, records: dict, run_id: str, kind: str):
        record = records.get(run_id)
        if record is None:
            log.warning(logger, MODULE, "trace_unknown_run",
                        f"Terminal {kind} event for a run that never started",
                        run_id=run_id)
            return None
        if record.is_closed:
            log.warning(logger, MODULE, "trace_already_closed",
                        f"Second terminal {kind} event for the same run",
                        run_id=run_id)
            return None
        return record


class CallCounter:
    """Counts model calls. Ignores everything else."""

    def __init__(self) -> None:
        self.count = 0

    def on_call_start(self, run_id, parent_run_id, name, prompts) -> None:
        self.count += 1

    def on_chain_start(self, run_id, parent_run_id, name, inputs) -> None:
        pass

    def on_chain_end(self, run_id, outputs) -> None:
        pass

    def on_chain_error(self, run_id, error) -> None:
        pass

    def on_call_end(self, run_id, outputs) -> None:
        pass

    def on_call_error(self, run_id, error) -> None:
        pass


def _model_name(serialized: Optional[dict[str, Any]]) -> str:
    if not serialized:
        return "llm"
    ids = serialized.get("id") or []
    return serialized.get("name") or (ids[-1] if ids else "llm")


def _summarize_result(response: LLMResult) -> dict[str, Any]:
    return {
        "generations": [[g.text for g in gens] for gens in response.generations],
        "llm_output": response.llm_output,
    }


class LangChainCallbackBridge(AsyncCallbackHandler):
    """Forwards LangChain model callbacks to EventSinks.

    LangChain reports a top-level model call with parent_run_id=None; the
    bridge fills in the chain run it was created for.
    """

    def __init__(self, sinks: Sequence[EventSink], parent_run_id: Optional[str] = None):
        super().__init__()
        self._sinks = list(sinks)
        self._parent_run_id = parent_run_id

    def _parent(self, parent_run_id: Optional[UUID]) -> Optional[str]:
        return str(parent_run_id) if parent_run_id else self._parent_run_id

    async def on_chat_model_start(
        self,
        serialized: dict[str, Any],
        messages: list[list[BaseMessage]],
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        prompts = [get_buffer_string(batch) for batch in messages]
        emit(self._sinks, "on_call_start", str(run_id), self._parent(parent_run_id),
             _model_name(serialized), prompts)

    async def on_llm_start(
        self,
        serialized: dict[str, Any],
        prompts: list[str],
        *,
        run_id: UUID,
        parent_run_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> None:
        emit(self._sinks, "on_call_start", str(run_id), self._parent(parent_run_id),
             _model_name(serialized), list(prompts))

    async def on_llm_end(self, response: LLMResult, *, run_id: UUID, **kwargs: Any) -> None:
        emit(self._sinks, "on_call_end", str(run_id), _summarize_result(response))

    async def on_llm_error(self, error: BaseException, *, run_id: UUID, **kwargs: Any) -> None:
        emit(self._sinks, "on_call_error", str(run_id), error)
