"""Debug report (execution trace) schemas.

A report has one record per chain run and one per model call. Records are
opened on a Start event and their `end` or `error` part is filled in place
when the matching terminal event arrives.

Wire shape:
    {"chainCallCount": 2, "llmCallCount": 1,
     "chains": [{"chainName": ..., "runId": ..., "parentRunId": ...,
                 "start": {"inputs": {...}}, "end": {"outputs": ...},
                 "error": {"err": null}}],
     "llms":   [{"llmName": ..., "runId": ..., "parentRunId": ...,
                 "start": {"prompts": [...]}, "end": {"outputs": ...},
                 "error": {"err": null}}]}
"""

from typing import Any, Optional

from pydantic import Field

from src.schemas.base import CamelModel


class ChainStart(CamelModel):
    inputs: dict[str, Any] = Field(default_factory=dict)


class CallStart(CamelModel):
    prompts: list[str] = Field(default_factory=list)


class RunEnd(CamelModel):
    outputs: Optional[Any] = None


class RunError(CamelModel):
    err: Optional[str] = None


class _RunRecord(CamelModel):
    run_id: str
    parent_run_id: Optional[str] = None
    end: RunEnd = Field(default_factory=RunEnd)
    error: RunError = Field(default_factory=RunError)

    @property
    def is_closed(self) -> bool:
        return self.end.outputs is not None or self.error.err is not None


class ChainCall(_RunRecord):
    chain_name: str
    start: ChainStart = Field(default_factory=ChainStart)


class LlmCall(_RunRecord):
    llm_name: str
    start: CallStart = Field(default_factory=CallStart)


class DebugReport(CamelModel):
    chain_call_count: int = 0
    llm_call_count: int = 0
    chains: list[ChainCall] = Field(default_factory=list)
    llms: list[LlmCall] = Field(default_factory=list)
