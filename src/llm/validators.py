"""Structured-output validators.

Each validator takes the raw model text for one use case and returns a
Checked outcome instead of raising:

  validate_extraction(raw)      → Checked[dict]            (any JSON object)
  validate_analysis(raw)        → Checked[Analysis]
  validate_classification(raw)  → Checked[Classification]
  validate_generic(raw)         → Checked[GenericOutput]   (always ok)

A bad output is an expected event, not a crash, so callers have to look
at the outcome. `Checked.unwrap()` turns a failure into InvalidOutputError
at the point where the caller decides it is terminal.

Validation is all-or-nothing: a result with one malformed field fails.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.llm.exceptions import InvalidOutputError
from src.llm.parser import extract_json
from src.schemas.llm_outputs import Analysis, Classification, GenericOutput
from src.utils.logging import log, get_logger

MODULE = "llm.validators"
logger = get_logger()

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Checked(Generic[T]):
    """Outcome of validating one model output: a value or a reason."""

    value: Optional[T] = None
    error: Optional[str] = None
    raw_output: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise InvalidOutputError(self.error, raw_output=self.raw_output)
        return self.value


def _failure(kind: str, raw: str, reason: str) -> Checked:
    log.warning(logger, MODULE, f"{kind}_invalid_output", f"Model output is not a valid {kind}",
                reason=reason[:300], raw_length=len(raw))
    return Checked(error=reason, raw_output=raw)


def _parse(kind: str, raw: str) -> Checked[Any]:
    try:
        return Checked(value=extract_json(raw), raw_output=raw)
    except InvalidOutputError as e:
        return _failure(kind, raw, e.reason or str(e))


def _validate_model(kind: str, raw: str, schema: Type[M]) -> Checked[M]:
    parsed = _parse(kind, raw)
    if not parsed.ok:
        return parsed
    try:
        return Checked(value=schema.model_validate(parsed.value), raw_output=raw)
    except ValidationError as e:
        return _failure(kind, raw, f"{schema.__name__}: {e.error_count()} invalid field(s)")


def validate_extraction(raw: str) -> Checked[dict[str, Any]]:
    """Schema / example extraction must produce a JSON object."""
    parsed = _parse("extraction", raw)
    if not parsed.ok:
        return parsed
    if not isinstance(parsed.value, dict):
        return _failure("extraction", raw, f"expected a JSON object, got {type(parsed.value).__name__}")
    return parsed


def validate_analysis(raw: str) -> Checked[Analysis]:
    return _validate_model("analysis", raw, Analysis)


def validate_classification(raw: str) -> Checked[Classification]:
    return _validate_model("classification", raw, Classification)


def validate_generic(raw: str) -> Checked[GenericOutput]:
    return Checked(value=GenericOutput(output=raw), raw_output=raw)
