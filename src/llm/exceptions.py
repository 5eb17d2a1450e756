"""Error taxonomy for the LLM layer.

Every error the orchestration layer raises on purpose derives from
LLMServiceError. Provider failures that are neither 400 nor 401 are NOT
wrapped: they propagate as whatever the OpenAI client raised, and the API
layer treats them as internal failures.

  ModelUnavailableError      unsupported model name             → 400
  CredentialMissingError     model needs an API key, none given → 400
  CredentialInvalidError     provider answered 401              → 400
  RequestRejectedError       provider answered 400              → 422
  TemplateFormatError        values don't match a template      → 500 (bug)
  RefineTemplateVariableError refine template lacks a variable  → 500 (bug)
  ReservedVariableError      caller used context/existing_answer → 400
  InvalidOutputError         model output failed its contract   → 422
"""

from typing import Iterable, Optional


class LLMServiceError(Exception):
    """Base class for errors raised by the orchestration layer."""


class ModelUnavailableError(LLMServiceError):
    def __init__(self, model: str = ""):
        super().__init__(f"Model {model} is not available.")
        self.model = model


class CredentialMissingError(LLMServiceError):
    def __init__(self, model: str = ""):
        super().__init__(f"API key for model {model} is missing.")
        self.model = model


class CredentialInvalidError(LLMServiceError):
    def __init__(self, model: str = ""):
        super().__init__(f"API key for model {model} is invalid.")
        self.model = model


class RequestRejectedError(LLMServiceError):
    def __init__(self, model: str = ""):
        super().__init__(
            f"Bad Request for model {model}, the input may be too long "
            f"for the context window of the model."
        )
        self.model = model


class TemplateFormatError(LLMServiceError):
    """Raised when a prompt template can't be formatted with the given values."""

    def __init__(
        self,
        missing: Iterable[str] = (),
        unexpected: Iterable[str] = (),
        message: Optional[str] = None,
    ):
        self.missing = sorted(missing)
        self.unexpected = sorted(unexpected)
        if message is None:
            message = "Prompt template could not be formatted with provided chain values."
            details = []
            if self.missing:
                details.append(f"missing: {', '.join(self.missing)}")
            if self.unexpected:
                details.append(f"unexpected: {', '.join(self.unexpected)}")
            if details:
                message += f" ({'; '.join(details)})"
        super().__init__(message)


class RefineTemplateVariableError(TemplateFormatError):
    """A refine template does not declare a variable the refine protocol fills."""

    def __init__(self, template_name: str, variable: str):
        super().__init__(
            message=f"{template_name} is missing mandatory input variable: {variable}"
        )
        self.template_name = template_name
        self.variable = variable


class ReservedVariableError(LLMServiceError):
    def __init__(self, key: str):
        super().__init__(
            f"Reserved chain value {key} cannot be used as an input variable."
        )
        self.key = key


class InvalidOutputError(LLMServiceError):
    """The model's text output does not satisfy the expected structure."""

    def __init__(self, reason: str = "", raw_output: Optional[str] = None):
        message = "The output is not valid JSON"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.reason = reason
        self.raw_output = raw_output
