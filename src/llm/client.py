"""LLM client resolution.

Maps a requested model name + caller-supplied API key to a configured
ChatOpenAI instance:

  resolve_model(ModelRequest(name="gpt-4", api_key="sk-..."))  → ChatOpenAI

Supported models all live on OpenAI and all need a key. The key is NOT
checked here: a bad key only shows up when the provider answers 401, and
the generator translates that into CredentialInvalidError.

Building the client makes no network call. Transient failures (429, 5xx,
connection resets) are retried by the OpenAI client itself with backoff,
up to LLM_MAX_RETRIES times; 400 and 401 are never retried by it.
"""

from langchain_openai import ChatOpenAI

from src.config import LLM_MAX_RETRIES, LLM_TEMPERATURE, LLM_TIMEOUT
from src.llm.exceptions import CredentialMissingError, ModelUnavailableError
from src.schemas.api import ModelRequest
from src.utils.logging import log, get_logger

MODULE = "llm.client"
logger = get_logger()

# name → needs an API key
SUPPORTED_MODELS: dict[str, bool] = {
    "gpt-3.5-turbo": True,
    "gpt-3.5-turbo-16k": True,
    "gpt-4": True,
}


def resolve_model(model: ModelRequest) -> ChatOpenAI:
    """Get a chat client for the requested model.

    Raises:
        ModelUnavailableError: model.name is not a supported identifier
        CredentialMissingError: the model needs an API key and none was given
    """
    if model.name not in SUPPORTED_MODELS:
        log.warning(logger, MODULE, "model_unavailable", "Requested model is not supported",
                    model=model.name)
        raise ModelUnavailableError(model.name)

    if SUPPORTED_MODELS[model.name] and not model.api_key:
        log.warning(logger, MODULE, "api_key_missing", "Model needs an API key, none given",
                    model=model.name)
        raise CredentialMissingError(model.name)

    client = ChatOpenAI(
        model=model.name,
        api_key=model.api_key,
        temperature=LLM_TEMPERATURE,
        max_retries=LLM_MAX_RETRIES,
        timeout=LLM_TIMEOUT,
    )
    log.debug(logger, MODULE, "model_resolved", "LLM client created",
              model=model.name, temperature=LLM_TEMPERATURE, max_retries=LLM_MAX_RETRIES)
    return client
