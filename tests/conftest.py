"""Shared fixtures: request models and fake chat models standing in for the provider."""

from typing import Any, Optional

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from src.schemas.api import ModelRequest


class ProviderError(Exception):
    """What an HTTP-backed provider client raises: carries the status code."""

    def __init__(self, status_code: int):
        super().__init__(f"provider answered {status_code}")
        self.status_code = status_code


class ScriptedChatModel(BaseChatModel):
    """Answers with `responses` in order and records every prompt it was sent."""

    responses: list[str]
    prompts: list[str] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(self, messages: list[BaseMessage], stop: Optional[list[str]] = None,
                  run_manager: Any = None, **kwargs: Any) -> ChatResult:
        self.prompts.append(messages[-1].content)
        text = self.responses[len(self.prompts) - 1]
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=text))])


class FailingChatModel(BaseChatModel):
    """Fails every call; with a status code the error looks like an HTTP error."""

    status_code: Optional[int] = None
    calls: int = 0

    @property
    def _llm_type(self) -> str:
        return "failing"

    def _generate(self, messages: list[BaseMessage], stop: Optional[list[str]] = None,
                  run_manager: Any = None, **kwargs: Any) -> ChatResult:
        self.calls += 1
        if self.status_code is None:
            raise ConnectionError("connection reset by peer")
        raise ProviderError(self.status_code)


@pytest.fixture
def model() -> ModelRequest:
    return ModelRequest(name="gpt-3.5-turbo", api_key="sk-test")


@pytest.fixture
def install_llm(monkeypatch):
    """Make model resolution hand back `llm` instead of a ChatOpenAI client."""

    def install(llm: BaseChatModel) -> BaseChatModel:
        monkeypatch.setattr("src.llm.generator.resolve_model", lambda model: llm)
        monkeypatch.setattr("src.llm.refinement.resolve_model", lambda model: llm)
        return llm

    return install


@pytest.fixture
def scripted_llm(install_llm):
    def make(*responses: str) -> ScriptedChatModel:
        return install_llm(ScriptedChatModel(responses=list(responses)))

    return make


@pytest.fixture
def failing_llm(install_llm):
    def make(status_code: Optional[int] = None) -> FailingChatModel:
        return install_llm(FailingChatModel(status_code=status_code))

    return make
