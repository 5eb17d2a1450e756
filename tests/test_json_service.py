"""Tests for the organized-data services, end to end down to a fake chat model."""

import json
import logging

import pytest

from src.llm.exceptions import (
    CredentialInvalidError,
    CredentialMissingError,
    InvalidOutputError,
)
from src.schemas.api import ModelRequest, RefineParams
from src.services import json_service

from conftest import ProviderError

SCHEMA = '{"title": "string", "description": "string"}'


@pytest.mark.asyncio
async def test_extract_with_schema(model, scripted_llm):
    scripted_llm('{"title": "A text", "description": "This is a text"}')

    result = await json_service.extract_with_schema("This is a text", model, SCHEMA)

    assert result.json == {"title": "A text", "description": "This is a text"}
    assert isinstance(result.json["title"], str)
    assert isinstance(result.json["description"], str)
    assert result.debug_report is None
    assert result.refine_recap is None


@pytest.mark.asyncio
async def test_extract_with_schema_missing_credential():
    with pytest.raises(CredentialMissingError):
        await json_service.extract_with_schema("This is a text", ModelRequest(name="gpt-3.5-turbo"), SCHEMA)


@pytest.mark.asyncio
async def test_extract_with_schema_invalid_credential(failing_llm):
    failing_llm(401)
    with pytest.raises(CredentialInvalidError):
        await json_service.extract_with_schema(
            "This is a text", ModelRequest(name="gpt-3.5-turbo", api_key="invalid"), SCHEMA,
        )


@pytest.mark.asyncio
async def test_extract_with_schema_truncated_output(model, scripted_llm):
    scripted_llm('{"title": "x"')
    with pytest.raises(InvalidOutputError) as exc:
        await json_service.extract_with_schema("This is a text", model, SCHEMA)
    assert exc.value.raw_output == '{"title": "x"'


@pytest.mark.asyncio
async def test_extract_with_schema_debug(model, scripted_llm):
    scripted_llm('{"title": "A", "description": "B"}')
    result = await json_service.extract_with_schema("This is a text", model, SCHEMA, debug=True)
    assert result.debug_report.llm_call_count == 1


@pytest.mark.asyncio
async def test_extract_with_refine(model, scripted_llm):
    text = "\n\n".join(f"Paragraph {i} " + "word " * 40 for i in range(4))
    llm = scripted_llm(*[f'{{"title": "t{i}", "description": "d"}}' for i in range(20)])

    result = await json_service.extract_with_schema_and_refine(
        text, model, SCHEMA, RefineParams(chunk_size=300, overlap=20),
    )

    recap = result.refine_recap
    assert recap.chunk_size == 300
    assert recap.overlap == 20
    assert recap.llm_call_count == len(llm.prompts) > 1
    assert result.json == {"title": f"t{len(llm.prompts) - 1}", "description": "d"}


@pytest.mark.asyncio
async def test_extract_with_refine_default_params(model, scripted_llm):
    scripted_llm('{"title": "A", "description": "B"}')

    result = await json_service.extract_with_schema_and_refine("This is a text", model, SCHEMA)

    assert result.refine_recap.chunk_size == 2000
    assert result.refine_recap.overlap == 100
    assert result.refine_recap.llm_call_count == 1


@pytest.mark.asyncio
async def test_extract_with_example(model, scripted_llm):
    llm = scripted_llm('{"name": "Ada", "age": 36}')

    result = await json_service.extract_with_example(
        "Ada is 36 years old.", model, "Bob is 20.", '{"name": "Bob", "age": 20}',
    )

    assert result.json == {"name": "Ada", "age": 36}
    assert '{"name": "Bob", "age": 20}' in llm.prompts[0]


@pytest.mark.asyncio
async def test_analyze_json_output(model, scripted_llm):
    llm = scripted_llm(json.dumps({
        "corrections": [{"field": "age", "issue": "wrong value", "description": "36, not 63",
                         "suggestion": "36"}],
        "textAnalysis": "Digits were swapped.",
    }))

    result = await json_service.analyze_json_output(
        model, '{"age": 63}', "Ada is 36 years old.", '{"age": "number"}',
    )

    assert result.analysis.corrections[0].field == "age"
    assert result.analysis.text_analysis == "Digits were swapped."
    # The expected answer shape is part of the prompt
    assert '"textAnalysis"' in llm.prompts[0]


@pytest.mark.asyncio
async def test_classify_text(model, scripted_llm):
    llm = scripted_llm('{"classification": "invoice", "confidence": 87}')

    result = await json_service.classify_text(model, "Total due: 42 EUR", ["invoice", "receipt"])

    assert result.classification.classification == "invoice"
    assert result.classification.confidence == 87
    assert "- invoice\n- receipt" in llm.prompts[0]


@pytest.mark.asyncio
async def test_classify_text_invalid_output(model, scripted_llm):
    scripted_llm('{"classification": "invoice"}')
    with pytest.raises(InvalidOutputError):
        await json_service.classify_text(model, "Total due: 42 EUR", ["invoice"])


@pytest.mark.asyncio
async def test_generic_prompt(model, scripted_llm):
    llm = scripted_llm("Bonjour")
    result = await json_service.handle_generic_prompt(model, "Say hello in French")
    assert result.output == "Bonjour"
    assert llm.prompts == ["Say hello in French"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status, error", [(401, CredentialInvalidError), (503, ProviderError)])
async def test_provider_failure_logged_once(model, failing_llm, caplog, status, error):
    failing_llm(status)

    with caplog.at_level(logging.DEBUG, logger="organize-simple"):
        with pytest.raises(error):
            await json_service.extract_with_schema_and_refine("c1", model, SCHEMA)

    failures = [r for r in caplog.records if r.levelno >= logging.WARNING and hasattr(r, "_action")]
    assert [r._action for r in failures] == ["extract_refine_failed"]
