# ============================================================================
# FILE: tests/unit/test_ai_validator.py
# ============================================================================
"""
Unit tests for language-model form validation
"""

import pytest

from conftest import FakeLLMClient
from nanopore_ingestion.validators.ai_validator import REVIEW_SUGGESTION, LanguageModelValidator
from nanopore_ingestion.validators.rules import ValidationRule


RULES = [ValidationRule("submitter_email", required=True, type="email")]


@pytest.mark.asyncio
async def test_json_reply():
    client = FakeLLMClient(
        '{"isValid": false, "errors": ["Email looks wrong"], '
        '"suggestions": ["Check the email"], "confidence": 0.85}'
    )
    result = await LanguageModelValidator(client).validate({"submitter_email": "x"}, RULES)

    assert result.is_valid is False
    assert result.error_messages == ["Email looks wrong"]
    assert result.suggestions == ["Check the email"]
    assert result.score == pytest.approx(0.85)


@pytest.mark.asyncio
async def test_prompt_contains_fields_and_rules():
    client = FakeLLMClient('{"isValid": true, "errors": [], "suggestions": [], "confidence": 0.9}')
    await LanguageModelValidator(client).validate({"submitter_email": "a@b.com"}, RULES)

    prompt = client.prompts[0]
    assert "a@b.com" in prompt
    assert '"field_name": "submitter_email"' in prompt
    assert client.calls[0]["max_tokens"] == 500


@pytest.mark.asyncio
async def test_fallback_invalid():
    client = FakeLLMClient("The form is invalid. Suggestion: fix the email.")
    result = await LanguageModelValidator(client).validate({}, RULES)

    assert result.is_valid is False
    assert result.score == pytest.approx(0.3)
    assert result.suggestions == [REVIEW_SUGGESTION]


@pytest.mark.asyncio
async def test_fallback_valid():
    client = FakeLLMClient("Everything looks fine.")
    result = await LanguageModelValidator(client).validate({}, RULES)

    assert result.is_valid is True
    assert result.score == pytest.approx(0.7)
    assert result.suggestions == []


@pytest.mark.asyncio
async def test_confidence_is_clamped():
    client = FakeLLMClient('{"isValid": true, "confidence": 7}')
    result = await LanguageModelValidator(client).validate({}, RULES)
    assert result.score == 1.0
