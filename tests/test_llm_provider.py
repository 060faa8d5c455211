"""Tests for LLM response parsing and provider selection."""

import json
from unittest.mock import MagicMock

import pytest

from aicn.errors import ConfigurationError, LLMResponseError
from aicn.generation import ArticleAnalysis, MockLLMProvider, OpenAIProvider, get_llm_provider
from aicn.generation.llm_provider import is_negative_answer, parse_json_response
from aicn.models import DifficultyLevel


def analysis_json(**overrides) -> str:
    payload = {
        "relevance_score": 7,
        "is_relevant": True,
        "category": "credit-scoring",
        "tags": ["ai", "credit"],
        "summary": "A summary.",
        "difficulty_level": "advanced",
    }
    payload.update(overrides)
    return json.dumps(payload)


class TestParseJsonResponse:
    """Test validation of JSON completions."""

    def test_valid(self) -> None:
        """Test a well-formed analysis parses."""
        analysis = parse_json_response(analysis_json(), ArticleAnalysis)

        assert analysis.relevance_score == 7.0
        assert analysis.difficulty_level == DifficultyLevel.ADVANCED

    def test_not_json(self) -> None:
        """Test prose instead of JSON raises LLMResponseError."""
        with pytest.raises(LLMResponseError):
            parse_json_response("Sure! Here is the analysis.", ArticleAnalysis)

    def test_missing_field(self) -> None:
        """Test a response without a required field raises LLMResponseError."""
        with pytest.raises(LLMResponseError):
            parse_json_response(json.dumps({"relevance_score": 5}), ArticleAnalysis)

    def test_score_clamped(self) -> None:
        """Test out-of-range scores are clamped to 0-10."""
        assert parse_json_response(analysis_json(relevance_score=14), ArticleAnalysis).relevance_score == 10.0
        assert parse_json_response(analysis_json(relevance_score=-2), ArticleAnalysis).relevance_score == 0.0

    def test_tags_trimmed(self) -> None:
        """Test at most five tags are kept."""
        analysis = parse_json_response(analysis_json(tags=list("abcdefg")), ArticleAnalysis)

        assert analysis.tags == ["a", "b", "c", "d", "e"]

    def test_unknown_difficulty(self) -> None:
        """Test an unknown difficulty falls back to intermediate."""
        analysis = parse_json_response(analysis_json(difficulty_level="expert"), ArticleAnalysis)

        assert analysis.difficulty_level == DifficultyLevel.INTERMEDIATE


class TestIsNegativeAnswer:
    """Test pre-filter answer interpretation."""

    @pytest.mark.parametrize("answer", ["NO", "no", "No.", "  NO, not relevant"])
    def test_negative(self, answer: str) -> None:
        """Test explicit NO answers."""
        assert is_negative_answer(answer)

    @pytest.mark.parametrize("answer", ["YES", "Maybe", "", "Not sure", "NOTABLE"])
    def test_anything_else_passes(self, answer: str) -> None:
        """Test anything but an explicit NO lets the article through."""
        assert not is_negative_answer(answer)


class TestOpenAIProvider:
    """Test the OpenAI provider against a mocked client."""

    def _client(self, content: str) -> MagicMock:
        client = MagicMock()
        response = MagicMock()
        response.choices[0].message.content = content
        response.usage.total_tokens = 30
        response.usage.prompt_tokens = 20
        response.usage.completion_tokens = 10
        client.chat.completions.create.return_value = response
        return client

    def test_prefilter_no(self) -> None:
        """Test a NO completion rejects."""
        provider = OpenAIProvider(api_key="test", client=self._client("NO"))

        assert provider.prefilter("Celebrity gossip", "Example") is False
        assert provider.get_usage_stats()["total_tokens"] == 30

    def test_analyze_uses_json_mode(self, categories) -> None:
        """Test analysis requests a JSON object and validates it."""
        client = self._client(analysis_json())
        provider = OpenAIProvider(api_key="test", client=client)

        analysis = provider.analyze_article("Title", "Source", "Body", categories)

        assert analysis.category == "credit-scoring"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_empty_completion(self, categories) -> None:
        """Test an empty completion is a response error."""
        provider = OpenAIProvider(api_key="test", client=self._client(""))

        with pytest.raises(LLMResponseError):
            provider.analyze_article("Title", "Source", "Body", categories)


class TestGetLLMProvider:
    """Test provider selection from configuration."""

    def test_missing_key(self) -> None:
        """Test a missing API key is a configuration error."""
        with pytest.raises(ConfigurationError):
            get_llm_provider({"provider": "openai", "api_key": None, "api_key_env": "OPENAI_API_KEY"})

    def test_mock(self) -> None:
        """Test the mock provider needs no key."""
        assert isinstance(get_llm_provider({"provider": "mock"}), MockLLMProvider)

    def test_openai(self) -> None:
        """Test a configured key builds the OpenAI provider."""
        provider = get_llm_provider({"provider": "openai", "api_key": "sk-test", "model": "gpt-4o"})

        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4o"

    def test_unknown(self) -> None:
        """Test an unknown provider is rejected."""
        with pytest.raises(ConfigurationError):
            get_llm_provider({"provider": "carrier-pigeon", "api_key": "x"})
