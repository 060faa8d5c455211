"""LLM provider interface and implementations."""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional, Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError, LLMResponseError
from ..models import Category, DifficultyLevel
from .models import ArticleAnalysis, ArticleType, GeneratedArticle, GeneratedEditorial, ResearchFocus
from .prompts import (
    build_analysis_prompt,
    build_editorial_prompt,
    build_prefilter_prompt,
    build_research_prompt,
    build_writing_prompt,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def parse_json_response(text: str, model: Type[T]) -> T:
    """
    Validate a JSON completion against a response model.

    Raises:
        LLMResponseError: if the text is not JSON or does not match the schema
    """
    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        raise LLMResponseError(f"Invalid {model.__name__} response: {e}") from e


def is_negative_answer(answer: str) -> bool:
    """True only for an explicit NO; anything else lets the article through."""
    words = answer.strip().split()
    return bool(words) and words[0].strip(".!,\"'").upper() == "NO"


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def prefilter(self, title: str, source: str) -> bool:
        """
        Cheap relevance check on title and source.

        Returns:
            False only when the model explicitly answers NO
        """
        pass

    @abstractmethod
    def analyze_article(
        self,
        title: str,
        source: str,
        content: str,
        categories: List[Category],
    ) -> ArticleAnalysis:
        """
        Score, categorize, tag and summarize an article.

        Args:
            title: Article title
            source: Source name
            content: Article body or scraped summary
            categories: Live categories the model may choose from

        Returns:
            Validated analysis
        """
        pass

    @abstractmethod
    def research_topic(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
    ) -> str:
        """Produce research notes for a generated article."""
        pass

    @abstractmethod
    def write_article(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
        research_notes: str,
    ) -> GeneratedArticle:
        """Write an article from research notes."""
        pass

    @abstractmethod
    def generate_editorial(
        self,
        articles: List[Dict],
        week_start: date,
        week_end: date,
    ) -> GeneratedEditorial:
        """Write the weekly editorial from the week's approved articles."""
        pass

    @abstractmethod
    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[OpenAI] = None,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL (for testing)
            timeout: Per-request timeout in seconds
            client: Preconfigured client (for testing)
        """
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        self.model = model
        self.total_tokens = 0
        self.prompt_tokens = 0
        self.completion_tokens = 0
        self.api_calls = 0

        # Token cost estimates (per 1K tokens)
        self.cost_per_1k_tokens = {
            "gpt-4o": {"input": 0.005, "output": 0.015},
            "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
            "gpt-4": {"input": 0.03, "output": 0.06},
            "gpt-3.5-turbo": {"input": 0.001, "output": 0.002},
        }

    def _complete(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float = 0.3,
        json_mode: bool = False,
    ) -> str:
        """Run one chat completion and record token usage."""
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        self.api_calls += 1
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

        if response.usage:
            self.total_tokens += response.usage.total_tokens
            self.prompt_tokens += response.usage.prompt_tokens
            self.completion_tokens += response.usage.completion_tokens

        content = response.choices[0].message.content
        if not content:
            raise LLMResponseError("Empty completion")
        return content.strip()

    def prefilter(self, title: str, source: str) -> bool:
        """Pre-filter using OpenAI."""
        answer = self._complete(build_prefilter_prompt(title, source), max_tokens=5, temperature=0.0)
        return not is_negative_answer(answer)

    def analyze_article(
        self,
        title: str,
        source: str,
        content: str,
        categories: List[Category],
    ) -> ArticleAnalysis:
        """Analyze article using OpenAI."""
        prompt = build_analysis_prompt(title, source, content, categories)
        text = self._complete(prompt, max_tokens=700, temperature=0.2, json_mode=True)
        return parse_json_response(text, ArticleAnalysis)

    def research_topic(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
    ) -> str:
        """Research topic using OpenAI."""
        prompt = build_research_prompt(focus, primary_topic, article_type)
        return self._complete(prompt, max_tokens=2000, temperature=0.5)

    def write_article(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
        research_notes: str,
    ) -> GeneratedArticle:
        """Write article using OpenAI."""
        prompt = build_writing_prompt(focus, primary_topic, article_type, research_notes)
        text = self._complete(prompt, max_tokens=3000, temperature=0.6, json_mode=True)
        return parse_json_response(text, GeneratedArticle)

    def generate_editorial(
        self,
        articles: List[Dict],
        week_start: date,
        week_end: date,
    ) -> GeneratedEditorial:
        """Write editorial using OpenAI."""
        prompt = build_editorial_prompt(articles, week_start, week_end)
        text = self._complete(prompt, max_tokens=1500, temperature=0.7, json_mode=True)
        return parse_json_response(text, GeneratedEditorial)

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        estimated_cost = 0.0
        if self.model in self.cost_per_1k_tokens:
            rates = self.cost_per_1k_tokens[self.model]
            estimated_cost = (
                (self.prompt_tokens / 1000) * rates["input"]
                + (self.completion_tokens / 1000) * rates["output"]
            )

        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
            "estimated_cost": estimated_cost,
            "model": self.model,
        }


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for testing and dry runs."""

    def __init__(
        self,
        relevant: bool = True,
        relevance_score: float = 8.0,
        category: Optional[str] = None,
    ) -> None:
        """
        Initialize mock provider.

        Args:
            relevant: Answer for both the pre-filter and the analysis
            relevance_score: Score returned by the analysis
            category: Slug returned by the analysis; defaults to the first category
        """
        self.relevant = relevant
        self.relevance_score = relevance_score
        self.category = category
        self.calls: List[tuple] = []

    def prefilter(self, title: str, source: str) -> bool:
        self.calls.append(("prefilter", title))
        return self.relevant

    def analyze_article(
        self,
        title: str,
        source: str,
        content: str,
        categories: List[Category],
    ) -> ArticleAnalysis:
        self.calls.append(("analyze", title))
        slug = self.category or (categories[0].slug if categories else "general")
        return ArticleAnalysis(
            relevance_score=self.relevance_score,
            is_relevant=self.relevant,
            category=slug,
            tags=["ai", "credit"],
            summary=f"Mock summary of '{title[:50]}' from {source}.",
            difficulty_level=DifficultyLevel.INTERMEDIATE,
            reasoning="Mock analysis",
        )

    def research_topic(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
    ) -> str:
        self.calls.append(("research", primary_topic))
        return f"Mock research notes on {primary_topic} for {focus.name}."

    def write_article(
        self,
        focus: ResearchFocus,
        primary_topic: str,
        article_type: ArticleType,
        research_notes: str,
    ) -> GeneratedArticle:
        self.calls.append(("write", primary_topic))
        return GeneratedArticle(
            title=f"{article_type.name}: {primary_topic}",
            summary=f"A look at {primary_topic} in {focus.name.lower()}.",
            content=f"{research_notes}\n\nMock article body.",
            difficulty_level=DifficultyLevel.INTERMEDIATE,
            tags=[focus.name.lower(), "ai"],
        )

    def generate_editorial(
        self,
        articles: List[Dict],
        week_start: date,
        week_end: date,
    ) -> GeneratedEditorial:
        self.calls.append(("editorial", week_start))
        headlines = "\n".join(f"- {article['title']}" for article in articles)
        return GeneratedEditorial(
            title=f"The Week in AI Credit: {week_start:%B %d}",
            content=f"Mock editorial covering {len(articles)} articles.\n\n{headlines}",
        )

    def get_usage_stats(self) -> Dict:
        """Get mock usage statistics."""
        return {
            "total_tokens": len(self.calls) * 100,
            "api_calls": len(self.calls),
            "estimated_cost": 0.0,
            "model": "mock",
        }


def get_llm_provider(llm_config: Dict[str, Any]) -> LLMProvider:
    """
    Build the configured LLM provider.

    Raises:
        ConfigurationError: if the provider is unknown or its API key is missing
    """
    provider = llm_config.get("provider", "openai")

    if provider == "mock":
        return MockLLMProvider()

    if provider == "openai":
        api_key = llm_config.get("api_key")
        if not api_key:
            raise ConfigurationError(
                f"No API key found for LLM provider; set {llm_config.get('api_key_env') or 'llm.api_key'}"
            )
        logger.debug("Using OpenAI model %s", llm_config.get("model"))
        return OpenAIProvider(
            api_key=api_key,
            model=llm_config.get("model", "gpt-4o-mini"),
            base_url=llm_config.get("base_url"),
            timeout=llm_config.get("timeout_seconds", 60.0),
        )

    raise ConfigurationError(f"Unknown LLM provider: {provider}")
