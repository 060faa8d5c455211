"""LLM access and AI-authored article generation."""

from .editorial import EditorialOutcome, EditorialWriter, editorial_week
from .generator import ArticleGenerator
from .llm_provider import LLMProvider, MockLLMProvider, OpenAIProvider, get_llm_provider
from .models import (
    ArticleAnalysis,
    ArticleType,
    GeneratedArticle,
    GeneratedEditorial,
    GeneratedItem,
    GenerationError,
    GenerationResults,
    ResearchFocus,
)
from .prompts import ARTICLE_TYPES, CATEGORY_RESEARCH_FOCUS, research_focus_for

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "MockLLMProvider",
    "get_llm_provider",
    "ArticleGenerator",
    "EditorialOutcome",
    "EditorialWriter",
    "editorial_week",
    "ArticleAnalysis",
    "ArticleType",
    "GeneratedArticle",
    "GeneratedEditorial",
    "GeneratedItem",
    "GenerationError",
    "GenerationResults",
    "ResearchFocus",
    "ARTICLE_TYPES",
    "CATEGORY_RESEARCH_FOCUS",
    "research_focus_for",
]
