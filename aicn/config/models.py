"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("aicn", description="Database name")
    user: str = Field("aicn_user", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field("AICN_DB_PASSWORD", description="Environment variable for password")


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field("openai", description="LLM provider (openai, mock)")
    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for API")
    timeout_seconds: float = Field(60.0, description="Per-request timeout", gt=0)


class ScrapeConfig(BaseModel):
    """Feed and article fetching parameters."""

    timeout_seconds: float = Field(10.0, gt=0)
    user_agent: str = Field("AI-Credit-News-Bot/1.0 (Educational News Aggregator)")
    items_per_source: int = Field(20, ge=1, le=200)
    min_content_chars: int = Field(200, ge=0, description="Backfill full text below this length")
    max_content_chars: int = Field(10000, ge=100)


class DelayConfig(BaseModel):
    """Fixed courtesy delays between upstream calls, in seconds."""

    between_sources: float = Field(2.0, ge=0)
    between_fetches: float = Field(1.0, ge=0)
    between_articles: float = Field(1.0, ge=0)
    between_generations: float = Field(2.0, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO")
    file_path: Optional[str] = Field(None)


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    scrape: ScrapeConfig = Field(default_factory=ScrapeConfig)
    delays: DelayConfig = Field(default_factory=DelayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class SourceConfig(BaseModel):
    """Source entry from sources.yaml."""

    name: str = Field(..., description="Source name")
    rss_feed: str = Field(..., description="RSS feed URL")
    url: Optional[str] = Field(None, description="Homepage URL")
    language: str = Field("en", description="Language code")
    active: bool = Field(True, description="Whether source is scraped")
