"""Admin-controlled content settings."""

from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator

SETTINGS_DEFAULTS: Dict[str, Any] = {
    "daily_min_articles": 5,
    "daily_max_articles": 10,
    "daily_max_ai_articles": 3,
    "weekly_min_per_category": 5,
    "scrape_max_age_hours": 24,
    "articles_per_scrape": 5,
    "auto_publish_hours": 48,
}


class ContentSettings(BaseModel):
    """Content generation settings with baked-in defaults."""

    daily_min_articles: int = Field(SETTINGS_DEFAULTS["daily_min_articles"], ge=0)
    daily_max_articles: int = Field(SETTINGS_DEFAULTS["daily_max_articles"], ge=0)
    daily_max_ai_articles: int = Field(SETTINGS_DEFAULTS["daily_max_ai_articles"], ge=0)
    weekly_min_per_category: int = Field(SETTINGS_DEFAULTS["weekly_min_per_category"], ge=0)
    scrape_max_age_hours: int = Field(SETTINGS_DEFAULTS["scrape_max_age_hours"], ge=1)
    articles_per_scrape: int = Field(SETTINGS_DEFAULTS["articles_per_scrape"], ge=1)
    auto_publish_hours: int = Field(SETTINGS_DEFAULTS["auto_publish_hours"], ge=1)

    @model_validator(mode="after")
    def check_limits(self) -> "ContentSettings":
        """Reject settings the admin form would refuse."""
        if self.daily_min_articles > self.daily_max_articles:
            raise ValueError("Minimum cannot exceed maximum")
        if self.daily_max_ai_articles > self.daily_max_articles:
            raise ValueError("AI max cannot exceed daily max")
        return self
