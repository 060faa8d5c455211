"""Article fetcher and text extractor."""

import logging
from typing import Optional

import httpx
import trafilatura

from .models import ArticleContent
from .rss_fetcher import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

PAYWALL_INDICATORS = ["paywall", "subscribe to read", "members only"]


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


class ArticleFetcher:
    """Fetch HTML and extract article text."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        max_chars: int = 10000,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize article fetcher."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_chars = max_chars
        self.transport = transport

    def _failure(self, url: str, error: str) -> ArticleContent:
        logger.warning("Error fetching content from %s: %s", url, error)
        return ArticleContent(url=url, fetch_success=False, error=error)

    def fetch_article(self, url: str) -> ArticleContent:
        """Fetch and extract a single article."""
        try:
            headers = {
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml",
            }

            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self.transport,
            ) as client:
                response = client.get(url)
                response.raise_for_status()

            html = response.text
            if any(indicator in html.lower() for indicator in PAYWALL_INDICATORS):
                return self._failure(url, "Paywall detected")

            extracted = trafilatura.extract(
                html,
                include_comments=False,
                include_tables=False,
                deduplicate=True,
                favor_precision=True,
                url=str(response.url),
            )
            if not extracted:
                return self._failure(url, "Failed to extract article content")

            text = _collapse_whitespace(extracted)
            if len(text) > self.max_chars:
                text = text[: self.max_chars] + "..."

            return ArticleContent(url=url, text=text, fetch_success=True)

        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}"
            if e.response.status_code == 404:
                error_msg = "Article not found (404)"
            elif e.response.status_code == 403:
                error_msg = "Access forbidden (403)"
            elif e.response.status_code >= 500:
                error_msg = f"Server error ({e.response.status_code})"
            return self._failure(url, error_msg)
        except httpx.TimeoutException:
            return self._failure(url, "Request timed out")
        except Exception as e:
            return self._failure(url, f"Unexpected error: {e}")
