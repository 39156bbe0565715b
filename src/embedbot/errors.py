"""Exception types raised by the scrapers, the settings store and the bot."""

from typing import Optional


class EmbedBotError(Exception):
    """Base class for every error the bot raises on purpose."""


class UrlMalformedError(EmbedBotError):
    """Raised when the input is not an absolute http(s) URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"could not parse url: {url}")


class NoScraperAvailableError(EmbedBotError):
    """Raised when no registered scraper claims a URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"no scraper available for {url}")


class NotEligibleForEmbeddingError(EmbedBotError):
    """Raised when a post was scraped but the embed policy rejects it."""

    def __init__(self, post):
        self.post = post
        super().__init__(f"not supposed to embed {post.common.source_url}")


class ScrapeError(EmbedBotError):
    """Raised when fetching or interpreting a post fails."""


class FetchError(ScrapeError):
    """Raised on network failures, timeouts and non-2xx responses."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(f"fetching {url} failed: {reason}")


class ParseError(ScrapeError):
    """Raised when a fetched payload does not have the expected shape."""


class PersistError(EmbedBotError):
    """Raised when writing settings to disk fails."""


class TransportError(EmbedBotError):
    """Raised by chat transports when sending or deleting fails."""
