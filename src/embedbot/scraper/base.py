"""Base scraper interface."""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp
from bs4 import BeautifulSoup

from .. import __version__
from ..errors import FetchError, ParseError
from ..post import (
    AttachmentContent,
    Crossposted,
    EmbedOptions,
    GalleryContent,
    ImageContent,
    Post,
    TextContent,
    VideoContent,
    VideoPreviewContent,
)
from ..render.response import ResponseBuilder
from ..storage.models import (
    ContentKind,
    EmbedPolicy,
    NsfwKind,
    OriginKind,
    PostClassification,
)


USER_AGENT = f"embedbot/{__version__}"


def content_kind(post: Post) -> ContentKind:
    """Map a post's content variant onto the policy vocabulary."""
    content = post.content
    if isinstance(content, GalleryContent):
        return ContentKind.GALLERY
    if isinstance(content, (ImageContent, AttachmentContent)):
        return ContentKind.IMAGE
    if isinstance(content, (VideoContent, VideoPreviewContent)):
        return ContentKind.VIDEO
    return ContentKind.TEXT


class BaseScraper(ABC):
    """Abstract base class for site scrapers."""

    # key of the embed policy and of the config module section
    name: str = "unknown"
    platform: str = "unknown"

    def __init__(
        self,
        timeout: int = 30,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or USER_AGENT

    @abstractmethod
    def is_suitable(self, url: str) -> bool:
        """
        Check if this scraper handles the given URL.

        Must not do any I/O and must accept arbitrary strings.

        Args:
            url: URL to check

        Returns:
            True if this scraper can handle the URL
        """
        pass

    @abstractmethod
    async def scrape(self, url: str) -> Post:
        """
        Fetch and parse the post behind a URL.

        Args:
            url: URL to scrape

        Returns:
            Fully populated Post

        Raises:
            FetchError: The site could not be reached
            ParseError: The response did not look as expected
        """
        pass

    @abstractmethod
    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        """
        Fill a response with the embed for a post.

        Args:
            post: Post returned by scrape()
            author: Display name of the user who shared the link
            options: Comment and content-warning overrides
            response: Builder to populate

        Returns:
            The populated builder
        """
        pass

    def classify(self, post: Post) -> PostClassification:
        return PostClassification(
            content_type=content_kind(post),
            origin_type=(
                OriginKind.CROSSPOSTED
                if isinstance(post.common.origin, Crossposted)
                else OriginKind.NON_CROSSPOSTED
            ),
            nsfw_type=NsfwKind.NSFW if post.common.nsfw else NsfwKind.SFW,
        )

    def should_embed(self, post: Post, policy: EmbedPolicy) -> bool:
        """Check a post against an embed policy. No I/O."""
        return policy.contains(self.classify(post))

    def _headers(self, accept: str) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": accept,
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def _fetch_text(
        self,
        url: str,
        accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    ) -> tuple[str, str]:
        """
        GET a URL, following redirects.

        Returns:
            (body text, final URL after redirects)
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=self._headers(accept), allow_redirects=True) as response:
                    if not 200 <= response.status < 300:
                        raise FetchError(url, f"HTTP {response.status}", status=response.status)

                    text = await response.text(errors="replace")
                    return text, str(response.url)

        except asyncio.TimeoutError as e:
            raise FetchError(url, f"timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise FetchError(url, f"network error: {e}") from e

    async def _fetch_json(self, url: str) -> Any:
        text, _ = await self._fetch_text(url, accept="application/json")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid json from {url}: {e}") from e

    async def _fetch_html(self, url: str) -> BeautifulSoup:
        text, _ = await self._fetch_text(url)
        return BeautifulSoup(text, "html.parser")

    @staticmethod
    def _clean_text(text: Optional[str]) -> str:
        """Collapse whitespace runs."""
        if not text:
            return ""
        return " ".join(text.split())
