"""Twitter/X scraper driving a headless browser.

Tweets are rendered client side, so the page is loaded in Chromium through
Playwright. The sync API blocks, so every page load runs on a worker thread
and a semaphore bounds how many browsers run at once.
"""

import asyncio
import logging
from typing import Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..errors import FetchError, ParseError
from ..post import (
    EmbedOptions,
    GalleryContent,
    ImageContent,
    Post,
    PostCommon,
    PostContent,
    TextContent,
    VideoContent,
    VideoPreviewContent,
    gallery_or_image,
)
from ..render.response import ResponseBuilder
from ..render.templates import base_card, manual_embed, render_body
from ..storage.models import ContentKind, PostClassification
from ..utils.formatting import is_http_url, render_title, url_domain, url_path_segments
from .base import BaseScraper


logger = logging.getLogger(__name__)

TITLE_TEMPLATE = "@{title} - **twitter.com**"
MEDIA_PREFIX = "https://pbs.twimg.com/media"
VIDEO_FOOTER = "This was originally a video. Click to watch on twitter."

# placeholder text node twitter inserts into truncated tweets
ELLIPSIS = "…"


def _release_browser_slot(semaphore: asyncio.Semaphore, future: "asyncio.Future") -> None:
    semaphore.release()
    if not future.cancelled() and future.exception() is not None:
        logger.debug("Browser render failed: %s", future.exception())


class TwitterScraper(BaseScraper):
    """Scraper for tweets."""

    name = "twitter"
    platform = "twitter"

    DOMAINS = {
        "twitter.com",
        "www.twitter.com",
        "mobile.twitter.com",
        "x.com",
        "www.x.com",
    }

    def __init__(
        self,
        timeout: int = 30,
        user_agent: Optional[str] = None,
        headless: bool = True,
        max_browsers: int = 2,
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.headless = headless
        self.max_browsers = max(1, max_browsers)
        self._semaphore: Optional[asyncio.Semaphore] = None

    def is_suitable(self, url: str) -> bool:
        return url_domain(url) in self.DOMAINS

    def classify(self, post: Post) -> PostClassification:
        classification = super().classify(post)
        # the twitter policy has no gallery kind; several images are still images
        if classification.content_type is ContentKind.GALLERY:
            return classification.model_copy(update={"content_type": ContentKind.IMAGE})
        return classification

    async def scrape(self, url: str) -> Post:
        segments = url_path_segments(url)
        if not segments:
            raise ParseError(f"tweet url without author: {url}")
        author = segments[0]

        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_browsers)

        semaphore = self._semaphore
        await semaphore.acquire()
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self._fetch_rendered_html, url)

        # the slot belongs to the browser thread, not to the awaiting caller
        future.add_done_callback(lambda fut: _release_browser_slot(semaphore, fut))
        html = await asyncio.shield(future)

        return self.parse_page(url, author, BeautifulSoup(html, "html.parser"))

    def _fetch_rendered_html(self, url: str) -> str:
        """Load url in headless Chromium and return the rendered DOM. Blocking."""
        timeout_ms = self.timeout * 1000
        logger.debug("Rendering %s in headless browser", url)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=self.headless)
                try:
                    page = browser.new_page(user_agent=self.user_agent)
                    page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
                    page.wait_for_selector("article", timeout=timeout_ms)
                    return page.content()
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise FetchError(url, f"browser error: {e}") from e

    @classmethod
    def parse_page(cls, url: str, author: str, soup: BeautifulSoup) -> Post:
        """Build a Post from the rendered tweet page."""
        text_node = soup.select_one('article div[data-testid="tweetText"]')
        text = ""
        if text_node is not None:
            text = "".join(s for s in text_node.strings if s != ELLIPSIS)

        return Post(
            platform=cls.platform,
            common=PostCommon(source_url=url, title=author, body_text=text, author=author),
            content=cls._analyze_media(soup),
        )

    @staticmethod
    def _analyze_media(soup: BeautifulSoup) -> PostContent:
        img_urls = [
            img["src"]
            for img in soup.select("article img[alt]")
            if img.get("alt") and img.get("src", "").startswith(MEDIA_PREFIX)
        ]
        if img_urls:
            return gallery_or_image(img_urls)

        video = soup.select_one("article video")
        if video is None:
            return TextContent()

        if video.get("type") == "video/mp4" and video.get("src"):
            return VideoContent(url=video["src"])

        poster = video.get("poster")
        if not poster or not is_http_url(poster):
            raise ParseError("tweet video without a poster image")
        return VideoPreviewContent(thumbnail_url=poster)

    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        common = post.common
        title = render_title(common.author or common.title, TITLE_TEMPLATE)
        content = post.content

        if isinstance(content, (GalleryContent, VideoContent)):
            urls = content.urls if isinstance(content, GalleryContent) else (content.url,)
            return response.content(manual_embed(
                author,
                common.source_url,
                urls,
                title=title,
                text=common.body_text,
                comment=options.comment,
            ))

        card = base_card(
            title,
            author,
            common.source_url,
            description=render_body(common.body_text),
            comment=options.comment,
        )

        if isinstance(content, ImageContent):
            card.image(content.url)
        elif isinstance(content, VideoPreviewContent):
            card.image(content.thumbnail_url).footer(VIDEO_FOOTER)

        return response.embed(card)
