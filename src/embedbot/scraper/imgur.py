"""Imgur scraper.

Imgur serves most pages as a client-side app nowadays, so this only works
for pages that still carry the image_src link in their HTML.
"""

from bs4 import BeautifulSoup

from ..errors import ParseError
from ..post import EmbedOptions, ImageContent, Post, PostCommon
from ..render.response import ResponseBuilder
from ..render.templates import base_card
from ..storage.models import EmbedPolicy
from ..utils.formatting import render_title, url_domain
from .base import BaseScraper


TITLE_TEMPLATE = "'{title}' - **imgur**"
TITLE_SUFFIX = " - Imgur"


class ImgurScraper(BaseScraper):
    """Scraper for single image Imgur pages."""

    name = "imgur"
    platform = "imgur"

    def is_suitable(self, url: str) -> bool:
        domain = url_domain(url)
        return domain is not None and (domain == "imgur.com" or domain.endswith(".imgur.com"))

    def should_embed(self, post: Post, policy: EmbedPolicy) -> bool:
        return True

    async def scrape(self, url: str) -> Post:
        soup = await self._fetch_html(url)
        return self.parse_page(url, soup)

    @classmethod
    def parse_page(cls, url: str, soup: BeautifulSoup) -> Post:
        title_tag = soup.find("title")
        if title_tag is None:
            raise ParseError("could not find title in imgur page")

        title = cls._clean_text(title_tag.get_text())
        if title.endswith(TITLE_SUFFIX):
            title = title[: -len(TITLE_SUFFIX)].rstrip()

        link = soup.find("link", rel="image_src")
        image_url = link.get("href") if link is not None else None

        if not image_url:
            meta = soup.find("meta", attrs={"property": "og:image"})
            image_url = meta.get("content") if meta is not None else None

        if not image_url:
            raise ParseError("could not find imgur image url")

        return Post(
            platform=cls.platform,
            common=PostCommon(source_url=url, title=title),
            content=ImageContent(url=image_url),
        )

    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        title = render_title(post.common.title, TITLE_TEMPLATE)
        card = base_card(title, author, post.common.source_url, comment=options.comment)
        if isinstance(post.content, ImageContent):
            card.image(post.content.url)
        return response.embed(card)
