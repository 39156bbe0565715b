"""9GAG scraper reading the post data embedded in the page."""

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from ..errors import ParseError
from ..post import (
    EmbedOptions,
    ImageContent,
    Post,
    PostCommon,
    VideoContent,
)
from ..render.response import ResponseBuilder
from ..render.templates import NSFW_NOTICE, base_card, manual_embed, warning_card
from ..utils.formatting import render_title, url_domain
from ..utils.json_nav import json_get, json_nav
from .base import BaseScraper


logger = logging.getLogger(__name__)

TITLE_TEMPLATE = "'{title}' - **9GAG**"
TITLE_SUFFIX = " - 9GAG"
CONFIG_CALL = "JSON.parse("


def extract_config_json(script_text: str) -> Any:
    """
    Decode the JSON.parse("...") argument of the page config script.

    The argument is a JS string literal holding the JSON document. Its
    bounds come from the call syntax, not from fixed offsets.

    Raises:
        ParseError: No call found or the payload is not JSON
    """
    start = script_text.find(CONFIG_CALL)
    end = script_text.rfind(")")
    if start < 0 or end <= start:
        raise ParseError("could not find JSON.parse call in 9gag page")

    literal = script_text[start + len(CONFIG_CALL):end].strip()

    try:
        payload = json.loads(literal)
    except json.JSONDecodeError:
        # not a valid JSON string literal (e.g. \' escapes); drop the escaping
        payload = literal.replace("\\", "").strip("\"'")

    if not isinstance(payload, str):
        return payload

    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid 9gag post json: {e}") from e


class NineGagScraper(BaseScraper):
    """Scraper for 9GAG photo and video posts."""

    name = "ninegag"
    platform = "9gag"

    DOMAINS = {"9gag.com", "www.9gag.com"}

    def is_suitable(self, url: str) -> bool:
        return url_domain(url) in self.DOMAINS

    async def scrape(self, url: str) -> Post:
        soup = await self._fetch_html(url)
        return self.parse_page(url, soup)

    @classmethod
    def parse_page(cls, url: str, soup: BeautifulSoup) -> Post:
        """Build a Post from a fetched 9GAG post page."""
        title_tag = soup.find("title")
        if title_tag is None:
            raise ParseError("could not find title in 9gag page")

        title = cls._clean_text(title_tag.get_text())
        if title.endswith(TITLE_SUFFIX):
            title = title[: -len(TITLE_SUFFIX)]

        script = next(
            (tag for tag in soup.find_all("script") if CONFIG_CALL in tag.get_text()),
            None,
        )
        if script is None:
            raise ParseError("could not find post json in 9gag page")

        build_json = extract_config_json(script.get_text())
        post_json = json_nav(build_json, "data", "post", expect=dict)

        post_type = json_nav(post_json, "type", expect=str, root="post")
        logger.debug("9gag post %s has type %s", url, post_type)

        if post_type == "Photo":
            content = ImageContent(
                url=json_nav(post_json, "images", "image700", "url", expect=str, root="post"),
            )
        elif post_type == "Animated":
            images = json_nav(post_json, "images", expect=dict, root="post")
            alternative = images.get("image460svwm") or json_nav(images, "image460sv", root="post.images")
            content = VideoContent(url=json_nav(alternative, "url", expect=str, root="post.images.image460sv"))
        else:
            content = VideoContent(url=json_nav(post_json, "vp9Url", expect=str, root="post"))

        return Post(
            platform=cls.platform,
            common=PostCommon(
                source_url=url,
                title=title,
                nsfw=bool(json_get(post_json, "nsfw", default=0)),
            ),
            content=content,
        )

    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        common = post.common
        title = render_title(common.title, TITLE_TEMPLATE)

        if common.nsfw and not options.ignore_nsfw:
            return response.embed(warning_card(title, author, common.source_url, NSFW_NOTICE, options.comment))

        if isinstance(post.content, ImageContent):
            card = base_card(title, author, common.source_url, comment=options.comment)
            return response.embed(card.image(post.content.url))

        return response.content(manual_embed(
            author,
            common.source_url,
            (post.content.url,),
            title=title,
            comment=options.comment,
        ))
