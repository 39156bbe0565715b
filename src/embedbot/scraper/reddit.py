"""Reddit scraper using the public JSON representation of posts."""

import html
import logging
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from ..errors import FetchError, ParseError
from ..post import (
    Comment,
    Crossposted,
    EmbedOptions,
    GalleryContent,
    ImageContent,
    JustOrigin,
    Post,
    PostCommon,
    PostContent,
    TextContent,
    VideoContent,
    gallery_or_image,
)
from ..render.response import ResponseBuilder
from ..render.templates import (
    NSFW_NOTICE,
    SPOILER_NOTICE,
    base_card,
    manual_embed,
    render_body,
    reply_comment_field,
    warning_card,
)
from ..utils.formatting import (
    escape_markdown,
    is_http_url,
    render_title,
    strip_fragment,
    strip_query,
    url_domain,
    url_path_ends_with,
    url_path_ends_with_image_extension,
    url_path_segments,
)
from ..utils.json_nav import json_get, json_nav
from .base import BaseScraper


logger = logging.getLogger(__name__)

TITLE_TEMPLATE = "'{title}' {flair}- **reddit.com/r/{subreddit}**"
CROSSPOST_TITLE_TEMPLATE = "'{title}' {flair}- **reddit.com/r/{subreddit}\n[XPosted from r/{from_}]**"


def _http_url(value: Optional[str]) -> Optional[str]:
    """value if it is an absolute http(s) URL, else None."""
    if value and is_http_url(value):
        return value
    return None


def format_title(common: PostCommon) -> str:
    """Card title including flair and the (crosspost) origin."""
    flair = f"[{escape_markdown(common.flair)}] " if common.flair else ""
    origin = common.origin

    if isinstance(origin, Crossposted):
        return render_title(
            common.title,
            CROSSPOST_TITLE_TEMPLATE,
            flair=flair,
            subreddit=escape_markdown(origin.to),
            from_=escape_markdown(origin.from_),
        )

    return render_title(
        common.title,
        TITLE_TEMPLATE,
        flair=flair,
        subreddit=escape_markdown(origin.name),
    )


class RedditScraper(BaseScraper):
    """Scraper for Reddit posts, crossposts and linked comments."""

    name = "reddit"
    platform = "reddit"

    DOMAINS = {
        "reddit.com",
        "www.reddit.com",
        "old.reddit.com",
        "np.reddit.com",
        "redd.it",
    }

    def is_suitable(self, url: str) -> bool:
        """Check if URL points to reddit.com."""
        return url_domain(url) in self.DOMAINS

    async def scrape(self, url: str) -> Post:
        """Resolve the canonical post URL and analyze its JSON."""
        canonical = strip_fragment(strip_query(await self._find_canonical_post_url(url)))

        parts = urlsplit(canonical)
        json_url = urlunsplit((parts.scheme, parts.netloc, parts.path.rstrip("/") + ".json", "", ""))

        logger.debug("Fetching reddit post json %s", json_url)
        data = await self._fetch_json(json_url)

        return self.analyze_post(canonical, data)

    async def _find_canonical_post_url(self, url: str) -> str:
        """
        Follow share links and short links to the post they point to.

        The age gate redirects to /over18; in that case, and when the page
        cannot be fetched at all, the URL is used as given.
        """
        try:
            _, final_url = await self._fetch_text(url)
        except FetchError as e:
            logger.debug("Could not resolve %s (%s), using it as is", url, e)
            return url

        if urlsplit(final_url).path.rstrip("/") == "/over18":
            return url
        return final_url

    @classmethod
    def analyze_post(cls, url: str, data: Any) -> Post:
        """
        Build a Post from the JSON listing of a post page.

        Args:
            url: Canonical post URL (no query string)
            data: Decoded response of <post url>.json

        Returns:
            The analyzed post

        Raises:
            ParseError: Required fields are missing or malformed
        """
        top_level_post = json_nav(data, 0, "data", "children", 0, "data", expect=dict)

        title = html.unescape(json_nav(top_level_post, "title", expect=str, root="post"))
        subreddit = json_nav(top_level_post, "subreddit", expect=str, root="post")

        # for crossposts the media and text live in the original post
        parents = top_level_post.get("crosspost_parent_list")
        if isinstance(parents, list) and parents and isinstance(parents[0], dict):
            post_json = parents[0]
            origin = Crossposted(
                from_=json_nav(post_json, "subreddit", expect=str, root="crosspost_parent"),
                to=subreddit,
            )
        else:
            post_json = top_level_post
            origin = JustOrigin(name=subreddit)

        text = html.unescape(json_nav(post_json, "selftext", expect=str, root="post"))

        flair = json_get(post_json, "link_flair_text", expect=str)
        flair = html.unescape(flair) if flair else None

        common = PostCommon(
            source_url=url,
            title=title,
            body_text=text,
            flair=flair,
            nsfw=json_get(post_json, "over_18", default=False, expect=bool),
            spoiler=json_get(post_json, "spoiler", default=False, expect=bool),
            origin=origin,
            reply_context=cls._linked_comment(url, data),
        )

        return Post(
            platform=cls.platform,
            common=common,
            content=cls._analyze_content(top_level_post, post_json),
        )

    @staticmethod
    def _linked_comment(url: str, data: Any) -> Optional[Comment]:
        """The comment the URL points to, if it points to one."""
        comment_json = json_get(data, 1, "data", "children", 0, "data", expect=dict)
        if comment_json is None:
            return None

        comment_id = json_get(comment_json, "id", expect=str)
        segments = url_path_segments(url)
        if not comment_id or not segments or segments[-1] != comment_id:
            return None

        return Comment(
            author=json_nav(comment_json, "author", expect=str, root="comment"),
            body=html.unescape(json_nav(comment_json, "body", expect=str, root="comment")),
        )

    @staticmethod
    def _analyze_content(top_level_post: dict, post_json: dict) -> PostContent:
        # "thumbnail" can be "default", "self" or "nsfw" instead of a URL
        alt_embed_url = _http_url(json_get(top_level_post, "thumbnail", expect=str))

        secure_media = post_json.get("secure_media")
        if isinstance(secure_media, dict) and "reddit_video" in secure_media:
            video_url = json_nav(secure_media, "reddit_video", "fallback_url", expect=str, root="secure_media")
            return VideoContent(url=html.unescape(video_url))

        if isinstance(secure_media, dict) and "oembed" in secure_media:
            thumbnail = _http_url(json_get(secure_media, "oembed", "thumbnail_url", expect=str))
            img_url = html.unescape(thumbnail) if thumbnail else alt_embed_url
            if img_url is None:
                raise ParseError("oembed post without a usable thumbnail url")
            return ImageContent(url=img_url)

        media_metadata = post_json.get("media_metadata")
        if isinstance(media_metadata, dict) and media_metadata:
            return gallery_or_image(RedditScraper._gallery_urls(post_json, media_metadata))

        link = _http_url(json_nav(post_json, "url", expect=str, root="post")) or alt_embed_url
        if link is None:
            return TextContent()
        if url_path_ends_with_image_extension(link):
            return ImageContent(url=link)
        if url_path_ends_with(link, ".gifv"):
            return VideoContent(url=link)
        return TextContent()

    @staticmethod
    def _gallery_urls(post_json: dict, media_metadata: dict) -> list[str]:
        # gallery_data carries the order the poster chose; fall back to map order
        order = [
            item["media_id"]
            for item in json_get(post_json, "gallery_data", "items", default=[], expect=list)
            if isinstance(item, dict) and item.get("media_id") in media_metadata
        ]
        if not order:
            order = list(media_metadata)

        urls = []
        for media_id in order:
            source = json_nav(media_metadata, media_id, "s", expect=dict, root="media_metadata")
            raw = source.get("u") or source.get("gif")
            if not isinstance(raw, str) or not is_http_url(html.unescape(raw)):
                raise ParseError(f"no image url in media_metadata.{media_id}")
            urls.append(html.unescape(raw))
        return urls

    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        common = post.common
        title = format_title(common)
        src = common.source_url

        if common.nsfw and not options.ignore_nsfw:
            return response.embed(warning_card(title, author, src, NSFW_NOTICE, options.comment))

        if common.spoiler and not options.ignore_spoiler:
            card = warning_card(title, author, src, SPOILER_NOTICE, options.comment)
            if common.reply_context is not None:
                reply_comment_field(card, common.reply_context, "Reddit")
            return response.embed(card)

        content = post.content
        if isinstance(content, (GalleryContent, VideoContent)):
            urls = content.urls if isinstance(content, GalleryContent) else (content.url,)
            return response.content(manual_embed(
                author,
                src,
                urls,
                title=title,
                text=common.body_text,
                comment=options.comment,
                reply=common.reply_context,
                reply_site="Reddit",
            ))

        card = base_card(title, author, src, description=render_body(common.body_text), comment=options.comment)
        if common.reply_context is not None:
            reply_comment_field(card, common.reply_context, "Reddit")
        if isinstance(content, ImageContent):
            card.image(content.url)
        return response.embed(card)
