"""Card and text-block layouts shared by all scrapers."""

from typing import Optional, Sequence

from ..post import Comment
from ..utils.formatting import escape_markdown, limit_descr_len, limit_field_len
from .response import EmbedBuilder


def render_body(text: str) -> str:
    """Escape scraped body text and fit it into a card description."""
    return limit_descr_len(escape_markdown(text))


def author_comment_field(embed: EmbedBuilder, author: str, comment: str) -> EmbedBuilder:
    """Attach the comment the requesting user wrote next to the link."""
    return embed.field(f"Comment by {author}", limit_field_len(comment), inline=False)


def reply_comment_field(embed: EmbedBuilder, comment: Comment, site: str) -> EmbedBuilder:
    """Attach a comment scraped from the source site."""
    name = f"Comment by {site} User '{escape_markdown(comment.author)}'"
    return embed.field(name, limit_field_len(escape_markdown(comment.body)), inline=True)


def base_card(
    title: str,
    author: str,
    url: str,
    description: Optional[str] = None,
    comment: Optional[str] = None,
) -> EmbedBuilder:
    """Card with the formatted title linking to the source post."""
    embed = EmbedBuilder().title(title).author(author).url(url)
    if description:
        embed.description(description)
    if comment:
        author_comment_field(embed, author, comment)
    return embed


def warning_card(
    title: str,
    author: str,
    url: str,
    notice: str,
    comment: Optional[str] = None,
) -> EmbedBuilder:
    """Card that hides the content behind a click-through notice."""
    return base_card(title, author, url, description=notice, comment=comment)


NSFW_NOTICE = "Warning NSFW: Click to view content"
SPOILER_NOTICE = "Spoiler: Click to view content"


def manual_embed(
    author: str,
    source_url: str,
    embed_urls: Sequence[str],
    title: str = "",
    text: str = "",
    comment: Optional[str] = None,
    reply: Optional[Comment] = None,
    reply_site: str = "",
) -> str:
    """
    Plain-text block used where a card cannot show the media.

    Cards hold at most one image and never autoplay video, so galleries and
    videos are posted as raw URLs the chat client previews itself.
    """
    user_comment = f"**Comment By {author}:**\n{comment}\n\n" if comment else ""

    reply_comment = ""
    if reply is not None:
        reply_comment = (
            f"**Comment By {reply_site} User '{escape_markdown(reply.author)}':**\n"
            f"{escape_markdown(reply.body)}\n\n"
        )

    lines = [f">>> **{author}**", f"Source: <{source_url}>"]
    if embed_urls:
        lines.append("EmbedURL: " + "\n".join(embed_urls))

    block = "\n".join(lines) + "\n\n" + user_comment + reply_comment
    if title:
        block += title
    if text:
        block += "\n\n" + render_body(text)
    return block


def error_card(message: str) -> EmbedBuilder:
    return EmbedBuilder().title(":x: Error").description(message)


def info_card(message: str) -> EmbedBuilder:
    return EmbedBuilder().title(":information_source: Info").description(message)


def success_card(message: str) -> EmbedBuilder:
    return EmbedBuilder().title(":white_check_mark: Success").description(message)
