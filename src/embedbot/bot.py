"""Embed orchestration: URL to scraper to post to rendered message."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import (
    EmbedBotError,
    FetchError,
    NoScraperAvailableError,
    NotEligibleForEmbeddingError,
    ParseError,
    PersistError,
    ScrapeError,
    TransportError,
    UrlMalformedError,
)
from .post import EmbedOptions, Post
from .render.response import EmbedBuilder, ResponseBuilder
from .render.templates import error_card, info_card, success_card
from .scraper.base import BaseScraper
from .scraper.factory import ScraperRegistry
from .storage.models import SettingsKey
from .storage.settings_store import SettingsStore
from .transport import ChatTransport, IncomingMessage, MessageHandle
from .utils.formatting import is_http_url


logger = logging.getLogger(__name__)

# trailing characters share links pick up that make the first fetch fail
JUNK_SUFFIXES = ("#",)

SETTINGS_DESCRIPTIONS = {
    SettingsKey.PREFIX: ":exclamation: prefix",
    SettingsKey.DO_IMPLICIT_AUTO_EMBED: ":envelope: do-implicit-auto-embed",
}

PERSIST_WARNING = "Warning: the setting could not be saved and may not survive a restart."


def split_message(content: str) -> tuple[Optional[str], Optional[str]]:
    """
    Find the URL to embed in a message and the comment around it.

    A single-line message is a URL or nothing. In longer messages the
    first line that is a URL is used and the other non-empty lines become
    the comment.

    Returns:
        (url or None, comment or None)
    """
    lines = content.splitlines()
    if not lines:
        return None, None

    if len(lines) == 1:
        line = lines[0].strip()
        return (line if is_http_url(line) else None), None

    urls = []
    comments = []
    for line in lines:
        if not line.strip():
            continue
        if is_http_url(line.strip()):
            urls.append(line.strip())
        else:
            comments.append(line)

    url = urls[0] if urls else None
    return url, ("\n".join(comments) or None)


@dataclass(frozen=True)
class SettingUpdate:
    """Outcome of changing a runtime setting."""

    key: SettingsKey
    value: Any
    message: str
    persisted: bool = True


class EmbedBot:
    """
    Turns links into embeds.

    Holds the scraper registry and the settings store, and is the only
    place that decides what users get to read when something fails.
    """

    def __init__(
        self,
        registry: ScraperRegistry,
        settings: SettingsStore,
        transport: ChatTransport,
    ):
        self.registry = registry
        self.settings = settings
        self.transport = transport

    def find_scraper(self, url: str) -> BaseScraper:
        scraper = self.registry.find(url)
        if scraper is None:
            raise NoScraperAvailableError(url)
        return scraper

    async def get_post(self, url: str) -> tuple[BaseScraper, Post]:
        """
        Scrape url with the first suitable scraper.

        A URL ending in a junk suffix is retried once without it when the
        first scrape fails.

        Raises:
            UrlMalformedError: url is not an absolute http(s) URL
            NoScraperAvailableError: No scraper claims url
            ScrapeError: Fetching or parsing failed
            NotEligibleForEmbeddingError: The embed policy rejects the post
        """
        url = url.strip()
        if not is_http_url(url):
            raise UrlMalformedError(url)

        scraper = self.find_scraper(url)

        try:
            post = await scraper.scrape(url)
        except ScrapeError as e:
            suffix = next((s for s in JUNK_SUFFIXES if url.endswith(s)), None)
            if suffix is None:
                raise
            logger.debug("Scraping %s failed (%s), retrying without %r", url, e, suffix)
            post = await scraper.scrape(url[: -len(suffix)])

        if not scraper.should_embed(post, self.settings.read_policy(scraper.name)):
            post.release()
            raise NotEligibleForEmbeddingError(post)

        return scraper, post

    async def embed(
        self,
        url: str,
        author: str,
        options: Optional[EmbedOptions] = None,
        *,
        interaction: bool = False,
        transport: Optional[ChatTransport] = None,
        channel: Optional[str] = None,
    ) -> MessageHandle:
        """
        Scrape, render and send one URL.

        Files the post owns are released once the transport has sent them,
        whether or not sending succeeded.
        """
        options = options or EmbedOptions()
        scraper, post = await self.get_post(url)

        try:
            response = scraper.render(post, author, options, ResponseBuilder())
            handle = await self._send(response, interaction, transport, channel)
        finally:
            post.release()

        logger.info("Embedded %s for %s", post.common.source_url, author)
        return handle

    async def handle_message(
        self,
        message: IncomingMessage,
        transport: Optional[ChatTransport] = None,
    ) -> Optional[MessageHandle]:
        """
        React to a channel message: run a prefix command or auto-embed it.

        Returns:
            Handle of the reply, or None if the bot stayed silent
        """
        if message.author_is_bot:
            return None

        prefix = self.settings.get(SettingsKey.PREFIX)
        if message.content.startswith(prefix):
            return await self._handle_prefix_command(message, message.content[len(prefix):], transport)

        if not self.settings.get(SettingsKey.DO_IMPLICIT_AUTO_EMBED):
            return None

        return await self._auto_embed(message, transport)

    async def _handle_prefix_command(
        self,
        message: IncomingMessage,
        command_line: str,
        transport: Optional[ChatTransport],
    ) -> Optional[MessageHandle]:
        words = command_line.split()
        if not words:
            return await self._send(
                ResponseBuilder().embed(error_card("expected command")),
                transport=transport,
                channel=message.channel,
            )

        command, args = words[0], words[1:]

        if command == "embed":
            if not args:
                return await self._send(
                    ResponseBuilder().embed(error_card("usage: embed <url> [comment]")),
                    transport=transport,
                    channel=message.channel,
                )
            comment = " ".join(args[1:]) or None
            try:
                handle = await self.embed(
                    args[0],
                    message.author,
                    EmbedOptions(comment=comment),
                    transport=transport,
                    channel=message.channel,
                )
            except TransportError:
                raise
            except EmbedBotError as e:
                logger.error("Could not embed %s: %s", args[0], e)
                return await self._send(
                    ResponseBuilder().embed(describe_error(e)),
                    transport=transport,
                    channel=message.channel,
                )
            await self._delete_original(message, transport)
            return handle

        if command == "settings":
            return await self.handle_settings_command(
                args,
                interaction=False,
                transport=transport,
                channel=message.channel,
            )

        logger.debug("Ignoring unknown command %r", command)
        return None

    async def _auto_embed(
        self,
        message: IncomingMessage,
        transport: Optional[ChatTransport],
    ) -> Optional[MessageHandle]:
        url, comment = split_message(message.content)
        if url is None:
            return None

        try:
            handle = await self.embed(
                url,
                message.author,
                EmbedOptions(comment=comment),
                transport=transport,
                channel=message.channel,
            )
        except (NoScraperAvailableError, NotEligibleForEmbeddingError) as e:
            logger.info("Not embedding %s: %s", url, e)
            return None
        except ScrapeError as e:
            logger.error("Error while trying to embed %s: %s", url, e)
            return await self._send(
                ResponseBuilder().embed(error_card(f"Could not embed <{url}>")),
                transport=transport,
                channel=message.channel,
            )

        await self._delete_original(message, transport)
        return handle

    async def _delete_original(self, message: IncomingMessage, transport: Optional[ChatTransport]) -> None:
        try:
            await (transport or self.transport).delete(message)
        except TransportError as e:
            logger.warning("Could not delete message %s after embedding: %s", message.message_id, e)

    async def handle_embed_command(
        self,
        url: str,
        author: str,
        options: Optional[EmbedOptions] = None,
        *,
        interaction: bool = True,
        transport: Optional[ChatTransport] = None,
        channel: Optional[str] = None,
    ) -> MessageHandle:
        """Explicit embed request. Always answers, with the embed or an error."""
        try:
            return await self.embed(
                url,
                author,
                options,
                interaction=interaction,
                transport=transport,
                channel=channel,
            )
        except TransportError:
            raise
        except EmbedBotError as e:
            logger.error("Could not embed %s: %s", url, e)
            return await self._send(
                ResponseBuilder().embed(describe_error(e)),
                interaction,
                transport,
                channel,
            )

    async def change_setting(self, key: SettingsKey, raw_value: str) -> SettingUpdate:
        """
        Change a runtime setting.

        Raises:
            ValueError: raw_value is not valid for key
        """
        persisted = True
        try:
            value = await self.settings.set(key, raw_value)
        except PersistError as e:
            logger.error("Could not persist setting %s: %s", key.value, e)
            value = self.settings.get(key)
            persisted = False

        if key is SettingsKey.PREFIX:
            message = f"prefix is now '{value}'"
        elif value:
            message = "bot will now autoembed"
        else:
            message = "bot will no longer autoembed"

        return SettingUpdate(key=key, value=value, message=message, persisted=persisted)

    async def handle_settings_command(
        self,
        args: list[str],
        *,
        interaction: bool = False,
        transport: Optional[ChatTransport] = None,
        channel: Optional[str] = None,
    ) -> MessageHandle:
        """
        settings                 list the available settings
        settings <key>           show the current value
        settings <key> <value>   change it
        """
        response = ResponseBuilder()

        if not args:
            response.embed(self._settings_overview())
        elif len(args) > 2:
            response.embed(error_card("required at most 2 arguments"))
        else:
            try:
                key = SettingsKey(args[0])
            except ValueError:
                key = None

            if key is None:
                response.embed(error_card("invalid setting"))
            elif len(args) == 1:
                response.embed(info_card(f"`{key.value}` is `{self.settings.get(key)}`"))
            else:
                try:
                    update = await self.change_setting(key, args[1])
                except ValueError as e:
                    response.embed(error_card(str(e)))
                else:
                    text = update.message if update.persisted else f"{update.message}\n{PERSIST_WARNING}"
                    response.embed(success_card(text))

        return await self._send(response, interaction, transport, channel)

    def _settings_overview(self) -> EmbedBuilder:
        prefix = self.settings.get(SettingsKey.PREFIX)
        embed = (
            EmbedBuilder()
            .title("EmbedBot Settings")
            .description(f"Use the command format `{prefix}settings <option>`")
        )
        for key, descr in SETTINGS_DESCRIPTIONS.items():
            embed.field(descr, f"`{prefix}settings {key.value}`", inline=True)
        return embed

    async def _send(
        self,
        response: ResponseBuilder,
        interaction: bool = False,
        transport: Optional[ChatTransport] = None,
        channel: Optional[str] = None,
    ) -> MessageHandle:
        payload = response.into_interaction() if interaction else response.into_message()
        return await (transport or self.transport).send(payload, channel)


def describe_error(error: EmbedBotError) -> EmbedBuilder:
    """User-facing card for a failed embed request."""
    if isinstance(error, UrlMalformedError):
        return error_card(f"Could not parse url: {error.url}")
    if isinstance(error, NoScraperAvailableError):
        return info_card(f"No scraper available for <{error.url}>")
    if isinstance(error, NotEligibleForEmbeddingError):
        return info_card(f"Not supposed to embed <{error.post.common.source_url}>")
    if isinstance(error, FetchError):
        if error.status is not None:
            return error_card(f"Could not fetch <{error.url}> (HTTP {error.status})")
        return error_card(f"Could not fetch <{error.url}>")
    if isinstance(error, ParseError):
        return error_card(f"Could not read the post: {error}")
    return error_card(str(error))
