"""Chat transports: where rendered responses end up."""

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .errors import TransportError
from .render.response import Attachment


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingMessage:
    """A message posted to a channel the bot watches."""

    author: str
    content: str
    message_id: str = ""
    channel: Optional[str] = None
    author_is_bot: bool = False


@dataclass(frozen=True)
class MessageHandle:
    """Reference to a message the transport sent."""

    message_id: str
    channel: Optional[str] = None


class ChatTransport(Protocol):
    """Sends payloads built by ResponseBuilder and deletes user messages."""

    async def send(self, payload: dict[str, Any], channel: Optional[str] = None) -> MessageHandle:
        """Deliver a message or interaction payload. Raises TransportError."""
        ...

    async def delete(self, message: IncomingMessage) -> None:
        """Delete a user message. Raises TransportError."""
        ...


def _payload_body(payload: dict[str, Any]) -> dict[str, Any]:
    # interaction payloads nest content and embeds under "data"
    return payload.get("data", payload)


def _read_files(payload: dict[str, Any]) -> list[tuple[str, bytes]]:
    files = []
    for attachment in payload.get("files", []):
        if not isinstance(attachment, Attachment):
            continue
        try:
            files.append((attachment.filename, attachment.read_bytes()))
        except OSError as e:
            raise TransportError(f"could not read attachment {attachment.filename}: {e}") from e
    return files


class ConsoleTransport:
    """Prints responses to the terminal. Used by the one-shot CLI."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._ids = itertools.count(1)

    async def send(self, payload: dict[str, Any], channel: Optional[str] = None) -> MessageHandle:
        body = _payload_body(payload)
        files = _read_files(payload)

        if body.get("content"):
            self.console.print(body["content"], markup=False, highlight=False)

        for embed in body.get("embeds", []):
            self.console.print(self._embed_panel(embed))

        for filename, data in files:
            self.console.print(f"[cyan]Attachment:[/cyan] {escape(filename)} ({len(data)} bytes)")

        return MessageHandle(message_id=str(next(self._ids)), channel=channel)

    async def delete(self, message: IncomingMessage) -> None:
        self.console.print(f"[dim]Deleted message {escape(message.message_id)} by {escape(message.author)}[/dim]")

    @staticmethod
    def _embed_panel(embed: dict[str, Any]) -> Panel:
        table = Table.grid(padding=(0, 1))
        table.add_column(style="cyan", no_wrap=True)
        table.add_column()

        if embed.get("author"):
            table.add_row("Author", Text(embed["author"]["name"]))
        if embed.get("url"):
            table.add_row("URL", Text(embed["url"]))
        if embed.get("description"):
            table.add_row("Description", Text(embed["description"]))
        for field in embed.get("fields", []):
            table.add_row(Text(field["name"], style="cyan"), Text(field["value"]))
        if embed.get("image"):
            table.add_row("Image", Text(embed["image"]["url"]))
        if embed.get("footer"):
            table.add_row("Footer", Text(embed["footer"]["text"]))

        title = embed.get("title")
        # scraped and user text is shown literally, never parsed as markup
        return Panel(table, title=Text(title) if title else None, title_align="left")


class CapturingTransport:
    """
    Records every payload instead of delivering it.

    Attachment bytes are read when send() is called, so the recorded
    payloads stay usable after the bot has released its temporary files.
    """

    def __init__(self):
        self.sent: list[dict[str, Any]] = []
        self.deleted: list[IncomingMessage] = []
        self._ids = itertools.count(1)

    async def send(self, payload: dict[str, Any], channel: Optional[str] = None) -> MessageHandle:
        record = {key: value for key, value in payload.items() if key != "files"}
        record["files"] = [
            {"filename": filename, "data": data} for filename, data in _read_files(payload)
        ]
        record["channel"] = channel
        self.sent.append(record)

        handle = MessageHandle(message_id=str(next(self._ids)), channel=channel)
        logger.debug("Captured message %s", handle.message_id)
        return handle

    async def delete(self, message: IncomingMessage) -> None:
        self.deleted.append(message)

    def drain(self) -> tuple[list[dict[str, Any]], list[IncomingMessage]]:
        """Return and forget everything recorded so far."""
        sent, deleted = self.sent, self.deleted
        self.sent, self.deleted = [], []
        return sent, deleted
