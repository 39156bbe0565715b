"""Builders for the payloads handed to the chat transport."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..utils.formatting import MESSAGE_CONTENT_MAX_LEN, limit_len


# Discord's interaction callback type for "reply with a message"
INTERACTION_CHANNEL_MESSAGE = 4


@dataclass(frozen=True)
class Attachment:
    """A local file sent along with a message."""

    path: Path
    filename: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class EmbedBuilder:
    """Fluent builder for a single rich card."""

    def __init__(self):
        self._data: dict[str, Any] = {}
        self._fields: list[dict[str, Any]] = []

    def title(self, title: str) -> "EmbedBuilder":
        self._data["title"] = title
        return self

    def description(self, description: str) -> "EmbedBuilder":
        self._data["description"] = description
        return self

    def author(self, name: str) -> "EmbedBuilder":
        self._data["author"] = {"name": name}
        return self

    def url(self, url: str) -> "EmbedBuilder":
        self._data["url"] = url
        return self

    def image(self, url: str) -> "EmbedBuilder":
        self._data["image"] = {"url": url}
        return self

    def footer(self, text: str) -> "EmbedBuilder":
        self._data["footer"] = {"text": text}
        return self

    def field(self, name: str, value: str, inline: bool = False) -> "EmbedBuilder":
        self._fields.append({"name": name, "value": value, "inline": inline})
        return self

    def get(self, key: str) -> Any:
        if key == "fields":
            return list(self._fields)
        return self._data.get(key)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self._data)
        if self._fields:
            data["fields"] = list(self._fields)
        return data


class ResponseBuilder:
    """
    The response being built for one post.

    Scrapers populate it without knowing whether it ends up as a new channel
    message or as the reply to a slash command; the two only differ in the
    payload shape produced at the end.
    """

    def __init__(self):
        self._content: Optional[str] = None
        self._embeds: list[EmbedBuilder] = []
        self._files: list[Attachment] = []

    def content(self, text: str) -> "ResponseBuilder":
        self._content = limit_len(text, MESSAGE_CONTENT_MAX_LEN)
        return self

    def embed(self, embed: EmbedBuilder) -> "ResponseBuilder":
        self._embeds.append(embed)
        return self

    def add_file(self, path: Path, filename: str) -> "ResponseBuilder":
        self._files.append(Attachment(path=Path(path), filename=filename))
        return self

    @property
    def text(self) -> Optional[str]:
        return self._content

    @property
    def embeds(self) -> list[EmbedBuilder]:
        return list(self._embeds)

    @property
    def files(self) -> list[Attachment]:
        return list(self._files)

    def _body(self) -> dict[str, Any]:
        return {
            "content": self._content,
            "embeds": [e.to_dict() for e in self._embeds],
        }

    def into_message(self) -> dict[str, Any]:
        """Payload for creating a new channel message."""
        payload = self._body()
        payload["files"] = list(self._files)
        return payload

    def into_interaction(self) -> dict[str, Any]:
        """Payload for answering a slash command interaction."""
        return {
            "type": INTERACTION_CHANNEL_MESSAGE,
            "data": self._body(),
            "files": list(self._files),
        }
