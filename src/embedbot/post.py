"""Normalized representation of a scraped post."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class Comment:
    """A comment singled out by the linked URL."""

    author: str
    body: str


@dataclass(frozen=True)
class JustOrigin:
    """Post lives only in the community it was posted to."""

    name: str


@dataclass(frozen=True)
class Crossposted:
    """Post re-shared from community from_ into community to."""

    from_: str
    to: str


PostOrigin = Union[JustOrigin, Crossposted]


@dataclass(frozen=True)
class TextContent:
    """Post without media."""


@dataclass(frozen=True)
class ImageContent:
    url: str


@dataclass(frozen=True)
class GalleryContent:
    """Several images, in source order."""

    urls: tuple[str, ...]

    def __post_init__(self):
        if not self.urls:
            raise ValueError("a gallery needs at least one image")


@dataclass(frozen=True)
class VideoContent:
    url: str


@dataclass(frozen=True)
class VideoPreviewContent:
    """Video that cannot be embedded; only its thumbnail is shown."""

    thumbnail_url: str


@dataclass(frozen=True)
class AttachmentContent:
    """Locally rendered image without a remote URL."""

    local_file: Path
    filename: str
    width: int = 0
    height: int = 0


PostContent = Union[
    TextContent,
    ImageContent,
    GalleryContent,
    VideoContent,
    VideoPreviewContent,
    AttachmentContent,
]


def gallery_or_image(urls: list[str]) -> PostContent:
    """Collapse a single image list into ImageContent."""
    if len(urls) == 1:
        return ImageContent(url=urls[0])
    return GalleryContent(urls=tuple(urls))


@dataclass
class PostCommon:
    """Fields every scraped post has."""

    source_url: str
    title: str
    body_text: str = ""
    flair: Optional[str] = None
    author: Optional[str] = None
    nsfw: bool = False
    spoiler: bool = False
    origin: PostOrigin = field(default_factory=lambda: JustOrigin(name=""))
    reply_context: Optional[Comment] = None


@dataclass
class Post:
    """Result of scraping a URL."""

    platform: str
    common: PostCommon
    content: PostContent = field(default_factory=TextContent)

    def release(self) -> None:
        """Delete local files owned by this post. Safe to call twice."""
        if isinstance(self.content, AttachmentContent):
            self.content.local_file.unlink(missing_ok=True)


@dataclass
class EmbedOptions:
    """Per-request rendering options."""

    comment: Optional[str] = None
    ignore_nsfw: bool = False
    ignore_spoiler: bool = False
