"""SVG "scraper" that rasterizes linked vector images to PNG attachments."""

import asyncio
import logging
import tempfile
from pathlib import Path

from PIL import Image

from ..errors import ParseError
from ..post import AttachmentContent, EmbedOptions, Post, PostCommon
from ..render.response import ResponseBuilder
from ..render.templates import manual_embed
from ..storage.models import EmbedPolicy
from ..utils.formatting import url_path_segments
from .base import BaseScraper


logger = logging.getLogger(__name__)


def _svg_to_png(svg_bytes: bytes, path: Path) -> None:
    # cairosvg loads the native cairo library on import
    import cairosvg

    cairosvg.svg2png(bytestring=svg_bytes, write_to=str(path))


def rasterize_svg(svg_text: str) -> tuple[Path, int, int]:
    """
    Render SVG source to a temporary PNG at its intrinsic size. Blocking.

    The caller owns the returned file and must delete it.

    Args:
        svg_text: SVG document

    Returns:
        (path of the PNG, width, height)

    Raises:
        ParseError: The document could not be rendered. No file is left behind.
    """
    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as tmp:
        path = Path(tmp.name)

    try:
        _svg_to_png(svg_text.encode("utf-8"), path)
        with Image.open(path) as img:
            width, height = img.size
    except Exception as e:
        path.unlink(missing_ok=True)
        raise ParseError(f"invalid svg: {e}") from e

    return path, width, height


def _discard_rendered(future: "asyncio.Future") -> None:
    if future.cancelled() or future.exception() is not None:
        return
    path, _, _ = future.result()
    path.unlink(missing_ok=True)


class SvgScraper(BaseScraper):
    """Turns links to .svg files into PNG attachments."""

    name = "svg"
    platform = "svg"

    def is_suitable(self, url: str) -> bool:
        segments = url_path_segments(url)
        return bool(segments) and segments[-1].lower().endswith(".svg")

    def should_embed(self, post: Post, policy: EmbedPolicy) -> bool:
        return True

    @staticmethod
    def png_filename(url: str) -> str:
        segments = url_path_segments(url)
        stem = segments[-1][: -len(".svg")] if segments else ""
        return f"{stem or 'image'}.png"

    async def scrape(self, url: str) -> Post:
        svg_text, _ = await self._fetch_text(url, accept="image/svg+xml,*/*;q=0.8")

        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, rasterize_svg, svg_text)
        try:
            # shielded so a cancelled caller still gets the file cleaned up
            path, width, height = await asyncio.shield(future)
        except asyncio.CancelledError:
            future.add_done_callback(_discard_rendered)
            raise

        filename = self.png_filename(url)
        logger.debug("Rasterized %s to %s (%dx%d)", url, path, width, height)

        return Post(
            platform=self.platform,
            common=PostCommon(source_url=url, title=filename),
            content=AttachmentContent(local_file=path, filename=filename, width=width, height=height),
        )

    def render(
        self,
        post: Post,
        author: str,
        options: EmbedOptions,
        response: ResponseBuilder,
    ) -> ResponseBuilder:
        if isinstance(post.content, AttachmentContent):
            response.add_file(post.content.local_file, post.content.filename)
        return response.content(manual_embed(author, post.common.source_url, (), comment=options.comment))
