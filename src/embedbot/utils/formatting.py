"""Text and URL helpers shared by the scrapers and renderers."""

from typing import Optional
from urllib.parse import urlsplit, urlunsplit


EMBED_TITLE_MAX_LEN = 256
EMBED_CONTENT_MAX_LEN = 2048
EMBED_FIELD_MAX_LEN = 1024
MESSAGE_CONTENT_MAX_LEN = 2000

SHORTENED_MARKER = " [...]"

IMAGE_EXTENSIONS = (
    ".jpg", ".png", ".gif", ".tif", ".bmp", ".dib",
    ".jpeg", ".jpe", ".jfif", ".tiff", ".heic",
)

_MARKDOWN_SPECIAL = "\\`*_{}[]()#+-.!~>|"
_MARKDOWN_TABLE = str.maketrans({ch: "\\" + ch for ch in _MARKDOWN_SPECIAL})


def escape_markdown(text: str) -> str:
    """Backslash-escape every character with meaning in chat markdown."""
    return text.translate(_MARKDOWN_TABLE)


def _cut_utf8(text: str, budget: int) -> str:
    """Longest prefix of text whose UTF-8 encoding fits in budget bytes."""
    if budget <= 0:
        return ""
    # a partial trailing sequence is dropped by errors="ignore"
    return text.encode("utf-8")[:budget].decode("utf-8", errors="ignore")


def byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def limit_len(text: str, limit: int) -> str:
    """
    Shorten text to at most limit UTF-8 bytes.

    Over-long text is cut on a code point boundary and the shortened marker
    is appended. Text that already fits is returned unchanged. A limit
    smaller than the marker leaves no room for it, so the text is only cut;
    a limit of 0 yields the empty string.

    Args:
        text: Text to shorten
        limit: Maximum byte length of the result

    Returns:
        The original string or a shortened copy ending in " [...]"
    """
    if byte_len(text) <= limit:
        return text

    if limit < len(SHORTENED_MARKER):
        return _cut_utf8(text, limit)

    return _cut_utf8(text, limit - len(SHORTENED_MARKER)) + SHORTENED_MARKER


def limit_descr_len(text: str) -> str:
    return limit_len(text, EMBED_CONTENT_MAX_LEN)


def limit_field_len(text: str) -> str:
    return limit_len(text, EMBED_FIELD_MAX_LEN)


def render_title(title: str, template: str, **fields: str) -> str:
    """
    Escape a title and fit it into a title template.

    The overhead of the template is measured by rendering it with an empty
    title, so every template variant (flair, crosspost, source name) pays for
    exactly the characters it adds. Oversized flair or community names can
    shrink the title to a bare prefix, or drop it entirely.

    Args:
        title: Raw, unescaped title
        template: Format string with a {title} placeholder
        **fields: Remaining template values, already escaped

    Returns:
        Formatted title no longer than EMBED_TITLE_MAX_LEN bytes
    """
    overhead = byte_len(template.format(title="", **fields))
    budget = max(EMBED_TITLE_MAX_LEN - overhead, 0)

    shortened = limit_len(escape_markdown(title), budget)
    rendered = template.format(title=shortened, **fields)

    # only reachable when the template alone is over the limit
    return limit_len(rendered, EMBED_TITLE_MAX_LEN)


def _url_path(url: str) -> str:
    try:
        return urlsplit(url).path.rstrip("/")
    except ValueError:
        return ""


def url_domain(url: str) -> Optional[str]:
    """Lower-cased host name of url, or None if it has none."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def url_path_ends_with(url: str, suffix: str) -> bool:
    return _url_path(url).endswith(suffix)


def url_path_ends_with_image_extension(url: str) -> bool:
    path = _url_path(url).lower()
    return any(path.endswith(ext) for ext in IMAGE_EXTENSIONS)


def url_path_segments(url: str) -> list[str]:
    """Non-empty path segments of url."""
    return [seg for seg in _url_path(url).split("/") if seg]


def strip_query(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment))


def strip_fragment(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))


def is_http_url(text: str) -> bool:
    """Check that text is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(text.strip())
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc) and " " not in text.strip()
