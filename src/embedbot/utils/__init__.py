"""Utility helpers for formatting text and navigating JSON."""

from .formatting import (
    EMBED_CONTENT_MAX_LEN,
    EMBED_FIELD_MAX_LEN,
    EMBED_TITLE_MAX_LEN,
    MESSAGE_CONTENT_MAX_LEN,
    escape_markdown,
    limit_descr_len,
    limit_len,
    render_title,
    url_path_ends_with,
    url_path_ends_with_image_extension,
)
from .json_nav import JsonNavError, json_get, json_nav

__all__ = [
    "EMBED_CONTENT_MAX_LEN",
    "EMBED_FIELD_MAX_LEN",
    "EMBED_TITLE_MAX_LEN",
    "MESSAGE_CONTENT_MAX_LEN",
    "escape_markdown",
    "limit_descr_len",
    "limit_len",
    "render_title",
    "url_path_ends_with",
    "url_path_ends_with_image_extension",
    "JsonNavError",
    "json_get",
    "json_nav",
]
