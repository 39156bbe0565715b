"""Render module turning posts into chat payloads."""

from .response import Attachment, EmbedBuilder, ResponseBuilder
from .templates import (
    base_card,
    error_card,
    info_card,
    manual_embed,
    success_card,
    warning_card,
)

__all__ = [
    "Attachment",
    "EmbedBuilder",
    "ResponseBuilder",
    "base_card",
    "error_card",
    "info_card",
    "manual_embed",
    "success_card",
    "warning_card",
]
