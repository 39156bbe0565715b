"""Storage module for settings and embed policies."""

from .models import (
    ContentKind,
    OriginKind,
    NsfwKind,
    PostClassification,
    FuzzyPostClassification,
    EmbedPolicy,
    RuntimeSettings,
    SettingsKey,
)
from .settings_store import SettingsStore, parse_setting_value

__all__ = [
    "ContentKind",
    "OriginKind",
    "NsfwKind",
    "PostClassification",
    "FuzzyPostClassification",
    "EmbedPolicy",
    "RuntimeSettings",
    "SettingsKey",
    "SettingsStore",
    "parse_setting_value",
]
