"""Data models for embed policies and runtime settings."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ContentKind(str, Enum):
    """What kind of media a post carries."""

    TEXT = "Text"
    IMAGE = "Image"
    GALLERY = "Gallery"
    VIDEO = "Video"


class OriginKind(str, Enum):
    """Whether a post was re-shared from another community."""

    CROSSPOSTED = "Crossposted"
    NON_CROSSPOSTED = "NonCrossposted"


class NsfwKind(str, Enum):
    NSFW = "Nsfw"
    SFW = "Sfw"


class PostClassification(BaseModel):
    """Classification of a single post, derived when a policy is checked."""

    model_config = ConfigDict(frozen=True)

    content_type: ContentKind
    origin_type: OriginKind = OriginKind.NON_CROSSPOSTED
    nsfw_type: NsfwKind = NsfwKind.SFW


class FuzzyPostClassification(BaseModel):
    """Policy entry; a missing field matches anything."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    content_type: Optional[ContentKind] = None
    origin_type: Optional[OriginKind] = None
    nsfw_type: Optional[NsfwKind] = None

    def matches(self, classification: PostClassification) -> bool:
        return (
            (self.content_type is None or self.content_type == classification.content_type)
            and (self.origin_type is None or self.origin_type == classification.origin_type)
            and (self.nsfw_type is None or self.nsfw_type == classification.nsfw_type)
        )


class EmbedPolicy(BaseModel):
    """Set of classifications one scraper is allowed to embed."""

    model_config = ConfigDict(extra="ignore")

    embed_set: list[FuzzyPostClassification] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        # policy files may hold just the list of entries
        if isinstance(data, (list, tuple)):
            return {"embed_set": list(data)}
        return data

    @field_validator("embed_set", mode="before")
    @classmethod
    def _expand_kind_shorthand(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return [
                {"content_type": entry} if isinstance(entry, str) else entry
                for entry in value
            ]
        return value

    def contains(self, classification: PostClassification) -> bool:
        return any(entry.matches(classification) for entry in self.embed_set)

    @classmethod
    def allow_all(cls) -> "EmbedPolicy":
        return cls(embed_set=[FuzzyPostClassification()])


class SettingsKey(str, Enum):
    """Runtime settings that can be read and changed through commands."""

    PREFIX = "prefix"
    DO_IMPLICIT_AUTO_EMBED = "do-implicit-auto-embed"

    @property
    def field_name(self) -> str:
        return self.value.replace("-", "_")


class RuntimeSettings(BaseModel):
    """Settings persisted across restarts."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    prefix: str = Field(default="*", min_length=1)
    do_implicit_auto_embed: bool = True
