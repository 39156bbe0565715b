"""Site scrapers turning post URLs into normalized posts."""

from .base import BaseScraper, content_kind
from .reddit import RedditScraper
from .ninegag import NineGagScraper
from .imgur import ImgurScraper
from .twitter import TwitterScraper
from .svg import SvgScraper
from .factory import ScraperRegistry, build_registry, create_scraper, default_policies

__all__ = [
    "BaseScraper",
    "content_kind",
    "RedditScraper",
    "NineGagScraper",
    "ImgurScraper",
    "TwitterScraper",
    "SvgScraper",
    "ScraperRegistry",
    "build_registry",
    "create_scraper",
    "default_policies",
]
