"""Scraper registry and its construction from config."""

import logging
from typing import Any, Iterator, Mapping, Optional

from omegaconf import OmegaConf

from ..storage.models import EmbedPolicy
from .base import BaseScraper
from .imgur import ImgurScraper
from .ninegag import NineGagScraper
from .reddit import RedditScraper
from .svg import SvgScraper
from .twitter import TwitterScraper


logger = logging.getLogger(__name__)


# Available scraper classes by config name
SCRAPER_CLASSES: dict[str, type[BaseScraper]] = {
    RedditScraper.name: RedditScraper,
    NineGagScraper.name: NineGagScraper,
    ImgurScraper.name: ImgurScraper,
    TwitterScraper.name: TwitterScraper,
    SvgScraper.name: SvgScraper,
}

DEFAULT_ORDER = ["reddit", "ninegag", "imgur", "twitter", "svg"]


class ScraperRegistry:
    """
    Ordered set of scrapers; the first one claiming a URL handles it.

    Scrapers are only added while the bot is being set up; read-only after.
    """

    def __init__(self, scrapers: Optional[list[BaseScraper]] = None):
        self._scrapers: list[BaseScraper] = []
        for scraper in scrapers or []:
            self.register(scraper)

    def register(self, scraper: BaseScraper) -> None:
        if any(s.name == scraper.name for s in self._scrapers):
            raise ValueError(f"scraper {scraper.name!r} is already registered")
        self._scrapers.append(scraper)

    def find(self, url: str) -> Optional[BaseScraper]:
        """First registered scraper whose is_suitable accepts url."""
        for scraper in self._scrapers:
            if scraper.is_suitable(url):
                return scraper
        return None

    def names(self) -> list[str]:
        return [s.name for s in self._scrapers]

    def __iter__(self) -> Iterator[BaseScraper]:
        return iter(list(self._scrapers))

    def __len__(self) -> int:
        return len(self._scrapers)


def _section(cfg: Any, key: str) -> Mapping:
    value = cfg.get(key) if cfg is not None else None
    return value if value is not None else {}


def create_scraper(name: str, cfg: Any = None) -> BaseScraper:
    """
    Instantiate one scraper with the shared and per-site options.

    Args:
        name: Config name of the scraper
        cfg: Root config (DictConfig or plain mapping)

    Raises:
        KeyError: Unknown scraper name
    """
    scraper_cls = SCRAPER_CLASSES[name]
    scraper_cfg = _section(cfg, "scraper")

    kwargs: dict[str, Any] = {
        "timeout": scraper_cfg.get("timeout", 30),
        "user_agent": scraper_cfg.get("user_agent") or None,
    }

    if scraper_cls is TwitterScraper:
        twitter_cfg = _section(cfg, "twitter")
        kwargs["timeout"] = twitter_cfg.get("timeout", kwargs["timeout"])
        kwargs["headless"] = twitter_cfg.get("headless", True)
        kwargs["max_browsers"] = twitter_cfg.get("max_browsers", 2)

    return scraper_cls(**kwargs)


def build_registry(cfg: Any = None) -> ScraperRegistry:
    """Build the registry in modules.order, skipping disabled modules."""
    modules_cfg = _section(cfg, "modules")
    order = list(modules_cfg.get("order") or DEFAULT_ORDER)

    registry = ScraperRegistry()
    for name in order:
        if name not in SCRAPER_CLASSES:
            logger.warning("Unknown scraper module %r in modules.order, skipping", name)
            continue
        if not _section(modules_cfg, name).get("enabled", True):
            logger.info("Scraper module %s is disabled", name)
            continue
        registry.register(create_scraper(name, cfg))

    logger.info("Registered scrapers: %s", ", ".join(registry.names()) or "(none)")
    return registry


def default_policies(cfg: Any = None) -> dict[str, EmbedPolicy]:
    """Embed policies configured under modules.<name>.embed_set."""
    modules_cfg = _section(cfg, "modules")
    policies = {}

    for name in SCRAPER_CLASSES:
        embed_set = _section(modules_cfg, name).get("embed_set")
        if embed_set is None:
            continue
        if OmegaConf.is_config(embed_set):
            embed_set = OmegaConf.to_container(embed_set, resolve=True)
        policies[name] = EmbedPolicy.model_validate({"embed_set": embed_set})

    return policies
