"""Main CLI entry point for EmbedBot."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .bot import EmbedBot
from .post import EmbedOptions
from .scraper import build_registry, default_policies
from .server import run_server
from .storage import SettingsKey, SettingsStore
from .transport import ChatTransport, ConsoleTransport

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Route all log records through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def build_bot(cfg: DictConfig, transport: Optional[ChatTransport] = None) -> EmbedBot:
    """Create the registry and the settings store from config and wire up a bot."""
    settings_dir = Path(to_absolute_path(cfg.settings.dir))
    settings = SettingsStore(settings_dir, default_policies=default_policies(cfg))
    settings.load()

    registry = build_registry(cfg)
    return EmbedBot(registry, settings, transport or ConsoleTransport(console))


def show_scrapers(bot: EmbedBot) -> None:
    """Display registered scrapers and their embed policies."""
    table = Table(title="Scrapers")
    table.add_column("Name", style="cyan")
    table.add_column("Embeds", style="green")

    for scraper in bot.registry:
        policy = bot.settings.read_policy(scraper.name)
        entries = [
            "/".join(v.value for v in (e.content_type, e.origin_type, e.nsfw_type) if v is not None) or "*"
            for e in policy.embed_set
        ]
        table.add_row(scraper.name, ", ".join(entries) or "-")

    console.print(table)


async def embed_once(bot: EmbedBot, cfg: DictConfig) -> None:
    """Render a single URL to the console."""
    options = EmbedOptions(
        comment=cfg.get("comment"),
        ignore_nsfw=cfg.get("ignore_nsfw", False),
        ignore_spoiler=cfg.get("ignore_spoiler", False),
    )
    await bot.handle_embed_command(cfg.url, cfg.get("author", "cli"), options, interaction=False)


@hydra.main(version_base=None, config_path="../../conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    setup_logging(cfg.logging.level)
    console.print("[bold blue]EmbedBot[/bold blue]")
    console.print()

    bot = build_bot(cfg)

    if cfg.get("url"):
        asyncio.run(embed_once(bot, cfg))
        return

    show_scrapers(bot)
    console.print(f"[cyan]Prefix:[/cyan] {bot.settings.get(SettingsKey.PREFIX)}")
    console.print(f"[cyan]Server:[/cyan] http://{cfg.server.host}:{cfg.server.port}")
    console.print()

    run_server(bot, cfg.server.host, cfg.server.port, log_level=cfg.logging.level.lower())


if __name__ == "__main__":
    main()
