#!/usr/bin/env python3
"""Simple runner script for the EmbedBot HTTP server."""

import sys
from pathlib import Path

from omegaconf import OmegaConf

CONFIG_FILE = Path(__file__).parent / "conf" / "config.yaml"


def main():
    # Defaults
    settings_dir = Path("./settings")
    host = "0.0.0.0"
    port = 8080

    # Parse simple args
    args = sys.argv[1:]
    if "--help" in args or "-h" in args:
        print("""
EmbedBot - turns social media links into chat embeds

Usage:
    python run.py [options]

Options:
    --settings DIR  settings directory (default: ./settings)
    --host HOST     bind address (default: 0.0.0.0)
    --port PORT     server port (default: 8080)
    -h, --help      show this help

Examples:
    python run.py
    python run.py --settings /var/lib/embedbot --port 3000
""")
        return

    for i, arg in enumerate(args):
        if arg == "--settings" and i + 1 < len(args):
            settings_dir = Path(args[i + 1])
        elif arg == "--host" and i + 1 < len(args):
            host = args[i + 1]
        elif arg == "--port" and i + 1 < len(args):
            port = int(args[i + 1])

    settings_dir.mkdir(parents=True, exist_ok=True)

    cfg = OmegaConf.load(CONFIG_FILE)
    cfg.settings.dir = str(settings_dir.resolve())

    from embedbot.main import build_bot, setup_logging
    from embedbot.server import run_server

    setup_logging(cfg.logging.level)

    print(f"""
EmbedBot
  Settings: {settings_dir}
  Server:   http://{host}:{port}
""")

    bot = build_bot(cfg)
    run_server(bot, host=host, port=port, log_level=cfg.logging.level.lower())


if __name__ == "__main__":
    main()
