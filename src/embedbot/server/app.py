"""FastAPI surface exposing the bot's commands over HTTP."""

import base64
import logging
from typing import Any, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .. import __version__
from ..bot import EmbedBot
from ..post import EmbedOptions
from ..storage.models import SettingsKey
from ..transport import CapturingTransport, IncomingMessage


logger = logging.getLogger(__name__)


class EmbedRequest(BaseModel):
    """Request body for the embed command."""
    url: str
    author: str = "api"
    comment: Optional[str] = None
    ignore_nsfw: bool = False
    ignore_spoiler: bool = False


class SettingValue(BaseModel):
    """Request body for changing a setting."""
    value: Union[bool, str]


class MessageRequest(BaseModel):
    """A chat message to react to as if it was posted in a channel."""
    author: str
    content: str
    message_id: str = ""
    channel: Optional[str] = None
    author_is_bot: bool = False


def _serialize(record: dict[str, Any]) -> dict[str, Any]:
    """JSON-safe copy of a captured payload; attachment bytes become base64."""
    data = dict(record)
    data["files"] = [
        {
            "filename": f["filename"],
            "size": len(f["data"]),
            "data": base64.b64encode(f["data"]).decode("ascii"),
        }
        for f in record.get("files", [])
    ]
    return data


def _settings_key(key: str) -> SettingsKey:
    try:
        return SettingsKey(key)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown setting: {key}")


def create_app(bot: EmbedBot) -> FastAPI:
    """
    Create the FastAPI application.

    Every request gets its own CapturingTransport, so the response body
    holds exactly the messages that request produced.

    Args:
        bot: Configured bot with settings already loaded

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="EmbedBot",
        description="Turns social media links into chat embeds",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/embed")
    async def embed(body: EmbedRequest):
        """Embed a post, answering like a slash command would."""
        transport = CapturingTransport()
        options = EmbedOptions(
            comment=body.comment,
            ignore_nsfw=body.ignore_nsfw,
            ignore_spoiler=body.ignore_spoiler,
        )
        await bot.handle_embed_command(body.url, body.author, options, interaction=True, transport=transport)
        return {"messages": [_serialize(r) for r in transport.sent]}

    @app.post("/messages")
    async def messages(body: MessageRequest):
        """Handle a channel message: prefix commands and auto-embedding."""
        transport = CapturingTransport()
        message = IncomingMessage(
            author=body.author,
            content=body.content,
            message_id=body.message_id,
            channel=body.channel,
            author_is_bot=body.author_is_bot,
        )
        await bot.handle_message(message, transport=transport)
        return {
            "messages": [_serialize(r) for r in transport.sent],
            "deleted": [m.message_id for m in transport.deleted],
        }

    @app.get("/settings")
    async def list_settings():
        return {key.value: bot.settings.get(key) for key in SettingsKey}

    @app.get("/settings/{key}")
    async def get_setting(key: str):
        settings_key = _settings_key(key)
        return {"key": settings_key.value, "value": bot.settings.get(settings_key)}

    @app.put("/settings/{key}")
    async def put_setting(key: str, body: SettingValue):
        settings_key = _settings_key(key)
        try:
            update = await bot.change_setting(settings_key, body.value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {
            "key": update.key.value,
            "value": update.value,
            "message": update.message,
            "persisted": update.persisted,
        }

    @app.get("/scrapers")
    async def scrapers():
        return {"scrapers": bot.registry.names()}

    return app


def run_server(
    bot: EmbedBot,
    host: str = "localhost",
    port: int = 8080,
    log_level: str = "info",
):
    """
    Run the HTTP server.

    Args:
        bot: Bot to expose
        host: Host to bind to
        port: Port to bind to
        log_level: uvicorn log level
    """
    import uvicorn

    app = create_app(bot)
    logger.info("Serving %d scrapers on http://%s:%d", len(bot.registry), host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
