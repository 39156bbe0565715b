"""Tests for the HTTP command surface."""

import base64
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from embedbot.bot import EmbedBot
from embedbot.post import AttachmentContent, ImageContent, Post, PostCommon
from embedbot.render.templates import base_card
from embedbot.scraper import BaseScraper, ScraperRegistry
from embedbot.server import create_app
from embedbot.storage import EmbedPolicy, SettingsKey, SettingsStore
from embedbot.transport import CapturingTransport


URL = "https://example.com/p/1"


class FakeScraper(BaseScraper):
    name = "fake"
    platform = "fake"

    def __init__(self):
        super().__init__()
        self.scrape = AsyncMock(return_value=Post(
            platform="fake",
            common=PostCommon(source_url=URL, title="A post"),
            content=ImageContent(url="https://example.com/1.jpg"),
        ))

    def is_suitable(self, url):
        return url.startswith("https://example.com/")

    async def scrape(self, url):
        raise NotImplementedError

    def render(self, post, author, options, response):
        if isinstance(post.content, AttachmentContent):
            response.add_file(post.content.local_file, post.content.filename)
        card = base_card(post.common.title, author, post.common.source_url, comment=options.comment)
        return response.embed(card)


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def store(tmp_path):
    store = SettingsStore(tmp_path, default_policies={"fake": EmbedPolicy.allow_all()})
    store.load()
    return store


@pytest.fixture
def client(scraper, store):
    bot = EmbedBot(ScraperRegistry([scraper]), store, CapturingTransport())
    return TestClient(create_app(bot))


class TestEmbedEndpoint:
    """Tests for POST /embed."""

    def test_embed(self, client):
        response = client.post("/embed", json={"url": URL, "author": "alice", "comment": "wow"})

        assert response.status_code == 200
        messages = response.json()["messages"]
        assert len(messages) == 1
        assert messages[0]["type"] == 4
        embed = messages[0]["data"]["embeds"][0]
        assert embed["title"] == "A post"
        assert embed["fields"][0]["value"] == "wow"

    def test_embed_error_is_reply(self, client):
        response = client.post("/embed", json={"url": "nope"})

        assert response.status_code == 200
        embed = response.json()["messages"][0]["data"]["embeds"][0]
        assert embed["title"] == ":x: Error"

    def test_attachment_is_base64(self, client, scraper, tmp_path):
        path = tmp_path / "render.png"
        path.write_bytes(b"\x89PNG")
        scraper.scrape.return_value = Post(
            platform="fake",
            common=PostCommon(source_url=URL, title="svg"),
            content=AttachmentContent(local_file=path, filename="logo.png"),
        )

        files = client.post("/embed", json={"url": URL}).json()["messages"][0]["files"]

        assert files == [{"filename": "logo.png", "size": 4, "data": base64.b64encode(b"\x89PNG").decode()}]
        assert not path.exists()

    def test_missing_url(self, client):
        assert client.post("/embed", json={}).status_code == 422


class TestMessagesEndpoint:
    """Tests for POST /messages."""

    def test_auto_embed(self, client):
        response = client.post("/messages", json={"author": "alice", "content": URL, "message_id": "42"})
        body = response.json()
        assert body["deleted"] == ["42"]
        assert body["messages"][0]["embeds"][0]["author"] == {"name": "alice"}

    def test_ordinary_message(self, client):
        body = client.post("/messages", json={"author": "alice", "content": "hello there"}).json()
        assert body == {"messages": [], "deleted": []}

    def test_settings_command(self, client, store):
        body = client.post("/messages", json={"author": "alice", "content": "*settings prefix ?"}).json()
        assert body["messages"][0]["embeds"][0]["description"] == "prefix is now '?'"
        assert store.get(SettingsKey.PREFIX) == "?"


class TestSettingsEndpoints:
    """Tests for /settings."""

    def test_list(self, client):
        assert client.get("/settings").json() == {"prefix": "*", "do-implicit-auto-embed": True}

    def test_get(self, client):
        assert client.get("/settings/prefix").json() == {"key": "prefix", "value": "*"}

    def test_unknown_key(self, client):
        assert client.get("/settings/colour").status_code == 404
        assert client.put("/settings/colour", json={"value": "red"}).status_code == 404

    def test_put_bool(self, client, store):
        body = client.put("/settings/do-implicit-auto-embed", json={"value": False}).json()
        assert body == {
            "key": "do-implicit-auto-embed",
            "value": False,
            "message": "bot will no longer autoembed",
            "persisted": True,
        }
        assert store.get(SettingsKey.DO_IMPLICIT_AUTO_EMBED) is False

    def test_put_invalid(self, client):
        response = client.put("/settings/do-implicit-auto-embed", json={"value": "maybe"})
        assert response.status_code == 400
        assert response.json()["detail"] == "expected boolean"

    def test_put_persists(self, client, tmp_path):
        client.put("/settings/prefix", json={"value": "!"})

        reloaded = SettingsStore(tmp_path)
        reloaded.load()
        assert reloaded.get(SettingsKey.PREFIX) == "!"


class TestScrapersEndpoint:
    """Tests for GET /scrapers."""

    def test_list(self, client):
        assert client.get("/scrapers").json() == {"scrapers": ["fake"]}
