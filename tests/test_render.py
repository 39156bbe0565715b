"""Tests for the response builders and shared templates."""

from embedbot.post import Comment
from embedbot.render import EmbedBuilder, ResponseBuilder, base_card, error_card, manual_embed, warning_card
from embedbot.render.response import INTERACTION_CHANNEL_MESSAGE
from embedbot.render.templates import NSFW_NOTICE, reply_comment_field
from embedbot.utils.formatting import MESSAGE_CONTENT_MAX_LEN, byte_len


class TestEmbedBuilder:
    """Tests for EmbedBuilder."""

    def test_fluent_build(self):
        embed = (
            EmbedBuilder()
            .title("t")
            .description("d")
            .author("a")
            .url("https://example.com")
            .image("https://example.com/i.png")
            .footer("f")
            .field("n", "v", inline=True)
        )
        assert embed.to_dict() == {
            "title": "t",
            "description": "d",
            "author": {"name": "a"},
            "url": "https://example.com",
            "image": {"url": "https://example.com/i.png"},
            "footer": {"text": "f"},
            "fields": [{"name": "n", "value": "v", "inline": True}],
        }

    def test_no_fields_key_without_fields(self):
        assert "fields" not in EmbedBuilder().title("t").to_dict()


class TestResponseBuilder:
    """Tests for ResponseBuilder payload shapes."""

    def test_message_and_interaction_share_body(self):
        response = ResponseBuilder().content("hello").embed(error_card("boom"))

        message = response.into_message()
        assert message["content"] == "hello"
        assert message["embeds"] == [{"title": ":x: Error", "description": "boom"}]
        assert message["files"] == []

        interaction = response.into_interaction()
        assert interaction["type"] == INTERACTION_CHANNEL_MESSAGE == 4
        assert interaction["data"] == {"content": message["content"], "embeds": message["embeds"]}

    def test_content_is_clamped(self):
        response = ResponseBuilder().content("x" * 5000)
        assert byte_len(response.text) == MESSAGE_CONTENT_MAX_LEN

    def test_files(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(b"data")
        response = ResponseBuilder().add_file(path, "a.png")
        assert response.files[0].read_bytes() == b"data"
        assert response.into_interaction()["files"][0].filename == "a.png"


class TestTemplates:
    """Tests for the shared card and text layouts."""

    def test_base_card_with_comment(self):
        embed = base_card("Title", "alice", "https://example.com/p", description="body", comment="*mine*").to_dict()
        assert embed["title"] == "Title"
        assert embed["author"] == {"name": "alice"}
        # the requester's own comment keeps its formatting
        assert embed["fields"] == [{"name": "Comment by alice", "value": "*mine*", "inline": False}]

    def test_warning_card(self):
        embed = warning_card("Title", "alice", "https://example.com/p", NSFW_NOTICE).to_dict()
        assert embed["description"] == NSFW_NOTICE
        assert "image" not in embed

    def test_reply_comment_is_escaped(self):
        embed = reply_comment_field(EmbedBuilder(), Comment(author="bob", body="**loud**"), "Reddit").to_dict()
        assert embed["fields"] == [
            {"name": "Comment by Reddit User 'bob'", "value": "\\*\\*loud\\*\\*", "inline": True},
        ]

    def test_reply_comment_author_is_escaped(self):
        comment = Comment(author="some_user_name", body="hi")
        embed = reply_comment_field(EmbedBuilder(), comment, "Reddit").to_dict()
        assert embed["fields"][0]["name"] == "Comment by Reddit User 'some\\_user\\_name'"

        text = manual_embed("alice", "https://example.com/p", [], reply=comment, reply_site="Reddit")
        assert "**Comment By Reddit User 'some\\_user\\_name':**\nhi\n\n" in text

    def test_manual_embed_layout(self):
        text = manual_embed(
            "alice",
            "https://example.com/p",
            ["https://example.com/1.jpg", "https://example.com/2.jpg"],
            title="'T' - **site**",
            text="body_text",
            comment="nice",
            reply=Comment(author="bob", body="first!"),
            reply_site="Reddit",
        )
        assert text == (
            ">>> **alice**\n"
            "Source: <https://example.com/p>\n"
            "EmbedURL: https://example.com/1.jpg\nhttps://example.com/2.jpg\n\n"
            "**Comment By alice:**\nnice\n\n"
            "**Comment By Reddit User 'bob':**\nfirst\\!\n\n"
            "'T' - **site**\n\n"
            "body\\_text"
        )

    def test_manual_embed_minimal(self):
        assert manual_embed("alice", "https://example.com/p", []) == ">>> **alice**\nSource: <https://example.com/p>\n\n"
