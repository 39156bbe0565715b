"""Tests for the text and URL helpers."""

import pytest

from embedbot.utils.formatting import (
    EMBED_TITLE_MAX_LEN,
    SHORTENED_MARKER,
    byte_len,
    escape_markdown,
    is_http_url,
    limit_descr_len,
    limit_len,
    render_title,
    strip_fragment,
    strip_query,
    url_domain,
    url_path_ends_with,
    url_path_ends_with_image_extension,
    url_path_segments,
)
from embedbot.scraper.reddit import CROSSPOST_TITLE_TEMPLATE, TITLE_TEMPLATE


class TestEscapeMarkdown:
    """Tests for escape_markdown."""

    def test_escapes_special_characters(self):
        assert escape_markdown("*bold* _it_") == "\\*bold\\* \\_it\\_"
        assert escape_markdown("[link](x)") == "\\[link\\]\\(x\\)"
        assert escape_markdown("`code` #tag 1.5! a-b +c {d}") == (
            "\\`code\\` \\#tag 1\\.5\\! a\\-b \\+c \\{d\\}"
        )

    def test_plain_text_unchanged(self):
        assert escape_markdown("hello world") == "hello world"

    def test_backslash_cannot_cancel_escape(self):
        # "\*" from the source must not turn into an escaped backslash plus a bare "*"
        assert escape_markdown("\\*") == "\\\\\\*"

    def test_no_bare_special_character_left(self):
        escaped = escape_markdown("a*b_c`d")
        for i, ch in enumerate(escaped):
            if ch in "*_`":
                assert escaped[i - 1] == "\\"

    def test_escaping_twice_double_escapes(self):
        assert escape_markdown(escape_markdown("*")) == "\\\\\\*"


class TestLimitLen:
    """Tests for limit_len."""

    def test_short_text_returned_as_is(self):
        text = "short"
        assert limit_len(text, 10) is text

    def test_exact_fit_unchanged(self):
        assert limit_len("a" * 10, 10) == "a" * 10

    def test_ascii_truncated_to_exact_length(self):
        result = limit_len("a" * 100, 50)
        assert result.endswith(SHORTENED_MARKER)
        assert byte_len(result) == 50

    def test_multibyte_not_split(self):
        result = limit_len("é" * 100, 51)
        assert result.endswith(SHORTENED_MARKER)
        assert byte_len(result) <= 51
        # round trips through utf-8 without errors
        assert result.encode("utf-8").decode("utf-8") == result
        assert result == "é" * 22 + SHORTENED_MARKER

    def test_emoji_not_split(self):
        result = limit_len("😀" * 20, 17)
        assert result == "😀" * 2 + SHORTENED_MARKER

    def test_limit_below_marker_length(self):
        assert limit_len("abcdefgh", 3) == "abc"

    def test_descr_limit(self):
        assert byte_len(limit_descr_len("x" * 5000)) == 2048


class TestRenderTitle:
    """Tests for the title budget."""

    def test_short_title(self):
        title = render_title("A title", TITLE_TEMPLATE, flair="", subreddit="aww")
        assert title == "'A title' - **reddit.com/r/aww**"

    def test_title_is_escaped(self):
        title = render_title("*wow*", "'{title}' - **9GAG**")
        assert title == "'\\*wow\\*' - **9GAG**"

    @pytest.mark.parametrize("title", ["x" * 1000, "ü" * 600, "*" * 400])
    def test_crosspost_with_flair_fits(self, title):
        rendered = render_title(
            title,
            CROSSPOST_TITLE_TEMPLATE,
            flair="[Not yet verified] ",
            subreddit="Awwducational",
            from_="interestingasfuck",
        )
        assert byte_len(rendered) <= EMBED_TITLE_MAX_LEN
        assert rendered.endswith("[XPosted from r/interestingasfuck]**")
        assert SHORTENED_MARKER in rendered

    def test_oversize_flair_still_fits(self):
        rendered = render_title(
            "title",
            TITLE_TEMPLATE,
            flair="[" + "f" * 400 + "] ",
            subreddit="aww",
        )
        assert byte_len(rendered) <= EMBED_TITLE_MAX_LEN

    def test_small_budget_cuts_title_without_marker(self):
        rendered = render_title("abcdefgh", "{title}|" + "x" * 251)
        assert rendered == "abcd|" + "x" * 251
        assert byte_len(rendered) == EMBED_TITLE_MAX_LEN

    def test_no_budget_left_drops_title(self):
        assert render_title("abcdefgh", "{title}" + "x" * 256) == "x" * 256


class TestUrlHelpers:
    """Tests for URL helpers."""

    def test_url_domain(self):
        assert url_domain("https://WWW.Reddit.com/r/aww") == "www.reddit.com"
        assert url_domain("not a url") is None

    def test_image_extension(self):
        assert url_path_ends_with_image_extension("https://i.redd.it/abc.jpg")
        assert url_path_ends_with_image_extension("https://i.imgur.com/abc.PNG?x=1")
        assert not url_path_ends_with_image_extension("https://i.imgur.com/abc.gifv")

    def test_path_ends_with(self):
        assert url_path_ends_with("https://i.imgur.com/abc.gifv", ".gifv")
        assert not url_path_ends_with("https://example.com/?q=.gifv", ".gifv")

    def test_path_segments(self):
        assert url_path_segments("https://twitter.com/user/status/1/") == ["user", "status", "1"]
        assert url_path_segments("https://twitter.com") == []

    def test_strip_query_and_fragment(self):
        url = "https://www.reddit.com/r/aww/comments/x/y/?utm_source=share#frag"
        assert strip_query(url) == "https://www.reddit.com/r/aww/comments/x/y/#frag"
        assert strip_fragment(strip_query(url)) == "https://www.reddit.com/r/aww/comments/x/y/"

    def test_is_http_url(self):
        assert is_http_url("https://example.com/a")
        assert is_http_url("http://example.com")
        assert not is_http_url("ftp://example.com")
        assert not is_http_url("example.com")
        assert not is_http_url("look at https://example.com")
