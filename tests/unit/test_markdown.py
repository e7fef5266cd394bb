"""Unit tests for storage format to Markdown conversion."""

import pytest

from confluence_mcp.export.markdown import EMPTY_BODY_PLACEHOLDER
from confluence_mcp.export.markdown import attachment_filename
from confluence_mcp.export.markdown import html_to_markdown
from confluence_mcp.export.markdown import sanitize_filename


class TestHtmlToMarkdown:
    def test_heading_and_paragraph(self):
        assert html_to_markdown("<h1>Title</h1><p>Hello <strong>world</strong></p>") == "# Title\n\nHello **world**"

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, level):
        assert html_to_markdown(f"<h{level}>Head</h{level}>") == f"{'#' * level} Head"

    def test_line_break(self):
        assert html_to_markdown("<p>one<br/>two</p>") == "one\ntwo"

    def test_inline_formatting(self):
        html = "<p><b>bold</b>, <em>em</em>, <i>it</i> and <code>make test</code></p>"

        assert html_to_markdown(html) == "**bold**, *em*, *it* and `make test`"

    def test_link(self):
        assert html_to_markdown('<p><a href="https://example.test">site</a></p>') == "[site](https://example.test)"

    def test_lists(self):
        assert html_to_markdown("<ul><li>a</li><li>b</li></ul>") == "- a\n- b"
        assert html_to_markdown("<ol><li>a</li><li>b</li></ol>") == "1. a\n2. b"

    def test_preformatted(self):
        assert html_to_markdown("<pre>line1\nline2</pre>") == "```\nline1\nline2\n```"

    def test_confluence_attachment_image(self):
        html = '<p><ac:image ac:height="250"><ri:attachment ri:filename="diagram.png" /></ac:image></p>'

        assert html_to_markdown(html) == "![diagram.png](attachments/diagram.png)"

    def test_img_pointing_at_saved_attachment(self):
        html = '<p><img src="/download/attachments/42/photo.jpg?version=1" /></p>'

        assert html_to_markdown(html, {"photo.jpg"}) == "![photo.jpg](attachments/photo.jpg)"

    def test_external_img_kept(self):
        html = '<img src="https://cdn.example.test/logo.png" alt="Logo" />'

        assert html_to_markdown(html, {"photo.jpg"}) == "![Logo](https://cdn.example.test/logo.png)"

    def test_custom_attachment_prefix(self):
        html = '<ac:image><ri:attachment ri:filename="a.png" /></ac:image>'

        assert html_to_markdown(html, attachment_prefix="../assets") == "![a.png](../assets/a.png)"

    def test_unknown_elements_keep_text(self):
        assert html_to_markdown("<table><tr><td>cell</td></tr></table>") == "cell"

    def test_entities_decoded(self):
        assert html_to_markdown("<p>a &amp; b</p>") == "a & b"

    @pytest.mark.parametrize("html", ["", "   ", "\n"])
    def test_empty_body(self, html):
        assert html_to_markdown(html) == EMPTY_BODY_PLACEHOLDER


class TestFilenames:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Release Notes: v2.0", "Release_Notes__v2_0"),
            ("Simple", "Simple"),
            ("a/b\\c", "a_b_c"),
            ("  spaced   out ", "_spaced_out_"),
        ],
    )
    def test_sanitize_filename(self, title, expected):
        assert sanitize_filename(title) == expected

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("diagram.png", "diagram.png"),
            ("../../etc/passwd", "passwd"),
            ("folder\\file.png", "file.png"),
            ("..", "attachment_1"),
            ("", "attachment_1"),
        ],
    )
    def test_attachment_filename(self, name, expected):
        assert attachment_filename(name, "attachment_1") == expected
