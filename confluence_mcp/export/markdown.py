"""Confluence storage format to Markdown.

Only the common elements are translated: headings, paragraphs, line breaks,
emphasis, inline code, preformatted blocks, links, lists and images. Any
other element (macros, tables, layouts) contributes its text content.
"""

import posixpath
import re
from urllib.parse import unquote
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4 import Comment
from bs4 import NavigableString
from bs4 import Tag

EMPTY_BODY_PLACEHOLDER = "No content available"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9 ]")
_WHITESPACE = re.compile(r"\s+")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")

_HEADINGS = {f"h{level}": level for level in range(1, 7)}
_BOLD = ("strong", "b")
_ITALIC = ("em", "i")


def sanitize_filename(title: str) -> str:
    """Make a page title safe to use as a file name stem.

    >>> sanitize_filename("Release Notes: v2.0")
    'Release_Notes__v2_0'
    """
    return _WHITESPACE.sub("_", _UNSAFE_FILENAME_CHARS.sub("_", title))


def attachment_filename(name: str, fallback: str) -> str:
    """Reduce an attachment title to a bare file name inside the attachments folder."""
    base = posixpath.basename(name.replace("\\", "/")).strip()
    if base in ("", ".", ".."):
        return fallback
    return base


class _MarkdownRenderer:
    def __init__(self, attachment_names: set[str], attachment_prefix: str):
        self.attachment_names = attachment_names
        self.attachment_prefix = attachment_prefix

    def image(self, name: str) -> str:
        return f"![{name}]({self.attachment_prefix}/{name})"

    def children(self, tag: Tag) -> str:
        return "".join(self.render(child) for child in tag.children)

    def render(self, node) -> str:
        if isinstance(node, Comment):
            return ""
        if isinstance(node, NavigableString):
            return _WHITESPACE.sub(" ", str(node))
        if not isinstance(node, Tag):
            return ""

        name = node.name
        if name in _HEADINGS:
            return f"\n\n{'#' * _HEADINGS[name]} {self.children(node).strip()}\n\n"
        if name == "p":
            return f"\n\n{self.children(node).strip()}\n\n"
        if name == "br":
            return "\n"
        if name == "hr":
            return "\n\n---\n\n"
        if name in _BOLD:
            return self._wrap(node, "**")
        if name in _ITALIC:
            return self._wrap(node, "*")
        if name == "code":
            return f"`{node.get_text()}`"
        if name == "pre":
            return f"\n\n```\n{node.get_text().strip(chr(10))}\n```\n\n"
        if name == "a":
            text = self.children(node).strip()
            href = node.get("href")
            return f"[{text or href}]({href})" if href else text
        if name in ("ul", "ol"):
            return self._list(node, ordered=name == "ol")
        if name == "ac:image":
            return self._confluence_image(node)
        if name == "img":
            return self._html_image(node)
        if name == "ac:plain-text-body":
            # code macro body
            return f"\n\n```\n{node.get_text().strip(chr(10))}\n```\n\n"
        return self.children(node)

    def _wrap(self, node: Tag, marker: str) -> str:
        text = self.children(node).strip()
        return f"{marker}{text}{marker}" if text else ""

    def _list(self, node: Tag, ordered: bool) -> str:
        lines = []
        items = [child for child in node.children if isinstance(child, Tag) and child.name == "li"]
        for index, item in enumerate(items, start=1):
            bullet = f"{index}." if ordered else "-"
            text = _EXCESS_BLANK_LINES.sub("\n\n", self.children(item).strip())
            lines.append(f"{bullet} {text.replace(chr(10), chr(10) + '  ')}")
        return "\n\n" + "\n".join(lines) + "\n\n"

    def _confluence_image(self, node: Tag) -> str:
        attachment = node.find("ri:attachment")
        if attachment is not None and attachment.get("ri:filename"):
            return self.image(attachment_filename(attachment["ri:filename"], "image"))
        url = node.find("ri:url")
        if url is not None and url.get("ri:value"):
            return f"![]({url['ri:value']})"
        return ""

    def _html_image(self, node: Tag) -> str:
        src = node.get("src") or ""
        name = unquote(posixpath.basename(urlparse(src).path))
        if name and name in self.attachment_names:
            return self.image(name)
        alt = node.get("alt") or ""
        return f"![{alt}]({src})" if src else ""


def html_to_markdown(
    html: str,
    attachment_names: set[str] | None = None,
    attachment_prefix: str = "attachments",
) -> str:
    """Convert a storage-format body to Markdown.

    Args:
        html: Page body in Confluence storage format
        attachment_names: File names saved next to the Markdown; ``<img>``
            tags pointing at one of them are rewritten to the local copy
        attachment_prefix: Folder the images are linked from
    """
    if not html or not html.strip():
        return EMPTY_BODY_PLACEHOLDER

    soup = BeautifulSoup(html, "html.parser")
    renderer = _MarkdownRenderer(attachment_names or set(), attachment_prefix)
    text = renderer.children(soup)
    lines = [line.rstrip() for line in text.split("\n")]
    return _EXCESS_BLANK_LINES.sub("\n\n", "\n".join(lines)).strip() or EMPTY_BODY_PLACEHOLDER
