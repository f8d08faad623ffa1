"""
Markdown tokenizer for the Docs converter.

Wraps markdown-it-py configured as CommonMark plus the GFM pieces the
converter understands (tables, strikethrough, bare-URL linkify). Raw HTML is
disabled so `<b>` and friends reach the converter as plain text.

Example:
    >>> parsed = parse_markdown("# Title\n\nSee https://example.com")
    >>> parsed.metadata.heading_count
    1
    >>> parsed.metadata.link_count
    1

See Also:
    - `gdocs/markdown_converter.py` which walks the token stream
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

if TYPE_CHECKING:
    from markdown_it.token import Token

logger = logging.getLogger(__name__)

_HEADING_TAG_RE = re.compile(r"^h(\d)$")


@dataclass
class MarkdownMetadata:
    """Element counts for a markdown document, reported in debug logs."""

    estimated_length: int = 0
    heading_count: int = 0
    paragraph_count: int = 0
    list_count: int = 0
    table_count: int = 0
    link_count: int = 0


@dataclass
class ParsedMarkdown:
    tokens: list[Token] = field(default_factory=list)
    metadata: MarkdownMetadata = field(default_factory=MarkdownMetadata)


def create_markdown_parser() -> MarkdownIt:
    """Build a parser instance. Instances hold no per-document state and can be reused."""
    md = MarkdownIt(
        "commonmark",
        {"html": False, "linkify": True, "typographer": False, "breaks": False},
    )
    return md.enable(["table", "strikethrough", "linkify"])


def _count_links(tokens: list[Token]) -> int:
    count = 0
    for token in tokens:
        if token.type == "link_open":
            count += 1
        if token.children:
            count += _count_links(token.children)
    return count


def parse_markdown(markdown: str, parser: MarkdownIt | None = None) -> ParsedMarkdown:
    """
    Tokenize markdown and collect element counts.

    Args:
        markdown: Source text.
        parser: Optional pre-built parser; a fresh one is created otherwise.

    Returns:
        ParsedMarkdown with the flat block-level token list (inline tokens keep
        their children) and a MarkdownMetadata summary.
    """
    md = parser or create_markdown_parser()
    tokens = md.parse(markdown)

    metadata = MarkdownMetadata(estimated_length=len(markdown))
    for token in tokens:
        if token.type == "heading_open":
            metadata.heading_count += 1
        elif token.type == "paragraph_open":
            metadata.paragraph_count += 1
        elif token.type in ("bullet_list_open", "ordered_list_open"):
            metadata.list_count += 1
        elif token.type == "table_open":
            metadata.table_count += 1
    metadata.link_count = _count_links(tokens)

    logger.debug(f"Parsed markdown into {len(tokens)} block tokens: {metadata}")
    return ParsedMarkdown(tokens=tokens, metadata=metadata)


def get_link_href(token: Token) -> str | None:
    """Return the href of a link_open token, or None for anything else."""
    if token.type != "link_open":
        return None
    href = token.attrGet("href")
    return str(href) if href else None


def get_heading_level(token: Token) -> int | None:
    """Return 1-6 for a heading token's tag (h1..h6), else None."""
    match = _HEADING_TAG_RE.match(token.tag or "")
    if not match:
        return None
    return int(match.group(1))
