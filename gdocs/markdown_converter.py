"""
Markdown to Google Docs Converter

This module provides the `MarkdownToDocsConverter` class that translates Markdown
into an ordered list of Google Docs API `batchUpdate` requests: headings,
paragraphs, bold/italic/strikethrough, inline code and fenced code blocks,
links, nested bullet/numbered/checkbox lists and horizontal rules.

The converter follows an index-tracker approach. Text is emitted as a series
of insertText requests, each starting exactly where the previous one ended, so
every later style request can address its range by absolute index. Styles
are collected while walking the tokens and emitted only after all text has
been inserted:

1. every insertText, in emission order
2. character styles, heading paragraph styles, horizontal-rule borders
3. createParagraphBullets, from the last list item to the first

Bullets go last and bottom-up because createParagraphBullets strips the
leading tab characters that encode nesting, which shifts every index after
the affected paragraph.

Example:
    >>> converter = MarkdownToDocsConverter()
    >>> requests = converter.convert("# Hello World\n\nThis is **bold** text.")
    >>> [next(iter(r)) for r in requests]
    ['insertText', 'insertText', 'insertText', 'insertText', 'insertText', 'insertText', 'updateTextStyle', 'updateParagraphStyle']

See Also:
    - `gdocs/markdown_parser.py` for tokenizer configuration
    - `gdocs/writing.py` for tool integration (`insert_markdown`, `replace_doc_with_markdown`)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from core.errors import MarkdownConversionError, MarkdownStructureError
from gdocs.docs_helpers import (
    create_bullet_list_request,
    create_format_text_request,
    create_insert_text_request,
    create_paragraph_border_request,
    create_paragraph_style_request,
)
from gdocs.markdown_parser import create_markdown_parser, get_heading_level, get_link_href, parse_markdown

if TYPE_CHECKING:
    from markdown_it.token import Token

logger = logging.getLogger(__name__)

# Bullet list presets for the Google Docs API
BULLET_PRESET_UNORDERED = "BULLET_DISC_CIRCLE_SQUARE"
BULLET_PRESET_ORDERED = "NUMBERED_DECIMAL_ALPHA_ROMAN"
BULLET_PRESET_CHECKBOX = "BULLET_CHECKBOX"

# Inline code and code block styling
CODE_FONT_FAMILY = "Roboto Mono"
CODE_TEXT_COLOR = "#188038"
CODE_BACKGROUND_COLOR = "#F1F3F4"

# "[ ] " / "[x] " / "[X] " at the start of a list item's first text
TASK_PREFIX_RE = re.compile(r"^\[( |x|X)\]\s+")

# Table tokens are skipped wholesale, including the cell text between them
TABLE_OPEN = "table_open"
TABLE_CLOSE = "table_close"

# Inline markers that push a boolean formatting fragment
INLINE_FORMAT_TOKENS: dict[str, str] = {
    "strong_open": "bold",
    "strong_close": "bold",
    "em_open": "italic",
    "em_close": "italic",
    "s_open": "strikethrough",
    "s_close": "strikethrough",
}


@dataclass
class FormattingState:
    """Inline formatting in effect for a run of text."""

    bold: bool | None = None
    italic: bool | None = None
    strikethrough: bool | None = None
    code: bool | None = None
    link: str | None = None

    def has_formatting(self) -> bool:
        return bool(self.bold or self.italic or self.strikethrough or self.code or self.link)


@dataclass
class TextRange:
    start: int
    end: int
    formatting: FormattingState


@dataclass
class ParagraphRange:
    start: int
    end: int
    named_style_type: str


@dataclass
class ListInfo:
    list_type: str  # "bullet" or "ordered"
    level: int


@dataclass
class PendingListItem:
    """A list item whose bullet is created once all text has been inserted."""

    start: int
    level: int
    bullet_preset: str
    end: int | None = None
    task_prefix_processed: bool = False


@dataclass
class ConversionContext:
    """
    Mutable state for a single conversion pass.

    `current_index` always equals the initial start index plus the total
    length of every text inserted so far.
    """

    current_index: int = 1
    tab_id: str | None = None
    insert_requests: list[dict[str, Any]] = field(default_factory=list)
    formatting_stack: list[dict[str, Any]] = field(default_factory=list)
    text_ranges: list[TextRange] = field(default_factory=list)
    list_stack: list[ListInfo] = field(default_factory=list)
    pending_list_items: list[PendingListItem] = field(default_factory=list)
    open_list_items: list[int] = field(default_factory=list)
    paragraph_ranges: list[ParagraphRange] = field(default_factory=list)
    hr_ranges: list[tuple[int, int]] = field(default_factory=list)
    current_paragraph_start: int | None = None
    current_heading_level: int | None = None
    table_depth: int = 0


def merge_formatting(stack: list[dict[str, Any]]) -> FormattingState:
    """Fold formatting fragments oldest to newest; later fragments win per field."""
    merged = FormattingState()
    for fragment in stack:
        for key, value in fragment.items():
            setattr(merged, key, value)
    return merged


class MarkdownToDocsConverter:
    """
    Converts Markdown text into Google Docs API batchUpdate requests.

    The converter only holds the markdown-it parser; all per-document state
    lives in a `ConversionContext` created by each `convert()` call, so a
    single instance can be shared.

    Attributes:
        md: The markdown-it parser instance.
    """

    def __init__(self) -> None:
        self.md = create_markdown_parser()

    def convert(self, markdown_text: str, start_index: int = 1, tab_id: str | None = None) -> list[dict[str, Any]]:
        """
        Convert markdown into an ordered list of batchUpdate requests.

        Args:
            markdown_text: Markdown source.
            start_index: Document index where the first character is inserted.
            tab_id: Optional tab to target; copied onto every location and range.

        Returns:
            Insert requests followed by formatting requests. Empty or
            whitespace-only input gives an empty list.

        Raises:
            MarkdownStructureError: A list item appeared outside any list.
            MarkdownConversionError: Any other failure during conversion.
        """
        if not markdown_text or not markdown_text.strip():
            return []

        try:
            parsed = parse_markdown(markdown_text, self.md)
            ctx = ConversionContext(current_index=start_index, tab_id=tab_id)
            self._process_tokens(parsed.tokens, ctx)

            if ctx.formatting_stack:
                logger.warning(f"{len(ctx.formatting_stack)} formatting fragment(s) left open at end of markdown")

            format_requests = self._finalize_formatting(ctx)
            logger.debug(
                f"Converted {len(markdown_text)} chars of markdown into {len(ctx.insert_requests)} inserts "
                f"and {len(format_requests)} formatting requests"
            )
            return ctx.insert_requests + format_requests
        except MarkdownConversionError:
            raise
        except Exception as e:
            raise MarkdownConversionError(f"Failed to convert markdown: {e}") from e

    # ------------------------------------------------------------------
    # Token walking
    # ------------------------------------------------------------------

    def _process_tokens(self, tokens: list[Token], ctx: ConversionContext) -> None:
        for token in tokens:
            self._handle_token(token, ctx)

    def _handle_token(self, token: Token, ctx: ConversionContext) -> None:
        """Dispatch one token to its handler."""
        token_type = token.type
        logger.debug(f"Token: {token_type} (tag={token.tag!r}, index={ctx.current_index})")

        if token_type == TABLE_OPEN:
            ctx.table_depth += 1
            return
        if token_type == TABLE_CLOSE:
            ctx.table_depth = max(0, ctx.table_depth - 1)
            return
        if ctx.table_depth > 0:
            return

        if token_type == "heading_open":
            ctx.current_heading_level = get_heading_level(token)
            ctx.current_paragraph_start = ctx.current_index
        elif token_type == "heading_close":
            self._handle_heading_close(ctx)
        elif token_type == "paragraph_open":
            if not ctx.list_stack:
                ctx.current_paragraph_start = ctx.current_index
        elif token_type == "paragraph_close":
            self._handle_paragraph_close(ctx)
        elif token_type in ("bullet_list_open", "ordered_list_open"):
            list_type = "ordered" if token_type == "ordered_list_open" else "bullet"
            ctx.list_stack.append(ListInfo(list_type=list_type, level=len(ctx.list_stack)))
        elif token_type in ("bullet_list_close", "ordered_list_close"):
            if ctx.list_stack:
                ctx.list_stack.pop()
        elif token_type == "list_item_open":
            self._handle_list_item_open(ctx)
        elif token_type == "list_item_close":
            self._handle_list_item_close(ctx)
        elif token_type == "inline":
            self._process_tokens(token.children or [], ctx)
        elif token_type == "text":
            self._handle_text(token.content, ctx)
        elif token_type == "code_inline":
            ctx.formatting_stack.append({"code": True})
            self._handle_text(token.content, ctx)
            self._pop_formatting("code", ctx)
        elif token_type in ("fence", "code_block"):
            self._handle_code_block(token.content, ctx)
        elif token_type == "hr":
            self._handle_horizontal_rule(ctx)
        elif token_type in INLINE_FORMAT_TOKENS:
            key = INLINE_FORMAT_TOKENS[token_type]
            if token_type.endswith("_open"):
                ctx.formatting_stack.append({key: True})
            else:
                self._pop_formatting(key, ctx)
        elif token_type == "link_open":
            href = get_link_href(token)
            if href:
                ctx.formatting_stack.append({"link": href})
        elif token_type == "link_close":
            self._pop_formatting("link", ctx)
        elif token_type == "softbreak":
            self._insert_text(" ", ctx)
        elif token_type == "hardbreak":
            self._insert_text("\n", ctx)
        else:
            # blockquote_open/close, image and anything unrecognized carry no edits
            logger.debug(f"Skipping unsupported token: {token_type}")

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------

    def _handle_heading_close(self, ctx: ConversionContext) -> None:
        if ctx.current_heading_level is None or ctx.current_paragraph_start is None:
            logger.warning("heading_close without matching heading_open")
            return

        ctx.paragraph_ranges.append(
            ParagraphRange(
                start=ctx.current_paragraph_start,
                end=ctx.current_index,
                named_style_type=f"HEADING_{ctx.current_heading_level}",
            )
        )
        self._insert_text("\n", ctx)
        ctx.current_heading_level = None
        ctx.current_paragraph_start = None

    def _handle_paragraph_close(self, ctx: ConversionContext) -> None:
        if ctx.list_stack:
            if not self._last_insert_ends_with("\n", ctx):
                self._insert_text("\n", ctx)
        else:
            self._insert_text("\n\n", ctx)

        item = self._current_list_item(ctx)
        if item is not None:
            end = self._list_item_end(ctx)
            if end > item.start:
                item.end = end
        ctx.current_paragraph_start = None

    def _handle_list_item_open(self, ctx: ConversionContext) -> None:
        if not ctx.list_stack:
            raise MarkdownStructureError("List item found outside of a list")

        current_list = ctx.list_stack[-1]
        item_start = ctx.current_index
        # Leading tabs encode nesting; createParagraphBullets converts them to levels
        if current_list.level > 0:
            self._insert_text("\t" * current_list.level, ctx)

        preset = BULLET_PRESET_ORDERED if current_list.list_type == "ordered" else BULLET_PRESET_UNORDERED
        ctx.pending_list_items.append(
            PendingListItem(start=item_start, level=current_list.level, bullet_preset=preset)
        )
        ctx.open_list_items.append(len(ctx.pending_list_items) - 1)

    def _handle_list_item_close(self, ctx: ConversionContext) -> None:
        if not ctx.open_list_items:
            return

        item = ctx.pending_list_items[ctx.open_list_items.pop()]
        if item.end is None:
            end = self._list_item_end(ctx)
            if end > item.start:
                item.end = end

        if not self._last_insert_ends_with("\n", ctx):
            self._insert_text("\n", ctx)

    def _handle_code_block(self, content: str, ctx: ConversionContext) -> None:
        if content.endswith("\n"):
            content = content[:-1]
        lines = content.split("\n") if content else [""]

        for line in lines:
            # Empty lines get a space so the code styling has something to attach to
            text = line or " "
            start = ctx.current_index
            self._insert_text(text, ctx)
            ctx.text_ranges.append(TextRange(start, ctx.current_index, FormattingState(code=True)))
            self._insert_text("\n", ctx)

        if not self._last_insert_ends_with("\n\n", ctx):
            self._insert_text("\n", ctx)

    def _handle_horizontal_rule(self, ctx: ConversionContext) -> None:
        if not self._last_insert_ends_with("\n", ctx):
            self._insert_text("\n", ctx)

        start = ctx.current_index
        self._insert_text("\n", ctx)
        ctx.hr_ranges.append((start, ctx.current_index))

    # ------------------------------------------------------------------
    # Inline handlers
    # ------------------------------------------------------------------

    def _handle_text(self, text: str, ctx: ConversionContext) -> None:
        if not text:
            return

        item = self._current_list_item(ctx)
        if item is not None and not item.task_prefix_processed:
            item.task_prefix_processed = True
            match = TASK_PREFIX_RE.match(text)
            if match:
                item.bullet_preset = BULLET_PRESET_CHECKBOX
                text = text[match.end() :]
                if not text:
                    return

        start = ctx.current_index
        self._insert_text(text, ctx)

        formatting = merge_formatting(ctx.formatting_stack)
        if formatting.has_formatting():
            ctx.text_ranges.append(TextRange(start, ctx.current_index, formatting))

    def _pop_formatting(self, key: str, ctx: ConversionContext) -> None:
        """Remove the most recent fragment that sets `key`; unmatched closes are ignored."""
        for i in range(len(ctx.formatting_stack) - 1, -1, -1):
            if ctx.formatting_stack[i].get(key) is not None:
                del ctx.formatting_stack[i]
                return
        logger.debug(f"No open '{key}' formatting to close")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _insert_text(self, text: str, ctx: ConversionContext) -> None:
        ctx.insert_requests.append(create_insert_text_request(ctx.current_index, text, ctx.tab_id))
        ctx.current_index += len(text)

    def _last_insert_ends_with(self, suffix: str, ctx: ConversionContext) -> bool:
        if not ctx.insert_requests:
            return False
        return ctx.insert_requests[-1]["insertText"]["text"].endswith(suffix)

    def _current_list_item(self, ctx: ConversionContext) -> PendingListItem | None:
        if not ctx.open_list_items:
            return None
        return ctx.pending_list_items[ctx.open_list_items[-1]]

    def _list_item_end(self, ctx: ConversionContext) -> int:
        # The item's range stops before its own paragraph terminator
        if self._last_insert_ends_with("\n", ctx):
            return ctx.current_index - 1
        return ctx.current_index

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def _finalize_formatting(self, ctx: ConversionContext) -> list[dict[str, Any]]:
        """Build style, paragraph, border and bullet requests from the collected ranges."""
        requests: list[dict[str, Any]] = []

        for text_range in ctx.text_ranges:
            fmt = text_range.formatting
            style_request = create_format_text_request(
                text_range.start,
                text_range.end,
                bold=True if fmt.bold else None,
                italic=True if fmt.italic else None,
                strikethrough=True if fmt.strikethrough else None,
                font_family=CODE_FONT_FAMILY if fmt.code else None,
                text_color=CODE_TEXT_COLOR if fmt.code else None,
                background_color=CODE_BACKGROUND_COLOR if fmt.code else None,
                tab_id=ctx.tab_id,
            )
            if style_request:
                requests.append(style_request)

            if fmt.link:
                requests.append(
                    create_format_text_request(text_range.start, text_range.end, link_url=fmt.link, tab_id=ctx.tab_id)
                )

        for paragraph in ctx.paragraph_ranges:
            requests.append(
                create_paragraph_style_request(
                    paragraph.start, paragraph.end, paragraph.named_style_type, tab_id=ctx.tab_id
                )
            )

        for start, end in ctx.hr_ranges:
            requests.append(create_paragraph_border_request(start, end, tab_id=ctx.tab_id))

        requests.extend(self._build_bullet_requests(ctx))
        return requests

    def _build_bullet_requests(self, ctx: ConversionContext) -> list[dict[str, Any]]:
        valid_items = [item for item in ctx.pending_list_items if item.end is not None and item.end > item.start]
        valid_items.sort(key=lambda item: item.start, reverse=True)
        return [
            create_bullet_list_request(item.start, item.end, item.bullet_preset, tab_id=ctx.tab_id)
            for item in valid_items
        ]


_default_converter: MarkdownToDocsConverter | None = None


def convert_markdown_to_requests(
    markdown_text: str, start_index: int = 1, tab_id: str | None = None
) -> list[dict[str, Any]]:
    """Convert markdown using a shared converter instance."""
    global _default_converter
    if _default_converter is None:
        _default_converter = MarkdownToDocsConverter()
    return _default_converter.convert(markdown_text, start_index=start_index, tab_id=tab_id)
