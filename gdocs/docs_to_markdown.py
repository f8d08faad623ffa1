"""
Google Docs JSON to Markdown

Renders the structural elements of a Docs document (paragraphs, lists,
tables, section breaks) back to markdown. This is a best-effort reading
aid: it walks the document once and never round-trips exactly.
"""

import logging
from typing import Any

from core.errors import ValidationError
from gdocs.docs_helpers import find_tab_by_id

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT_MESSAGE = "Document appears to be empty."

NUMBERED_GLYPH_TYPES = {"DECIMAL", "ZERO_DECIMAL", "ALPHA", "UPPER_ALPHA", "ROMAN", "UPPER_ROMAN"}
MONOSPACE_FONTS = {"Roboto Mono", "Courier New", "Consolas", "Source Code Pro"}


def _resolve_body_and_lists(document: dict[str, Any], tab_id: str | None) -> tuple[list, dict]:
    if tab_id:
        tab = find_tab_by_id(document, tab_id)
        if tab is None:
            raise ValidationError(f"Tab with ID '{tab_id}' not found in document")
        doc_tab = tab.get("documentTab", {})
        return doc_tab.get("body", {}).get("content", []), doc_tab.get("lists", {})

    if "body" in document:
        return document["body"].get("content", []), document.get("lists", {})

    tabs = document.get("tabs", [])
    if tabs:
        doc_tab = tabs[0].get("documentTab", {})
        return doc_tab.get("body", {}).get("content", []), doc_tab.get("lists", {})
    return [], {}


def convert_doc_to_markdown(document: dict[str, Any], tab_id: str | None = None) -> str:
    """
    Convert a Docs API document resource to markdown.

    Args:
        document: Result of documents().get(); fetch with includeTabsContent=True
            when `tab_id` is given.
        tab_id: Optional tab to render instead of the first one.

    Returns:
        Markdown text, or "Document appears to be empty." for an empty body.
    """
    content, lists = _resolve_body_and_lists(document, tab_id)
    if not content:
        return EMPTY_DOCUMENT_MESSAGE

    parts: list[str] = []
    for position, element in enumerate(content):
        if "paragraph" in element:
            parts.append(_paragraph_to_markdown(element["paragraph"], lists))
        elif "table" in element:
            parts.append(_table_to_markdown(element["table"]))
        elif "sectionBreak" in element and position > 0:
            # Every body opens with a section break; only later ones are real breaks
            parts.append("\n---\n\n")

    markdown = "".join(parts).strip()
    return markdown or EMPTY_DOCUMENT_MESSAGE


def _heading_level(named_style: str | None) -> int | None:
    if not named_style:
        return None
    if named_style.startswith("HEADING_"):
        try:
            return min(int(named_style[len("HEADING_") :]), 6)
        except ValueError:
            return None
    if named_style == "TITLE":
        return 1
    if named_style == "SUBTITLE":
        return 2
    return None


def _list_marker(bullet: dict[str, Any], lists: dict[str, Any]) -> str:
    level = bullet.get("nestingLevel", 0)
    nesting_levels = lists.get(bullet.get("listId"), {}).get("listProperties", {}).get("nestingLevels", [])
    glyph_type = nesting_levels[level].get("glyphType") if level < len(nesting_levels) else None
    marker = "1." if glyph_type in NUMBERED_GLYPH_TYPES else "-"
    return f"{'  ' * level}{marker} "


def _paragraph_to_markdown(paragraph: dict[str, Any], lists: dict[str, Any]) -> str:
    text = "".join(
        _text_run_to_markdown(element["textRun"]) for element in paragraph.get("elements", []) if "textRun" in element
    ).strip()

    if not text:
        return "\n"

    level = _heading_level(paragraph.get("paragraphStyle", {}).get("namedStyleType"))
    if level:
        return f"{'#' * level} {text}\n\n"
    if "bullet" in paragraph:
        return f"{_list_marker(paragraph['bullet'], lists)}{text}\n"
    return f"{text}\n\n"


def _text_run_to_markdown(text_run: dict[str, Any]) -> str:
    content = text_run.get("content", "")
    style = text_run.get("textStyle", {})
    core = content.strip()
    if not core or not style:
        return content

    # Markers wrap the visible text only; surrounding whitespace and newlines stay outside
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()) :]

    font = style.get("weightedFontFamily", {}).get("fontFamily")
    if font in MONOSPACE_FONTS:
        core = f"`{core}`"
    elif style.get("bold") and style.get("italic"):
        core = f"***{core}***"
    elif style.get("bold"):
        core = f"**{core}**"
    elif style.get("italic"):
        core = f"*{core}*"

    if style.get("underline") and not style.get("link"):
        core = f"<u>{core}</u>"
    if style.get("strikethrough"):
        core = f"~~{core}~~"
    url = style.get("link", {}).get("url")
    if url:
        core = f"[{core}]({url})"

    return f"{leading}{core}{trailing}"


def _cell_text(cell: dict[str, Any]) -> str:
    pieces = []
    for element in cell.get("content", []):
        for paragraph_element in element.get("paragraph", {}).get("elements", []):
            run_text = paragraph_element.get("textRun", {}).get("content", "")
            if run_text:
                pieces.append(run_text.replace("\n", " ").strip())
    return " ".join(piece for piece in pieces if piece).replace("|", "\\|")


def _table_to_markdown(table: dict[str, Any]) -> str:
    rows = table.get("tableRows", [])
    if not rows:
        return ""

    lines = []
    for row_number, row in enumerate(rows):
        cells = [_cell_text(cell) for cell in row.get("tableCells", [])]
        lines.append("| " + " | ".join(cells) + " |")
        if row_number == 0:
            lines.append("|" + " --- |" * len(cells))
    return "\n" + "\n".join(lines) + "\n\n"
