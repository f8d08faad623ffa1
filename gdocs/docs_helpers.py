"""
Google Docs Helper Functions

Request builders for the Docs `batchUpdate` API plus a few helpers for reading
document structure (tabs, body content, end index). Every builder accepts an
optional `tab_id`; when given it is attached to the request's location or
range so the edit targets that tab instead of the first one.
"""

import logging
from typing import Any

from core.errors import ValidationError

logger = logging.getLogger(__name__)

BULLET_PRESETS: dict[str, str] = {
    "UNORDERED": "BULLET_DISC_CIRCLE_SQUARE",
    "ORDERED": "NUMBERED_DECIMAL_ALPHA_ROMAN",
    "CHECKBOX": "BULLET_CHECKBOX",
}

# Horizontal rules are rendered as an empty paragraph with a bottom border
HR_BORDER_COLOR = {"red": 0.75, "green": 0.75, "blue": 0.75}
HR_BORDER_WIDTH_PT = 1
HR_PADDING_BELOW_PT = 6


def _normalize_color(color: str | None, param_name: str) -> dict[str, float] | None:
    """
    Convert a "#RRGGBB" string to the Docs API rgbColor shape.

    Raises:
        ValueError: If the value is not a 6-digit hex string with a leading '#'.
    """
    if color is None:
        return None

    if not isinstance(color, str) or not color.startswith("#") or len(color) != 7:
        raise ValueError(f"{param_name} must be a hex string like '#RRGGBB', got {color!r}")

    try:
        red = int(color[1:3], 16)
        green = int(color[3:5], 16)
        blue = int(color[5:7], 16)
    except ValueError as e:
        raise ValueError(f"{param_name} must be a hex string like '#RRGGBB', got {color!r}") from e

    return {"red": red / 255, "green": green / 255, "blue": blue / 255}


def _with_tab(payload: dict[str, Any], tab_id: str | None) -> dict[str, Any]:
    if tab_id:
        payload["tabId"] = tab_id
    return payload


def _range(start_index: int, end_index: int, tab_id: str | None = None) -> dict[str, Any]:
    return _with_tab({"startIndex": start_index, "endIndex": end_index}, tab_id)


def build_text_style(
    bold: bool = None,
    italic: bool = None,
    strikethrough: bool = None,
    font_family: str = None,
    text_color: str = None,
    background_color: str = None,
    link_url: str = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Build text style object for Google Docs API requests.

    Only arguments that are not None end up in the style; `fields` lists them
    in a fixed order so the generated field masks are stable.

    Returns:
        Tuple of (text_style_dict, list_of_field_names)
    """
    text_style: dict[str, Any] = {}
    fields: list[str] = []

    if bold is not None:
        text_style["bold"] = bold
        fields.append("bold")

    if italic is not None:
        text_style["italic"] = italic
        fields.append("italic")

    if strikethrough is not None:
        text_style["strikethrough"] = strikethrough
        fields.append("strikethrough")

    if font_family is not None:
        text_style["weightedFontFamily"] = {"fontFamily": font_family}
        fields.append("weightedFontFamily")

    if text_color is not None:
        text_style["foregroundColor"] = {"color": {"rgbColor": _normalize_color(text_color, "text_color")}}
        fields.append("foregroundColor")

    if background_color is not None:
        text_style["backgroundColor"] = {
            "color": {"rgbColor": _normalize_color(background_color, "background_color")}
        }
        fields.append("backgroundColor")

    if link_url is not None:
        text_style["link"] = {"url": link_url}
        fields.append("link")

    return text_style, fields


def create_insert_text_request(index: int, text: str, tab_id: str | None = None) -> dict[str, Any]:
    """Create an insertText request at `index`."""
    return {"insertText": {"location": _with_tab({"index": index}, tab_id), "text": text}}


def create_delete_range_request(start_index: int, end_index: int, tab_id: str | None = None) -> dict[str, Any]:
    """Create a deleteContentRange request for [start_index, end_index)."""
    return {"deleteContentRange": {"range": _range(start_index, end_index, tab_id)}}


def create_format_text_request(
    start_index: int,
    end_index: int,
    bold: bool = None,
    italic: bool = None,
    strikethrough: bool = None,
    font_family: str = None,
    text_color: str = None,
    background_color: str = None,
    link_url: str = None,
    tab_id: str | None = None,
) -> dict[str, Any] | None:
    """
    Create an updateTextStyle request.

    Returns:
        The request, or None when no style field was provided.
    """
    text_style, fields = build_text_style(
        bold=bold,
        italic=italic,
        strikethrough=strikethrough,
        font_family=font_family,
        text_color=text_color,
        background_color=background_color,
        link_url=link_url,
    )
    if not text_style:
        return None

    return {
        "updateTextStyle": {
            "range": _range(start_index, end_index, tab_id),
            "textStyle": text_style,
            "fields": ",".join(fields),
        }
    }


def create_paragraph_style_request(
    start_index: int, end_index: int, named_style_type: str, tab_id: str | None = None
) -> dict[str, Any]:
    """Create an updateParagraphStyle request that applies a named style (e.g. HEADING_2)."""
    return {
        "updateParagraphStyle": {
            "range": _range(start_index, end_index, tab_id),
            "paragraphStyle": {"namedStyleType": named_style_type},
            "fields": "namedStyleType",
        }
    }


def create_paragraph_border_request(start_index: int, end_index: int, tab_id: str | None = None) -> dict[str, Any]:
    """Create the bottom-border paragraph style used to draw a horizontal rule."""
    return {
        "updateParagraphStyle": {
            "range": _range(start_index, end_index, tab_id),
            "paragraphStyle": {
                "borderBottom": {
                    "color": {"color": {"rgbColor": dict(HR_BORDER_COLOR)}},
                    "width": {"magnitude": HR_BORDER_WIDTH_PT, "unit": "PT"},
                    "padding": {"magnitude": HR_PADDING_BELOW_PT, "unit": "PT"},
                    "dashStyle": "SOLID",
                }
            },
            "fields": "borderBottom",
        }
    }


def create_bullet_list_request(
    start_index: int, end_index: int, list_type: str = "UNORDERED", tab_id: str | None = None
) -> dict[str, Any]:
    """
    Create a createParagraphBullets request.

    Args:
        list_type: "UNORDERED", "ORDERED", "CHECKBOX", or a raw Docs bullet preset name.
    """
    bullet_preset = BULLET_PRESETS.get(list_type, list_type)
    return {
        "createParagraphBullets": {
            "range": _range(start_index, end_index, tab_id),
            "bulletPreset": bullet_preset,
        }
    }


# =============================================================================
# Document structure helpers
# =============================================================================


def find_tab_by_id(document: dict[str, Any], tab_id: str) -> dict[str, Any] | None:
    """Search a document's tabs (including nested child tabs) for `tab_id`."""

    def _search(tabs: list[dict[str, Any]]) -> dict[str, Any] | None:
        for tab in tabs:
            if tab.get("tabProperties", {}).get("tabId") == tab_id:
                return tab
            found = _search(tab.get("childTabs", []))
            if found is not None:
                return found
        return None

    return _search(document.get("tabs", []))


def iter_tabs(document: dict[str, Any]):
    """Yield (tab, depth) for every tab, parents before children."""

    def _walk(tabs, depth):
        for tab in tabs:
            yield tab, depth
            yield from _walk(tab.get("childTabs", []), depth + 1)

    yield from _walk(document.get("tabs", []), 0)


def get_body_content(document: dict[str, Any], tab_id: str | None = None) -> list[dict[str, Any]]:
    """
    Return the structural elements of the document body (or of a specific tab).

    Documents fetched with includeTabsContent=True carry their body under
    tabs[*].documentTab; older responses carry it at the top level.

    Raises:
        ValidationError: If the tab does not exist or the body has no content.
    """
    if tab_id:
        tab = find_tab_by_id(document, tab_id)
        if tab is None:
            raise ValidationError(f"Tab with ID '{tab_id}' not found in document")
        body = tab.get("documentTab", {}).get("body", {})
        where = f"tab '{tab_id}'"
    elif "body" in document:
        body = document["body"]
        where = "document"
    else:
        tabs = document.get("tabs", [])
        body = tabs[0].get("documentTab", {}).get("body", {}) if tabs else {}
        where = "document"

    content = body.get("content")
    if not content:
        raise ValidationError(f"No content found in {where}")
    return content


def get_body_end_index(content: list[dict[str, Any]]) -> int:
    """Index just before the body's final newline, where appended text goes."""
    return content[-1].get("endIndex", 2) - 1
