"""
Google Docs Reading Tools

This module provides MCP tools for reading Google Docs back as markdown and
for discovering a document's tabs.
"""

import logging
from typing import Any

from auth.service_decorator import require_google_service
from core.server import server
from core.utils import handle_http_errors, validate_document_id
from gdocs.docs_helpers import iter_tabs
from gdocs.docs_to_markdown import convert_doc_to_markdown
from gdocs.writing import fetch_document

logger = logging.getLogger(__name__)


def format_tab_listing(document: dict[str, Any]) -> str:
    """Render a nested bullet listing of tab titles and IDs."""
    lines = []
    for tab, depth in iter_tabs(document):
        properties = tab.get("tabProperties", {})
        title = properties.get("title", "Untitled tab")
        lines.append(f"{'  ' * depth}- {title} (ID: {properties.get('tabId', 'unknown')})")
    return "\n".join(lines)


@server.tool()
@handle_http_errors("get_doc_as_markdown", is_read_only=True, service_type="docs")
@require_google_service("docs", "docs_read")
async def get_doc_as_markdown(
    service: Any,
    user_google_email: str,
    document_id: str,
    tab_id: str | None = None,
) -> str:
    """
    Retrieves a Google Doc's content rendered as markdown.

    Args:
        user_google_email: User's Google email address
        document_id: ID of the document to read
        tab_id: Optional tab to read instead of the first one

    Returns:
        str: Markdown rendering of the document body.
    """
    logger.info(f"[get_doc_as_markdown] Doc={document_id}, tab={tab_id}")
    document_id = validate_document_id(document_id)

    document = await fetch_document(service, document_id, include_tabs=bool(tab_id))
    markdown = convert_doc_to_markdown(document, tab_id=tab_id)
    title = document.get("title", "Untitled")
    return f"# {title}\n\n{markdown}" if markdown else f"# {title}"


@server.tool()
@handle_http_errors("list_doc_tabs", is_read_only=True, service_type="docs")
@require_google_service("docs", "docs_read")
async def list_doc_tabs(
    service: Any,
    user_google_email: str,
    document_id: str,
) -> str:
    """
    Lists the tabs of a Google Doc with their IDs, for use as `tab_id` in other tools.

    Returns:
        str: Indented list of tab titles and IDs.
    """
    logger.info(f"[list_doc_tabs] Doc={document_id}")
    document_id = validate_document_id(document_id)

    document = await fetch_document(service, document_id, include_tabs=True)
    listing = format_tab_listing(document)
    if not listing:
        return f"Document {document_id} has no tabs."
    return f"Tabs in document {document_id}:\n{listing}"
