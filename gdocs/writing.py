"""
Google Docs Writing Tools

This module provides MCP tools that write markdown into Google Docs: creating a
document from markdown, inserting at an index, appending to the end, and
replacing the whole body (or one tab's body).
"""

import asyncio
import logging
from typing import Any

from auth.config import get_config
from auth.service_decorator import require_google_service
from core.server import server
from core.utils import handle_http_errors, validate_document_id, validate_positive_int
from gdocs.docs_helpers import (
    create_delete_range_request,
    create_insert_text_request,
    get_body_content,
    get_body_end_index,
)
from gdocs.managers import BatchOperationManager
from gdocs.markdown_converter import convert_markdown_to_requests

logger = logging.getLogger(__name__)


def _doc_link(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


def _batch_manager(service: Any) -> BatchOperationManager:
    return BatchOperationManager(service, max_batch_size=get_config().max_batch_requests)


async def fetch_document(service: Any, document_id: str, include_tabs: bool = False) -> dict[str, Any]:
    """Fetch a document; tab bodies are only returned when `include_tabs` is set."""
    return await asyncio.to_thread(
        service.documents().get(documentId=document_id, includeTabsContent=include_tabs).execute
    )


def _first_paragraph_end(content: list[dict[str, Any]]) -> int | None:
    for element in content:
        if "paragraph" in element:
            return element.get("endIndex")
    return None


async def insert_markdown_at(
    service: Any, document_id: str, markdown: str, index: int = 1, tab_id: str | None = None
) -> int:
    """
    Convert markdown and insert it at `index`.

    Returns:
        Number of requests executed.
    """
    requests = convert_markdown_to_requests(markdown, start_index=index, tab_id=tab_id)
    if requests:
        await _batch_manager(service).execute_in_phases(document_id, requests)
    return len(requests)


async def append_markdown(
    service: Any,
    document_id: str,
    markdown: str,
    add_newline_if_needed: bool = True,
    tab_id: str | None = None,
) -> int:
    """
    Append markdown to the end of the document body.

    When the body already holds text and `add_newline_if_needed` is set, a
    blank line is inserted first so the markdown starts its own paragraph.

    Returns:
        Number of requests executed.
    """
    document = await fetch_document(service, document_id, include_tabs=bool(tab_id))
    start_index = get_body_end_index(get_body_content(document, tab_id))

    requests: list[dict[str, Any]] = []
    if add_newline_if_needed and start_index > 1:
        requests.append(create_insert_text_request(start_index, "\n\n", tab_id))
        start_index += 2

    requests.extend(convert_markdown_to_requests(markdown, start_index=start_index, tab_id=tab_id))
    if requests:
        await _batch_manager(service).execute_in_phases(document_id, requests)
    return len(requests)


async def replace_with_markdown(
    service: Any,
    document_id: str,
    markdown: str,
    preserve_title: bool = False,
    tab_id: str | None = None,
) -> int:
    """
    Delete the body (optionally keeping the first paragraph) and insert markdown.

    The markdown is converted first, so a conversion error leaves the document
    untouched. The delete then runs as its own batchUpdate before any markdown
    request, since the converted indices assume the emptied body.

    Returns:
        Number of markdown requests executed (the delete is not counted).
    """
    document = await fetch_document(service, document_id, include_tabs=bool(tab_id))
    content = get_body_content(document, tab_id)
    end_index = get_body_end_index(content)

    delete_start = 1
    if preserve_title:
        title_end = _first_paragraph_end(content)
        if title_end is not None:
            delete_start = title_end

    requests: list[dict[str, Any]] = []
    insert_start = delete_start
    if delete_start > end_index:
        # The title is the body's last paragraph; open a new paragraph after it
        requests.append(create_insert_text_request(end_index, "\n", tab_id))
        insert_start = end_index + 1

    requests.extend(convert_markdown_to_requests(markdown, start_index=insert_start, tab_id=tab_id))

    manager = _batch_manager(service)
    if end_index > delete_start:
        logger.info(f"Deleting content [{delete_start}, {end_index}) from document {document_id}")
        await manager.execute_batch_update(
            document_id, [create_delete_range_request(delete_start, end_index, tab_id)]
        )

    if requests:
        await manager.execute_in_phases(document_id, requests)
    return len(requests)


@server.tool()
@handle_http_errors("create_doc", service_type="docs")
@require_google_service("docs", "docs_write")
async def create_doc(
    service: Any,
    user_google_email: str,
    title: str,
    markdown: str = "",
) -> str:
    """
    Creates a new Google Doc and optionally fills it with formatted markdown content.

    Args:
        user_google_email: User's Google email address
        title: Title of the new document
        markdown: Optional markdown to convert into the document body

    Returns:
        str: Confirmation message with document ID and link.
    """
    logger.info(f"[create_doc] Invoked. Email: '{user_google_email}', Title='{title}'")

    doc = await asyncio.to_thread(service.documents().create(body={"title": title}).execute)
    doc_id = doc.get("documentId")
    operations = 0
    if markdown:
        operations = await insert_markdown_at(service, doc_id, markdown, index=1)

    link = _doc_link(doc_id)
    logger.info(f"Created Google Doc '{title}' (ID: {doc_id}) with {operations} operations")
    return f"Created Google Doc '{title}' (ID: {doc_id}) for {user_google_email}. Link: {link}"


@server.tool()
@handle_http_errors("insert_markdown", service_type="docs")
@require_google_service("docs", "docs_write")
async def insert_markdown(
    service: Any,
    user_google_email: str,
    document_id: str,
    markdown: str,
    index: int = 1,
    tab_id: str | None = None,
) -> str:
    """
    Inserts markdown at a position in a Google Doc, converted to native formatting.

    Headings, bold/italic/strikethrough, inline code, code blocks, links,
    nested bullet/numbered/checkbox lists and horizontal rules are supported.

    Args:
        user_google_email: User's Google email address
        document_id: ID of the document to update
        markdown: Markdown content to insert
        index: Document index to insert at (1 = start of body)
        tab_id: Optional tab to write into

    Returns:
        str: Confirmation message with operation count and link.
    """
    logger.info(f"[insert_markdown] Doc={document_id}, index={index}, tab={tab_id}, chars={len(markdown)}")
    document_id = validate_document_id(document_id)
    index = validate_positive_int(index, "index")

    operations = await insert_markdown_at(service, document_id, markdown, index=index, tab_id=tab_id)
    return (
        f"Inserted {len(markdown)} characters of markdown at index {index} "
        f"({operations} operations) in document {document_id}. Link: {_doc_link(document_id)}"
    )


@server.tool()
@handle_http_errors("append_markdown_to_doc", service_type="docs")
@require_google_service("docs", "docs_write")
async def append_markdown_to_doc(
    service: Any,
    user_google_email: str,
    document_id: str,
    markdown: str,
    add_newline_if_needed: bool = True,
    tab_id: str | None = None,
) -> str:
    """
    Appends markdown to the end of a Google Doc, converted to native formatting.

    Args:
        user_google_email: User's Google email address
        document_id: ID of the document to update
        markdown: Markdown content to append
        add_newline_if_needed: Separate the new content from existing text with a blank line
        tab_id: Optional tab to append to

    Returns:
        str: Confirmation message with operation count and link.
    """
    logger.info(f"[append_markdown_to_doc] Doc={document_id}, tab={tab_id}, chars={len(markdown)}")
    document_id = validate_document_id(document_id)

    operations = await append_markdown(
        service, document_id, markdown, add_newline_if_needed=add_newline_if_needed, tab_id=tab_id
    )
    return (
        f"Successfully appended {len(markdown)} characters of markdown ({operations} operations). "
        f"Link: {_doc_link(document_id)}"
    )


@server.tool()
@handle_http_errors("replace_doc_with_markdown", service_type="docs")
@require_google_service("docs", "docs_write")
async def replace_doc_with_markdown(
    service: Any,
    user_google_email: str,
    document_id: str,
    markdown: str,
    preserve_title: bool = False,
    tab_id: str | None = None,
) -> str:
    """
    Replaces the entire content of a Google Doc (or one tab) with formatted markdown.

    Args:
        user_google_email: User's Google email address
        document_id: ID of the document to update
        markdown: Markdown content that becomes the new body
        preserve_title: Keep the first paragraph (typically the title)
        tab_id: Optional tab whose content is replaced

    Returns:
        str: Confirmation message with operation count and link.
    """
    logger.info(
        f"[replace_doc_with_markdown] Doc={document_id}, tab={tab_id}, "
        f"preserve_title={preserve_title}, chars={len(markdown)}"
    )
    document_id = validate_document_id(document_id)

    operations = await replace_with_markdown(
        service, document_id, markdown, preserve_title=preserve_title, tab_id=tab_id
    )
    return (
        f"Successfully replaced document content with {len(markdown)} characters of markdown "
        f"({operations} operations). Link: {_doc_link(document_id)}"
    )
