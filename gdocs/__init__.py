"""
Google Docs MCP Tools Package

This package provides MCP tools that move markdown into and out of Google Docs.
"""

from gdocs.reading import get_doc_as_markdown, list_doc_tabs
from gdocs.writing import append_markdown_to_doc, create_doc, insert_markdown, replace_doc_with_markdown

__all__ = [
    "append_markdown_to_doc",
    "create_doc",
    "get_doc_as_markdown",
    "insert_markdown",
    "list_doc_tabs",
    "replace_doc_with_markdown",
]
