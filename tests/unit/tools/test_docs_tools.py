"""
Unit tests for the Google Docs markdown tools.

Tests cover:
- Tool registration and exposed signatures
- Insert / append / replace helpers against a mocked Docs service
- Tool entry points with service injection patched out
- Reading tools
"""

from unittest.mock import AsyncMock, patch

import pytest

from core.errors import MarkdownConversionError, MarkdownStructureError, ValidationError


def body_document(*paragraph_ends):
    """Docs body whose paragraphs end at the given indices (first starts at 1)."""
    content = [{"endIndex": 1, "sectionBreak": {}}]
    start = 1
    for end in paragraph_ends:
        content.append({"startIndex": start, "endIndex": end, "paragraph": {"elements": []}})
        start = end
    return {"title": "Doc", "body": {"content": content}}


def set_document(service, document):
    service.documents.return_value.get.return_value.execute.return_value = document


class TestToolRegistration:
    """Tests for MCP tool registration."""

    def test_writing_tools_are_registered(self):
        from gdocs import append_markdown_to_doc, create_doc, insert_markdown, replace_doc_with_markdown

        assert create_doc.name == "create_doc"
        assert insert_markdown.name == "insert_markdown"
        assert append_markdown_to_doc.name == "append_markdown_to_doc"
        assert replace_doc_with_markdown.name == "replace_doc_with_markdown"

    def test_reading_tools_are_registered(self):
        from gdocs import get_doc_as_markdown, list_doc_tabs

        assert get_doc_as_markdown.name == "get_doc_as_markdown"
        assert list_doc_tabs.name == "list_doc_tabs"

    def test_decorated_tools_are_function_tools(self):
        from fastmcp.tools import FunctionTool

        import gdocs

        for name in gdocs.__all__:
            tool = getattr(gdocs, name)
            assert isinstance(tool, FunctionTool)
            assert tool.name == name

    def test_service_parameter_is_hidden(self):
        import inspect

        from gdocs import insert_markdown

        params = inspect.signature(insert_markdown.fn).parameters
        assert "service" not in params
        assert list(params)[:3] == ["user_google_email", "document_id", "markdown"]


class TestInsertMarkdownAt:
    @pytest.mark.asyncio
    async def test_inserts_at_index(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import insert_markdown_at

        count = await insert_markdown_at(mock_docs_service, "doc123", "**hi**", index=42)

        bodies = batch_update_bodies(mock_docs_service)
        assert count == 3
        assert bodies[0][0] == {"insertText": {"location": {"index": 42}, "text": "hi"}}
        assert "updateTextStyle" in bodies[-1][0]

    @pytest.mark.asyncio
    async def test_empty_markdown_makes_no_calls(self, mock_docs_service):
        from gdocs.writing import insert_markdown_at

        assert await insert_markdown_at(mock_docs_service, "doc123", "   ") == 0
        mock_docs_service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_respects_configured_batch_size(self, mock_docs_service, batch_update_bodies, env_override):
        from gdocs.writing import insert_markdown_at

        env_override(GDOCS_MAX_BATCH_REQUESTS="2")
        await insert_markdown_at(mock_docs_service, "doc123", "one\n\ntwo\n\nthree")

        assert max(len(body) for body in batch_update_bodies(mock_docs_service)) == 2


class TestAppendMarkdown:
    @pytest.mark.asyncio
    async def test_appends_after_blank_line(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import append_markdown

        set_document(mock_docs_service, body_document(7, 20))
        await append_markdown(mock_docs_service, "doc123", "More")

        inserts = batch_update_bodies(mock_docs_service)[0]
        assert inserts[0] == {"insertText": {"location": {"index": 19}, "text": "\n\n"}}
        assert inserts[1] == {"insertText": {"location": {"index": 21}, "text": "More"}}

    @pytest.mark.asyncio
    async def test_empty_document_gets_no_separator(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import append_markdown

        set_document(mock_docs_service, body_document(2))
        await append_markdown(mock_docs_service, "doc123", "First")

        inserts = batch_update_bodies(mock_docs_service)[0]
        assert inserts[0] == {"insertText": {"location": {"index": 1}, "text": "First"}}

    @pytest.mark.asyncio
    async def test_separator_can_be_disabled(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import append_markdown

        set_document(mock_docs_service, body_document(7, 20))
        await append_markdown(mock_docs_service, "doc123", "More", add_newline_if_needed=False)

        assert batch_update_bodies(mock_docs_service)[0][0]["insertText"]["location"]["index"] == 19

    @pytest.mark.asyncio
    async def test_tab_is_fetched_and_targeted(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import append_markdown

        tab_doc = {
            "tabs": [
                {
                    "tabProperties": {"tabId": "t.2"},
                    "documentTab": {"body": body_document(5)["body"]},
                }
            ]
        }
        set_document(mock_docs_service, tab_doc)
        await append_markdown(mock_docs_service, "doc123", "Tabbed", tab_id="t.2")

        get_call = mock_docs_service.documents.return_value.get.call_args
        assert get_call.kwargs["includeTabsContent"] is True
        inserts = batch_update_bodies(mock_docs_service)[0]
        assert all(r["insertText"]["location"]["tabId"] == "t.2" for r in inserts)


class TestReplaceWithMarkdown:
    @pytest.mark.asyncio
    async def test_delete_runs_in_its_own_call_first(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, body_document(7, 20))
        count = await replace_with_markdown(mock_docs_service, "doc123", "Hello")

        bodies = batch_update_bodies(mock_docs_service)
        assert bodies[0] == [{"deleteContentRange": {"range": {"startIndex": 1, "endIndex": 19}}}]
        assert bodies[1][0] == {"insertText": {"location": {"index": 1}, "text": "Hello"}}
        assert count == 2

    @pytest.mark.asyncio
    async def test_preserve_title_keeps_first_paragraph(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, body_document(7, 20))
        await replace_with_markdown(mock_docs_service, "doc123", "Hello", preserve_title=True)

        bodies = batch_update_bodies(mock_docs_service)
        assert bodies[0] == [{"deleteContentRange": {"range": {"startIndex": 7, "endIndex": 19}}}]
        assert bodies[1][0]["insertText"]["location"]["index"] == 7

    @pytest.mark.asyncio
    async def test_preserve_title_when_title_is_only_paragraph(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, body_document(7))
        await replace_with_markdown(mock_docs_service, "doc123", "Hello", preserve_title=True)

        bodies = batch_update_bodies(mock_docs_service)
        assert len(bodies) == 1
        assert bodies[0][:2] == [
            {"insertText": {"location": {"index": 6}, "text": "\n"}},
            {"insertText": {"location": {"index": 7}, "text": "Hello"}},
        ]

    @pytest.mark.asyncio
    async def test_conversion_failure_leaves_document_untouched(self, mock_docs_service):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, body_document(7, 40))
        with patch(
            "gdocs.writing.convert_markdown_to_requests",
            side_effect=MarkdownConversionError("Failed to convert markdown: boom"),
        ):
            with pytest.raises(MarkdownConversionError):
                await replace_with_markdown(mock_docs_service, "doc123", "Hello")

        mock_docs_service.documents.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_document_skips_delete(self, mock_docs_service, batch_update_bodies):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, body_document(2))
        await replace_with_markdown(mock_docs_service, "doc123", "Hi")

        bodies = batch_update_bodies(mock_docs_service)
        assert all("deleteContentRange" not in r for body in bodies for r in body)

    @pytest.mark.asyncio
    async def test_missing_tab_raises_validation_error(self, mock_docs_service):
        from gdocs.writing import replace_with_markdown

        set_document(mock_docs_service, {"tabs": []})
        with pytest.raises(ValidationError, match="not found"):
            await replace_with_markdown(mock_docs_service, "doc123", "Hi", tab_id="t.9")


@pytest.fixture
def injected_service(mock_docs_service):
    """Patch service construction so decorated tools receive the mock service."""
    with patch(
        "auth.service_decorator.get_authenticated_google_service",
        new=AsyncMock(return_value=mock_docs_service),
    ) as factory:
        yield factory


class TestToolEntryPoints:
    @pytest.mark.asyncio
    async def test_create_doc_with_markdown(self, injected_service, mock_docs_service, batch_update_bodies):
        from gdocs import create_doc

        result = await create_doc.fn(user_google_email="user@example.com", title="Plan", markdown="# Plan")

        assert "doc123" in result
        assert "https://docs.google.com/document/d/doc123/edit" in result
        injected_service.assert_awaited_once_with("docs", "docs_write", "user@example.com")
        assert batch_update_bodies(mock_docs_service)[0][0]["insertText"]["text"] == "Plan"

    @pytest.mark.asyncio
    async def test_insert_markdown_reports_operations(self, injected_service, mock_docs_service):
        from gdocs import insert_markdown

        result = await insert_markdown.fn(
            user_google_email="user@example.com", document_id="doc123", markdown="**hi**", index=5
        )
        assert "at index 5 (3 operations)" in result

    @pytest.mark.asyncio
    async def test_invalid_document_id_is_rejected(self, injected_service):
        from gdocs import insert_markdown

        with pytest.raises(ValidationError):
            await insert_markdown.fn(user_google_email="user@example.com", document_id="bad id!", markdown="x")

    @pytest.mark.asyncio
    async def test_structure_errors_pass_through(self, injected_service):
        from gdocs import insert_markdown

        with patch(
            "gdocs.writing.convert_markdown_to_requests",
            side_effect=MarkdownStructureError("List item found outside of a list"),
        ):
            with pytest.raises(MarkdownStructureError):
                await insert_markdown.fn(user_google_email="user@example.com", document_id="doc123", markdown="- x")

    @pytest.mark.asyncio
    async def test_replace_reports_characters(self, injected_service, mock_docs_service):
        from gdocs import replace_doc_with_markdown

        set_document(mock_docs_service, body_document(7, 20))
        result = await replace_doc_with_markdown.fn(
            user_google_email="user@example.com", document_id="doc123", markdown="Hello"
        )
        assert result.startswith("Successfully replaced document content with 5 characters of markdown (2 operations).")

    @pytest.mark.asyncio
    async def test_append_reports_characters(self, injected_service, mock_docs_service):
        from gdocs import append_markdown_to_doc

        set_document(mock_docs_service, body_document(7, 20))
        result = await append_markdown_to_doc.fn(
            user_google_email="user@example.com", document_id="doc123", markdown="More"
        )
        assert result.startswith("Successfully appended 4 characters of markdown (3 operations).")

    @pytest.mark.asyncio
    async def test_default_email_from_environment(self, injected_service, env_override):
        from gdocs import insert_markdown

        env_override(USER_GOOGLE_EMAIL="default@example.com")
        await insert_markdown.fn(user_google_email="", document_id="doc123", markdown="x")
        injected_service.assert_awaited_once_with("docs", "docs_write", "default@example.com")


class TestReadingTools:
    @pytest.mark.asyncio
    async def test_get_doc_as_markdown(self, injected_service, mock_docs_service):
        from gdocs import get_doc_as_markdown

        set_document(
            mock_docs_service,
            {
                "title": "Notes",
                "body": {
                    "content": [
                        {"endIndex": 1, "sectionBreak": {}},
                        {
                            "paragraph": {
                                "elements": [{"textRun": {"content": "Heading\n"}}],
                                "paragraphStyle": {"namedStyleType": "HEADING_1"},
                            }
                        },
                    ]
                },
            },
        )
        result = await get_doc_as_markdown.fn(user_google_email="user@example.com", document_id="doc123")
        assert result == "# Notes\n\n# Heading"
        injected_service.assert_awaited_once_with("docs", "docs_read", "user@example.com")

    @pytest.mark.asyncio
    async def test_list_doc_tabs(self, injected_service, mock_docs_service):
        from gdocs import list_doc_tabs

        set_document(
            mock_docs_service,
            {
                "tabs": [
                    {
                        "tabProperties": {"tabId": "t.0", "title": "Main"},
                        "childTabs": [{"tabProperties": {"tabId": "t.1", "title": "Appendix"}}],
                    }
                ]
            },
        )
        result = await list_doc_tabs.fn(user_google_email="user@example.com", document_id="doc123")
        assert result == "Tabs in document doc123:\n- Main (ID: t.0)\n  - Appendix (ID: t.1)"
