"""
Batch Operation Manager

Executes long request lists against the Docs `batchUpdate` endpoint.

A converted markdown document can easily produce hundreds of requests, more
than a single call should carry. Requests are split into three phases that
run strictly in order, deletes, then inserts, then everything else, and each
phase is chunked so no call exceeds the configured ceiling. Order inside a
phase is preserved, so index-dependent inserts still line up with the ranges
the formatting requests were computed against.
"""

import asyncio
import logging
from typing import Any

from auth.config import DEFAULT_MAX_BATCH_REQUESTS

logger = logging.getLogger(__name__)

DELETE_REQUEST_TYPES = ("deleteContentRange",)
INSERT_REQUEST_TYPES = (
    "insertText",
    "insertTable",
    "insertPageBreak",
    "insertInlineImage",
    "insertSectionBreak",
)


def _request_type(request: dict[str, Any]) -> str:
    return next(iter(request), "")


def split_requests_by_phase(
    requests: list[dict[str, Any]],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]], list[dict[str, Any]]]:
    """Partition requests into (deletes, inserts, formats), keeping relative order."""
    deletes, inserts, formats = [], [], []
    for request in requests:
        request_type = _request_type(request)
        if request_type in DELETE_REQUEST_TYPES:
            deletes.append(request)
        elif request_type in INSERT_REQUEST_TYPES:
            inserts.append(request)
        else:
            formats.append(request)
    return deletes, inserts, formats


def chunk_requests(requests: list[dict[str, Any]], size: int) -> list[list[dict[str, Any]]]:
    """Split a request list into consecutive chunks of at most `size` items."""
    if size < 1:
        raise ValueError("chunk size must be a positive integer")
    return [requests[i : i + size] for i in range(0, len(requests), size)]


class BatchOperationManager:
    """
    High-level manager for Google Docs batch execution.

    Args:
        service: Google Docs API service instance
        max_batch_size: Maximum requests per batchUpdate call
    """

    def __init__(self, service, max_batch_size: int = DEFAULT_MAX_BATCH_REQUESTS):
        self.service = service
        self.max_batch_size = max_batch_size

    async def execute_batch_update(self, document_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        """Send one batchUpdate call; an empty request list is a no-op."""
        if not requests:
            return {}
        return await asyncio.to_thread(
            self.service.documents().batchUpdate(documentId=document_id, body={"requests": requests}).execute
        )

    async def execute_in_phases(self, document_id: str, requests: list[dict[str, Any]]) -> int:
        """
        Execute requests as delete, insert and format phases, chunked per phase.

        Returns:
            Number of batchUpdate calls made.
        """
        deletes, inserts, formats = split_requests_by_phase(requests)
        logger.info(
            f"Executing {len(requests)} requests on document {document_id}: "
            f"{len(deletes)} deletes, {len(inserts)} inserts, {len(formats)} formatting"
        )

        calls = 0
        for phase_name, phase_requests in (("delete", deletes), ("insert", inserts), ("format", formats)):
            chunks = chunk_requests(phase_requests, self.max_batch_size)
            for number, chunk in enumerate(chunks, start=1):
                logger.debug(f"{phase_name} batch {number}/{len(chunks)}: {len(chunk)} requests")
                await self.execute_batch_update(document_id, chunk)
                calls += 1

        logger.info(f"Completed {calls} batchUpdate call(s) on document {document_id}")
        return calls
