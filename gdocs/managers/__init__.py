"""
Google Docs Operation Managers

This package provides manager classes for multi-step Google Docs operations,
keeping API orchestration out of the tool modules.
"""

from .batch_operation_manager import BatchOperationManager, chunk_requests, split_requests_by_phase

__all__ = [
    "BatchOperationManager",
    "chunk_requests",
    "split_requests_by_phase",
]
