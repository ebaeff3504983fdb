"""
Supply chain domain rules for coffee batches
"""

from .lifecycle import (
    BatchStatus,
    STATUS_SEQUENCE,
    is_valid_status,
    is_fully_processed,
    next_statuses,
    is_first_transfer,
    group_by_farmer,
)

__all__ = [
    "BatchStatus",
    "STATUS_SEQUENCE",
    "is_valid_status",
    "is_fully_processed",
    "next_statuses",
    "is_first_transfer",
    "group_by_farmer",
]
