"""
Coffee batch lifecycle

harvested -> washed -> dried -> milled -> graded -> exported

Graded and exported batches count as fully processed and get a consumer QR.
The transfer relay does not enforce ordering; the registry only checks that
a status is one of these values.
"""

from enum import Enum
from typing import Dict, Iterable, List


class BatchStatus(str, Enum):
    HARVESTED = "harvested"
    WASHED = "washed"
    DRIED = "dried"
    MILLED = "milled"
    GRADED = "graded"
    EXPORTED = "exported"


STATUS_SEQUENCE = tuple(status.value for status in BatchStatus)
FULLY_PROCESSED = frozenset({BatchStatus.GRADED.value, BatchStatus.EXPORTED.value})
UNKNOWN_FARMER = "Unknown Farmer"


def is_valid_status(status: str) -> bool:
    return status in STATUS_SEQUENCE


def is_fully_processed(status: str) -> bool:
    return status in FULLY_PROCESSED


def next_statuses(status: str) -> List[str]:
    """Statuses after the given one; empty for exported or unknown values"""
    if not is_valid_status(status):
        return []
    return list(STATUS_SEQUENCE[STATUS_SEQUENCE.index(status) + 1:])


def is_first_transfer(batch) -> bool:
    """True until the token has left the originating wallet"""
    return not batch.transfer_count


def group_by_farmer(batches: Iterable) -> Dict[str, list]:
    groups: Dict[str, list] = {}
    for batch in batches:
        groups.setdefault(batch.farmer_name or UNKNOWN_FARMER, []).append(batch)
    return groups
