"""
CRUD operations for the coffee batch registry
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.models import CoffeeBatch, BatchStatusUpdate
from supplychain.lifecycle import BatchStatus, STATUS_SEQUENCE, is_valid_status

HARVEST_FIELDS = (
    "crop_type",
    "variety",
    "process",
    "initial_weight_kg",
    "harvest_date",
    "location",
    "gps",
    "elevation",
    "farmer_name",
)


def _new_batch_number() -> str:
    return f"BATCH-{uuid.uuid4().hex[:8].upper()}"


def create_batch(db: Session, harvest: dict) -> CoffeeBatch:
    """
    Register a new harvest batch.

    Args:
        db: Database session
        harvest: Harvest fields (see HARVEST_FIELDS); unknown keys are ignored

    Returns:
        Created CoffeeBatch with status "harvested"
    """
    weight = harvest.get("initial_weight_kg")
    if weight is None or weight <= 0:
        raise ValueError(f"Invalid harvest weight: {weight}")

    data = {key: harvest[key] for key in HARVEST_FIELDS if harvest.get(key) is not None}
    data.setdefault("crop_type", "coffee")

    batch = CoffeeBatch(
        id=str(uuid.uuid4()),
        batch_number=_new_batch_number(),
        status=BatchStatus.HARVESTED.value,
        transfer_count=0,
        is_minted=False,
        **data
    )
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return batch


def get_batch(db: Session, identifier: str) -> Optional[CoffeeBatch]:
    """Query batch by id, batch number or minted asset unit (whatever a QR code carries)."""
    identifier = (identifier or "").strip()
    if not identifier:
        return None
    return db.query(CoffeeBatch).filter(
        or_(
            CoffeeBatch.id == identifier,
            CoffeeBatch.batch_number == identifier.upper(),
            CoffeeBatch.mint_unit == identifier,
        )
    ).first()


def get_all_batches(db: Session, minted_only: bool = False, limit: int = 100) -> List[CoffeeBatch]:
    """Get batches, newest first."""
    query = db.query(CoffeeBatch)
    if minted_only:
        query = query.filter(CoffeeBatch.is_minted == True)  # noqa: E712
    return query.order_by(CoffeeBatch.created_at.desc()).limit(limit).all()


def record_mint(db: Session, batch: CoffeeBatch, mint_result) -> CoffeeBatch:
    """Link a batch to its minted token. A batch is minted at most once."""
    if batch.is_minted:
        raise ValueError(f"Batch {batch.batch_number} is already minted")

    batch.is_minted = True
    batch.mint_tx_hash = mint_result.tx_hash
    batch.mint_unit = mint_result.unit
    batch.policy_id = mint_result.policy_id
    batch.minted_at = datetime.utcnow()
    db.commit()
    db.refresh(batch)
    return batch


def record_status_update(
    db: Session,
    batch: CoffeeBatch,
    status: str,
    tx_hash: Optional[str] = None,
    description: Optional[str] = None,
    note: Optional[str] = None,
) -> BatchStatusUpdate:
    """
    Write a completed transfer back into the registry.

    Every recorded update counts as one on-chain move of the token, so a
    transaction hash is required. The count decides which wallet signs
    the next transfer.

    Raises:
        ValueError: unknown status, batch has no token yet, or no tx hash
    """
    if not is_valid_status(status):
        raise ValueError(
            f"Unknown status '{status}'. Expected one of: {', '.join(STATUS_SEQUENCE)}"
        )
    if not batch.is_minted:
        raise ValueError(f"Batch {batch.batch_number} has not been minted")
    if not tx_hash:
        raise ValueError(f"A transfer tx hash is required to record '{status}'")

    update = BatchStatusUpdate(
        batch_id=batch.id,
        status=status,
        description=description or "",
        note=note or "",
        tx_hash=tx_hash,
    )
    db.add(update)

    batch.status = status
    batch.transfer_count = (batch.transfer_count or 0) + 1
    batch.last_tx_hash = tx_hash

    db.commit()
    db.refresh(update)
    return update


def get_batch_history(db: Session, batch: CoffeeBatch) -> List[BatchStatusUpdate]:
    """Status updates for a batch, oldest first."""
    return db.query(BatchStatusUpdate)\
        .filter(BatchStatusUpdate.batch_id == batch.id)\
        .order_by(BatchStatusUpdate.created_at, BatchStatusUpdate.id)\
        .all()
