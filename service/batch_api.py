"""
Batch Registry API

Endpoints:
- POST /api/batches - Register a harvest batch (farmers)
- GET /api/batches - List batches, optionally only minted ones (union, processors)
- GET /api/batches/{batch_id} - Provenance for a scanned QR code (processors, consumers)
- POST /api/batches/{batch_id}/status - Record a completed transfer (processors)
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from cardano.config import Settings
from cardano.explorer import token_url, transaction_url
from database.crud import (
    create_batch,
    get_all_batches,
    get_batch,
    get_batch_history,
    record_status_update,
)
from database.models import CoffeeBatch, BatchStatusUpdate
from service.dependencies import get_session, get_settings
from supplychain.lifecycle import group_by_farmer, is_first_transfer, is_fully_processed, next_statuses

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["batches"])


# ============================================================================
# Pydantic Models (Request Schemas)
# ============================================================================

class HarvestCreate(BaseModel):
    """Request schema for registering a harvest"""
    initial_weight_kg: float = Field(..., gt=0, description="Harvest weight in kg")
    variety: Optional[str] = Field(None, max_length=100, description="Coffee variety")
    process: Optional[str] = Field(None, max_length=50, description="Washed, Natural, Honey")
    harvest_date: Optional[date] = Field(None, description="Harvest date")
    location: Optional[str] = Field(None, max_length=200, description="Zone or farm name")
    gps: Optional[str] = Field(None, max_length=100, description='"lat, long"')
    elevation: Optional[str] = Field(None, max_length=50)
    farmer_name: Optional[str] = Field(None, max_length=200)
    crop_type: str = Field("coffee", max_length=50)


class StatusUpdateCreate(BaseModel):
    """Request schema for writing a transfer result back"""
    status: str = Field(..., min_length=1)
    tx_hash: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = None
    note: Optional[str] = None


# ============================================================================
# Helper Functions
# ============================================================================

def _iso(value) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return None


def serialize_batch(batch: CoffeeBatch, network: str) -> Dict[str, Any]:
    links = {}
    if batch.mint_tx_hash:
        links["mintTransaction"] = transaction_url(batch.mint_tx_hash, network)
    if batch.mint_unit:
        links["token"] = token_url(batch.mint_unit, network)
    if batch.last_tx_hash:
        links["lastTransaction"] = transaction_url(batch.last_tx_hash, network)

    return {
        "id": batch.id,
        "batchNumber": batch.batch_number,
        "cropType": batch.crop_type,
        "variety": batch.variety,
        "process": batch.process,
        "initialWeight": batch.initial_weight_kg,
        "harvestDate": _iso(batch.harvest_date),
        "location": batch.location,
        "farmer": {"name": batch.farmer_name, "gps": batch.gps, "elevation": batch.elevation},
        "status": batch.status,
        "isMinted": batch.is_minted,
        "mintTxHash": batch.mint_tx_hash,
        "mintUnit": batch.mint_unit,
        "policyId": batch.policy_id,
        "lastTxHash": batch.last_tx_hash,
        "createdAt": _iso(batch.created_at),
        "explorer": links,
    }


def serialize_update(update: BatchStatusUpdate, network: str) -> Dict[str, Any]:
    return {
        "status": update.status,
        "description": update.description,
        "note": update.note,
        "txHash": update.tx_hash,
        "explorer": transaction_url(update.tx_hash, network) if update.tx_hash else None,
        "recordedAt": _iso(update.created_at),
    }


def _get_batch_or_404(db: Session, batch_id: str) -> CoffeeBatch:
    batch = get_batch(db, batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found")
    return batch


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/batches", status_code=201)
def register_harvest(
    harvest: HarvestCreate,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_session),
):
    """Register a new harvest batch (status "harvested", not yet minted)."""
    try:
        batch = create_batch(db, harvest.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Registered harvest {batch.batch_number} ({batch.initial_weight_kg} kg)")
    return serialize_batch(batch, settings.cardano_network)


@router.get("/batches")
def list_batches(
    minted: bool = Query(False, description="Only batches with a minted token"),
    limit: int = Query(100, ge=1, le=500),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_session),
):
    """
    List batches, newest first.

    Minted listings are also grouped by farmer the way the processor view
    shows them.
    """
    batches = get_all_batches(db, minted_only=minted, limit=limit)
    response: Dict[str, Any] = {
        "total": len(batches),
        "batches": [serialize_batch(b, settings.cardano_network) for b in batches],
    }
    if minted:
        response["byFarmer"] = {
            farmer: [b.batch_number for b in group]
            for farmer, group in group_by_farmer(batches).items()
        }
    return response


@router.get("/batches/{batch_id}")
def get_provenance(
    batch_id: str,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_session),
):
    """
    Resolve a scanned batch ID into its provenance.

    Args:
        batch_id: Batch id, batch number or minted asset unit

    Returns:
        Batch details, lifecycle hints and on-chain status history
    """
    batch = _get_batch_or_404(db, batch_id)
    history: List[BatchStatusUpdate] = get_batch_history(db, batch)

    return {
        "batch": serialize_batch(batch, settings.cardano_network),
        "fullyProcessed": is_fully_processed(batch.status),
        "nextStatuses": next_statuses(batch.status),
        "isFirstTransfer": is_first_transfer(batch),
        "history": [serialize_update(u, settings.cardano_network) for u in history],
    }


@router.post("/batches/{batch_id}/status")
def record_transfer(
    batch_id: str,
    update: StatusUpdateCreate,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_session),
):
    """Record a status change after /api/transfer returned a tx hash."""
    batch = _get_batch_or_404(db, batch_id)

    try:
        record_status_update(
            db,
            batch,
            status=update.status,
            tx_hash=update.tx_hash,
            description=update.description,
            note=update.note,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Batch {batch.batch_number} -> {batch.status} (tx={update.tx_hash})")
    return {
        "batch": serialize_batch(batch, settings.cardano_network),
        "fullyProcessed": is_fully_processed(batch.status),
    }
