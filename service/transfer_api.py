"""
Ledger relay endpoints

Endpoints:
- POST /api/transfer - Relay a processor status update to the transfer service
- POST /api/mint - Mint a registered batch and link the token in the registry

Both endpoints answer every failure with {"error": "..."} so the client
views never see a raw exception.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from cardano.config import Settings, resolve_mint_credentials
from cardano.errors import LedgerServiceError, UnexpectedError
from cardano.minting import mint_batch_token
from cardano.transfer import handle_transfer
from database.crud import get_batch, record_mint
from service.dependencies import get_session, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ledger"])


class MintRequest(BaseModel):
    """Request schema for minting a batch"""
    model_config = ConfigDict(populate_by_name=True)

    batch_id: str = Field(..., alias="batchId", min_length=1, description="Batch id or batch number")


def _error_response(error: LedgerServiceError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@router.post("/transfer")
async def transfer(request: Request, settings: Settings = Depends(get_settings)):
    """
    Relay a status update for a minted batch token.

    Body:
        {"assetUnit": str, "status": str, "description"?: str, "note"?: str,
         "isFirstTransfer"?: bool}

    Returns:
        200 {"status", "txHash", "message"} or {"error"} with the mapped status
    """
    body = await request.body()
    status_code, content = await run_in_threadpool(handle_transfer, body, settings)
    return JSONResponse(status_code=status_code, content=content)


@router.post("/mint")
def mint(
    mint_request: MintRequest,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_session),
):
    """
    Mint a harvest batch as a native token and record the mint.

    Returns:
        200 {"status", "txHash", "unit", "policyId", "batchId"}
        409 {"error", "txHash", "unit", "policyId", "batchId"} when another
            request recorded a mint first; the new token is returned so it
            can be reconciled
    """
    try:
        credentials = resolve_mint_credentials(settings)

        batch = get_batch(db, mint_request.batch_id)
        if not batch:
            raise HTTPException(status_code=404, detail="Batch not found")
        if batch.is_minted:
            raise HTTPException(status_code=409, detail=f"Batch {batch.batch_number} is already minted")

        result = mint_batch_token(batch, credentials, timeout=settings.transfer_timeout)
        try:
            record_mint(db, batch, result)
        except ValueError as e:
            # Another request recorded a mint while this token was being minted
            logger.error(
                f"Unrecorded mint for batch {batch.batch_number}: "
                f"tx={result.tx_hash} unit={result.unit} ({e})"
            )
            return JSONResponse(
                status_code=409,
                content={
                    "error": str(e),
                    "txHash": result.tx_hash,
                    "unit": result.unit,
                    "policyId": result.policy_id,
                    "batchId": batch.id,
                },
            )

        return {**result.to_dict(), "batchId": batch.id}

    except HTTPException:
        raise
    except LedgerServiceError as e:
        logger.warning(f"Mint failed ({e.status_code}): {e.message}")
        return _error_response(e)
    except Exception as e:
        logger.error(f"Mint error: {e}", exc_info=True)
        return _error_response(UnexpectedError(e))
