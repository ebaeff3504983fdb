"""
Batch token minting relay.

Mints a registered coffee batch as a Cardano native token through the
external minting service. The union mints into the originating wallet; the
first processor transfer later moves the token into custodial processing.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cardano.client import post_json, read_service_response
from cardano.config import DEFAULT_TIMEOUT_SECONDS, MintCredentials
from cardano.errors import MintApiError, MintError

logger = logging.getLogger(__name__)

BATCH_NUMBER_PREFIX = "BATCH-"


@dataclass(frozen=True)
class MintResult:
    status: str
    tx_hash: str
    unit: str
    policy_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "txHash": self.tx_hash,
            "unit": self.unit,
            "policyId": self.policy_id,
        }


def _short_label(batch_number: Optional[str], batch_id: str) -> str:
    return batch_number or batch_id[:8]


def build_token_name(batch_number: Optional[str], batch_id: str) -> str:
    """Token name shown in wallets, e.g. "Coffee#3F9A12BC" """
    if batch_number:
        return f"Coffee#{batch_number.replace(BATCH_NUMBER_PREFIX, '')}"
    return f"Coffee#{batch_id[:8]}"


def _split_gps(gps: Optional[str]):
    if not gps:
        return "", ""
    parts = [part.strip() for part in gps.split(",")]
    lat = parts[0] if len(parts) > 0 else ""
    lon = parts[1] if len(parts) > 1 else ""
    return lat, lon


def build_mint_metadata(batch) -> Dict[str, str]:
    """
    Build on-chain metadata from a registry batch.

    Args:
        batch: CoffeeBatch (or any object with the same attributes)
    """
    lat, lon = _split_gps(batch.gps)
    harvest_date = batch.harvest_date.isoformat() if batch.harvest_date else ""

    return {
        "name": f"Coffee batch {_short_label(batch.batch_number, batch.id)}",
        "weight": f"{batch.initial_weight_kg:g}",
        "unit": "kg",
        "variety": batch.variety or "",
        "location": batch.gps or "GPS Coordinates",
        "lat": lat,
        "long": lon,
        "farmer": batch.farmer_name or "Unknown",
        "harvestDate": harvest_date,
        "cropType": batch.crop_type or "coffee",
    }


def mint_batch_token(
    batch,
    credentials: MintCredentials,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> MintResult:
    """
    Mint a batch as a native token.

    Returns:
        MintResult with tx hash, asset unit and policy ID

    Raises:
        MintApiError: upstream non-2xx, timeout or transport failure
        InvalidResponseError: upstream 2xx with an unparseable body
        MintError: upstream answered but status was not "success"
    """
    token_name = build_token_name(batch.batch_number, batch.id)
    payload = {
        "blockfrostKey": credentials.api_key,
        "secretSeed": credentials.secret_seed,
        "tokenName": token_name,
        "metadata": build_mint_metadata(batch),
        "cborHex": credentials.cbor_hex,
    }

    logger.info(f"Minting {token_name} for batch {batch.id}")
    response = post_json(
        credentials.service_endpoint,
        payload,
        timeout=timeout,
        error_cls=MintApiError,
    )
    data = read_service_response(response, MintApiError)

    if data.get("status") != "success":
        raise MintError(f"Minting failed: {data.get('message') or 'Unknown error'}")

    result = MintResult(
        status=data["status"],
        tx_hash=data.get("txHash"),
        unit=data.get("unit"),
        policy_id=data.get("policyId"),
    )
    logger.info(f"Minted {token_name}: unit={result.unit} tx={result.tx_hash}")
    return result
