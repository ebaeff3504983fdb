"""
Batch token transfer relay.

Forwards a processor's status update to the external Cardano transfer
service. The token's custody changes after its first on-chain move:

1. First transfer: originating (minting) wallet -> processor wallet,
   signed with the originating seed
2. Every later update: processor wallet -> itself (self-transfer carrying
   new metadata), signed with the processor seed

The relay does not check lifecycle legality. It validates the request,
picks the signer, makes exactly one upstream call and normalises the result.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from cardano.client import post_json, read_service_response
from cardano.config import (
    DEFAULT_TIMEOUT_SECONDS,
    Settings,
    TransferCredentials,
    resolve_transfer_credentials,
)
from cardano.errors import (
    LedgerServiceError,
    TransferApiError,
    UnexpectedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "assetUnit and status are required"
DEFAULT_SUCCESS_MESSAGE = "Transfer successful"


@dataclass(frozen=True)
class TransferRequest:
    asset_unit: str
    status: str
    description: str = ""
    note: str = ""
    is_first_transfer: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "TransferRequest":
        """
        Build a request from the JSON wire payload.

        Raises:
            ValidationError: if assetUnit or status is missing or empty
        """
        if not isinstance(payload, dict):
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        request = cls(
            asset_unit=payload.get("assetUnit") or "",
            status=payload.get("status") or "",
            description=payload.get("description") or "",
            note=payload.get("note") or "",
            is_first_transfer=payload.get("isFirstTransfer") is True,
        )
        request.validate()
        return request

    def validate(self):
        for value in (self.asset_unit, self.status):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    def metadata(self) -> Dict[str, str]:
        return {
            "status": self.status,
            "description": self.description or "",
            "note": self.note or "",
        }


@dataclass(frozen=True)
class OriginatingTransfer:
    """First move out of the minting wallet, signed with the originating seed"""
    seed: str


@dataclass(frozen=True)
class CustodialSelfTransfer:
    """Self-transfer inside the processor wallet, signed with the processor seed"""
    seed: str


TransferSigner = Union[OriginatingTransfer, CustodialSelfTransfer]


def select_signer(request: TransferRequest, credentials: TransferCredentials) -> TransferSigner:
    if request.is_first_transfer:
        return OriginatingTransfer(seed=credentials.signing_seed_primary)
    return CustodialSelfTransfer(seed=credentials.signing_seed_secondary)


@dataclass(frozen=True)
class TransferResult:
    status: str
    tx_hash: Optional[str]
    message: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "TransferResult":
        # Anything else the service returns is dropped
        return cls(
            status=data.get("status"),
            tx_hash=data.get("txHash"),
            message=data.get("message") or DEFAULT_SUCCESS_MESSAGE,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "txHash": self.tx_hash, "message": self.message}


def build_transfer_payload(
    request: TransferRequest,
    signer: TransferSigner,
    credentials: TransferCredentials,
) -> Dict[str, Any]:
    return {
        "blockfrostKey": credentials.api_key,
        "secretSeed": signer.seed,
        "metadata": request.metadata(),
        "assetUnit": request.asset_unit,
        "recipientAddress": credentials.recipient_address,
    }


def submit_transfer(
    request: TransferRequest,
    credentials: TransferCredentials,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> TransferResult:
    """
    Relay one status update to the transfer service.

    Args:
        request: Validated or unvalidated transfer request
        credentials: Resolved transfer credentials
        timeout: Upstream request timeout in seconds

    Returns:
        Normalised TransferResult

    Raises:
        ValidationError: missing assetUnit or status (no network call made)
        TransferApiError: upstream non-2xx, timeout or transport failure
        InvalidResponseError: upstream 2xx with an unparseable body
    """
    request.validate()
    signer = select_signer(request, credentials)

    phase = "first" if isinstance(signer, OriginatingTransfer) else "self"
    logger.info(
        f"Transfer request: asset={request.asset_unit} status={request.status} "
        f"phase={phase}"
    )

    response = post_json(
        credentials.service_endpoint,
        build_transfer_payload(request, signer, credentials),
        timeout=timeout,
        error_cls=TransferApiError,
    )
    data = read_service_response(response, TransferApiError)

    result = TransferResult.from_response(data)
    logger.info(f"Transfer submitted: asset={request.asset_unit} tx={result.tx_hash}")
    return result


def handle_transfer(body: Union[str, bytes, Dict[str, Any]], settings: Settings) -> Tuple[int, Dict[str, Any]]:
    """
    Handle one inbound transfer call end to end.

    Credentials are resolved before the body is parsed, so a misconfigured
    deployment answers 500 without touching the network.

    Args:
        body: Raw request body, or an already-decoded JSON payload
        settings: Process settings

    Returns:
        (http_status, body) where body is either the TransferResult dict or
        {"error": message}
    """
    try:
        credentials = resolve_transfer_credentials(settings)
        payload = json.loads(body) if isinstance(body, (str, bytes)) else body
        request = TransferRequest.from_payload(payload)
        result = submit_transfer(request, credentials, timeout=settings.transfer_timeout)
        return 200, result.to_dict()
    except LedgerServiceError as e:
        log = logger.error if e.status_code >= 500 else logger.warning
        log(f"Transfer failed ({e.status_code}): {e.message}")
        return e.status_code, e.to_dict()
    except Exception as e:
        logger.error(f"Transfer error: {e}", exc_info=True)
        error = UnexpectedError(e)
        return error.status_code, error.to_dict()
