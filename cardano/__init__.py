"""
Cardano relay package: credentials, transfer and minting clients for the
external ledger services.
"""

from .config import (
    Settings,
    TransferCredentials,
    MintCredentials,
    resolve_transfer_credentials,
    resolve_mint_credentials,
    missing_transfer_keys,
    missing_mint_keys,
)
from .errors import (
    LedgerServiceError,
    ConfigurationError,
    ValidationError,
    TransferApiError,
    MintApiError,
    InvalidResponseError,
    MintError,
    UnexpectedError,
)
from .transfer import (
    TransferRequest,
    TransferResult,
    OriginatingTransfer,
    CustodialSelfTransfer,
    select_signer,
    submit_transfer,
    handle_transfer,
)
from .minting import MintResult, mint_batch_token

__all__ = [
    "Settings",
    "TransferCredentials",
    "MintCredentials",
    "resolve_transfer_credentials",
    "resolve_mint_credentials",
    "missing_transfer_keys",
    "missing_mint_keys",
    "LedgerServiceError",
    "ConfigurationError",
    "ValidationError",
    "TransferApiError",
    "MintApiError",
    "InvalidResponseError",
    "MintError",
    "UnexpectedError",
    "TransferRequest",
    "TransferResult",
    "OriginatingTransfer",
    "CustodialSelfTransfer",
    "select_signer",
    "submit_transfer",
    "handle_transfer",
    "MintResult",
    "mint_batch_token",
]
