"""
Relay configuration and credential resolution.

Settings are read from the environment (and `.env`) once at process start.
Credentials are resolved from those settings per request and fail closed:
if any required key is absent, nothing is returned and every missing key
is reported together.

Environment:
    TRANSFER_API_URL          External transfer endpoint
    MINT_API_URL              External minting endpoint
    BLOCKFROST_KEY            Blockfrost project key (secret)
    SECRET_SEED               Originating (minting) wallet seed (secret)
    PROCESSOR_SECRET_SEED     Custodial processor wallet seed (secret)
    PROCESSOR_WALLET_ADDRESS  Custodial processor wallet address
    CBOR_HEX                  Minting policy script (secret)
    CARDANO_NETWORK           "preprod" (default) or "mainnet"
    TRANSFER_TIMEOUT_SECONDS  Upstream request timeout, default 30
"""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from cardano.errors import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 30.0

# Ordered so error messages are stable
TRANSFER_KEYS = (
    "TRANSFER_API_URL",
    "BLOCKFROST_KEY",
    "SECRET_SEED",
    "PROCESSOR_SECRET_SEED",
    "PROCESSOR_WALLET_ADDRESS",
)

MINT_KEYS = (
    "MINT_API_URL",
    "BLOCKFROST_KEY",
    "SECRET_SEED",
    "CBOR_HEX",
)


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once and injected into handlers"""
    transfer_api_url: Optional[str] = None
    mint_api_url: Optional[str] = None
    blockfrost_key: Optional[str] = None
    secret_seed: Optional[str] = None
    processor_secret_seed: Optional[str] = None
    processor_wallet_address: Optional[str] = None
    cbor_hex: Optional[str] = None
    cardano_network: str = "preprod"
    transfer_timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ after
                loading `.env`.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        timeout_raw = environ.get("TRANSFER_TIMEOUT_SECONDS")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            raise ValueError(f"TRANSFER_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")
        if timeout <= 0:
            raise ValueError(f"TRANSFER_TIMEOUT_SECONDS must be positive, got {timeout_raw!r}")

        return cls(
            transfer_api_url=environ.get("TRANSFER_API_URL"),
            mint_api_url=environ.get("MINT_API_URL"),
            blockfrost_key=environ.get("BLOCKFROST_KEY"),
            secret_seed=environ.get("SECRET_SEED"),
            processor_secret_seed=environ.get("PROCESSOR_SECRET_SEED"),
            processor_wallet_address=environ.get("PROCESSOR_WALLET_ADDRESS"),
            cbor_hex=environ.get("CBOR_HEX"),
            cardano_network=environ.get("CARDANO_NETWORK") or "preprod",
            transfer_timeout=timeout,
        )

    def value_for(self, key: str) -> Optional[str]:
        return getattr(self, key.lower())


@dataclass(frozen=True)
class TransferCredentials:
    service_endpoint: str
    api_key: str
    signing_seed_primary: str
    signing_seed_secondary: str
    recipient_address: str


@dataclass(frozen=True)
class MintCredentials:
    service_endpoint: str
    api_key: str
    secret_seed: str
    cbor_hex: str


def _missing(settings: Settings, keys) -> List[str]:
    return [key for key in keys if not (settings.value_for(key) or "").strip()]


def missing_transfer_keys(settings: Settings) -> List[str]:
    return _missing(settings, TRANSFER_KEYS)


def missing_mint_keys(settings: Settings) -> List[str]:
    return _missing(settings, MINT_KEYS)


def resolve_transfer_credentials(settings: Settings) -> TransferCredentials:
    """
    Resolve transfer credentials.

    Raises:
        ConfigurationError: listing every missing key
    """
    missing = missing_transfer_keys(settings)
    if missing:
        raise ConfigurationError(missing, label="Transfer")

    return TransferCredentials(
        service_endpoint=settings.transfer_api_url,
        api_key=settings.blockfrost_key,
        signing_seed_primary=settings.secret_seed,
        signing_seed_secondary=settings.processor_secret_seed,
        recipient_address=settings.processor_wallet_address,
    )


def resolve_mint_credentials(settings: Settings) -> MintCredentials:
    missing = missing_mint_keys(settings)
    if missing:
        raise ConfigurationError(missing, label="Minting")

    return MintCredentials(
        service_endpoint=settings.mint_api_url,
        api_key=settings.blockfrost_key,
        secret_seed=settings.secret_seed,
        cbor_hex=settings.cbor_hex,
    )
