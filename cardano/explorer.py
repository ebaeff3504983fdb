"""CardanoScan links for transactions and tokens."""

MAINNET_EXPLORER = "https://cardanoscan.io"
PREPROD_EXPLORER = "https://preprod.cardanoscan.io"


def explorer_base_url(network: str = "preprod") -> str:
    return MAINNET_EXPLORER if network == "mainnet" else PREPROD_EXPLORER


def transaction_url(tx_hash: str, network: str = "preprod") -> str:
    return f"{explorer_base_url(network)}/transaction/{tx_hash}"


def token_url(unit: str, network: str = "preprod") -> str:
    return f"{explorer_base_url(network)}/token/{unit}"
