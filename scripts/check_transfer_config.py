#!/usr/bin/env python3
"""
Check Cardano Relay Configuration

Reports which transfer and minting settings are missing from the
environment (or .env). Values are never printed.

Usage:
    python scripts/check_transfer_config.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cardano.config import (
    MINT_KEYS,
    TRANSFER_KEYS,
    Settings,
    missing_mint_keys,
    missing_transfer_keys,
)


def print_success(msg):
    print(f"✅ {msg}")

def print_error(msg):
    print(f"❌ {msg}")

def print_info(msg):
    print(f"ℹ️  {msg}")


def report(label, keys, missing):
    print(f"\n{label}")
    for key in keys:
        if key in missing:
            print_error(f"{key} not set")
        else:
            print_success(f"{key} set")


def check_config(settings: Settings) -> bool:
    """Print a report; True when both relays are fully configured."""
    missing_transfer = missing_transfer_keys(settings)
    missing_mint = missing_mint_keys(settings)

    print("\n" + "=" * 70)
    print("Cardano Relay Configuration".center(70))
    print("=" * 70)

    report("🔁 Transfer relay", TRANSFER_KEYS, missing_transfer)
    report("🪙 Minting relay", MINT_KEYS, missing_mint)

    print()
    print_info(f"Network: {settings.cardano_network}")
    print_info(f"Upstream timeout: {settings.transfer_timeout:g}s")

    return not missing_transfer and not missing_mint


if __name__ == "__main__":
    ok = check_config(Settings.from_env())
    sys.exit(0 if ok else 1)
