"""
Test account keys.

Thor accounts are secp256k1 keys with Ethereum-style addresses, so
eth-account derives sender addresses. Keys for a solo node are read from
CLAUSEWRIGHT_PRIVATE_KEYS (comma separated), optionally via
~/.clausewright/.env. Signing Thor transactions is left to the external
wallet.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from eth_account import Account

from ..config import CLAUSEWRIGHT_ENV, load_env


def _with_prefix(private_key: str) -> str:
    private_key = private_key.strip()
    return private_key if private_key.startswith("0x") else "0x" + private_key


def generate_key() -> tuple[str, str]:
    """
    Generate a new secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, address), address lowercase
    """
    private_key = "0x" + secrets.token_hex(32)
    return private_key, address_of(private_key)


def address_of(private_key: str) -> str:
    """Lowercase 0x-prefixed account address for a private key."""
    return Account.from_key(_with_prefix(private_key)).address.lower()


def load_private_keys(env_path: Optional[Path] = None) -> list[str]:
    """
    Load test account keys from the environment, then the .env file.

    Variables already set in the environment win over the file, the same
    precedence as the node settings.

    Raises:
        ValueError: If CLAUSEWRIGHT_PRIVATE_KEYS is unset or empty
    """
    env_path = env_path or CLAUSEWRIGHT_ENV
    load_env(env_path)

    raw = os.environ.get("CLAUSEWRIGHT_PRIVATE_KEYS", "")
    keys = [_with_prefix(k) for k in raw.split(",") if k.strip()]
    if not keys:
        raise ValueError(f"CLAUSEWRIGHT_PRIVATE_KEYS not found. Set it in the environment or in {env_path}")
    return keys


def load_accounts(env_path: Optional[Path] = None) -> list[tuple[str, str]]:
    """(private_key, address) pairs for every configured key."""
    return [(key, address_of(key)) for key in load_private_keys(env_path)]
