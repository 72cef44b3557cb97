from __future__ import annotations

import re
from typing import Union

from eth_hash.auto import keccak

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_TX_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")

HexLike = Union[str, bytes, bytearray]


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def strip_0x(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def hex_to_bytes(value: HexLike) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    body = strip_0x(value.strip())
    if len(body) % 2:
        raise ValueError(f"Odd-length hex string: {value!r}")
    return bytes.fromhex(body)


def parse_quantity(value: int | str | None) -> int:
    """Parse a node quantity, given either as int or as a hex/decimal string."""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 0) if value[:2] in ("0x", "0X") else int(value)


def is_address(value: object) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def normalize_address(value: str) -> str:
    if not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return value.lower()


def normalize_tx_id(value: str) -> str:
    if not isinstance(value, str) or not _TX_ID_RE.match(value):
        raise ValueError(f"Invalid transaction id: {value!r}")
    return value.lower()
