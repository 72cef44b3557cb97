"""
Clause Builder - Turns ABI entries plus arguments into clauses.

A clause is one independently-addressed sub-operation of a transaction.
Building is deterministic: identical inputs yield byte-identical data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..errors import EncodingError
from ..utils import normalize_address, to_hex
from .abi import AbiEntry
from .codec import encode_call, normalize_bytecode


@dataclass(frozen=True)
class Clause:
    """
    Attributes:
        to: Lowercase 0x-prefixed target address, or None for a deployment
        value: Amount of VET (wei) transferred with the clause
        data: Encoded payload
    """
    to: Optional[str]
    value: int = 0
    data: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise EncodingError(f"clause value must be an int, got {type(self.value).__name__}")
        if self.value < 0:
            raise EncodingError(f"clause value must not be negative: {self.value}")
        if self.to is not None:
            try:
                object.__setattr__(self, "to", normalize_address(self.to))
            except ValueError as exc:
                raise EncodingError(str(exc)) from exc
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def is_deployment(self) -> bool:
        return self.to is None

    def to_dict(self) -> dict[str, Any]:
        """JSON form accepted by Thor's REST API."""
        return {"to": self.to, "value": hex(self.value), "data": to_hex(self.data)}


def build_deploy_clause(
    bytecode: str | bytes,
    constructor: AbiEntry,
    args: Sequence[Any] = (),
    value: int = 0,
) -> Clause:
    """Creation clause: bytecode followed by the encoded constructor arguments."""
    code = normalize_bytecode(bytecode)
    return Clause(to=None, value=value, data=code + encode_call(constructor, args))


def build_call_clause(
    address: str,
    function: AbiEntry,
    args: Sequence[Any] = (),
    value: int = 0,
) -> Clause:
    return Clause(to=address, value=value, data=encode_call(function, args))


def build_transfer_clause(recipient: str, value: int) -> Clause:
    """Plain VET transfer with an empty payload."""
    return Clause(to=recipient, value=value)
