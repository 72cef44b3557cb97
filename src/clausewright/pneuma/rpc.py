"""
Thor REST client.

Lightweight ledger access over httpx: receipt queries, clause inspection
(read-only simulation on current state) and raw transaction submission.
Transaction signing stays outside; ``RawTxWallet`` takes the signer as a
callable that serializes and signs a request.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

import httpx

from ..config import get_http_timeout, get_node_url
from ..errors import CallRevertedError, NodeError
from ..utils import normalize_address, normalize_tx_id, to_hex
from .clause import Clause
from .receipt import CallResult, Receipt
from .tx import TransactionRequest

logger = logging.getLogger(__name__)

Signer = Callable[[TransactionRequest], str]
"""Callable that signs a request and returns the raw transaction as 0x-hex."""


class ThorClient:
    """
    Args:
        url: Node base URL (default: THOR_NODE_URL or Thor solo)
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport, e.g. httpx.MockTransport
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = (url or get_node_url()).rstrip("/")
        self._client = httpx.Client(
            base_url=self.url,
            timeout=timeout if timeout is not None else get_http_timeout(),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ThorClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._client.request(method, path, **kwargs)
        if response.status_code >= 400:
            raise NodeError(response.status_code, response.text, path)
        return response.json()

    # ------------------------------------------------------------------ Ledger

    def query_receipt(self, tx_id: str) -> Optional[Receipt]:
        """Receipt of a transaction, or None while it is pending or unknown."""
        tx_id = normalize_tx_id(tx_id)
        payload = self._request("GET", f"/transactions/{tx_id}/receipt")
        if payload is None:
            return None
        return Receipt.from_dict(payload)

    def inspect(
        self,
        clauses: Sequence[Clause],
        caller: Optional[str] = None,
        revision: str = "best",
    ) -> list[CallResult]:
        """Simulate clauses in order against the state at ``revision``."""
        body: dict[str, Any] = {"clauses": [c.to_dict() for c in clauses]}
        if caller:
            body["caller"] = normalize_address(caller)
        payload = self._request("POST", "/accounts/*", params={"revision": revision}, json=body)
        return [CallResult.from_dict(item) for item in payload]

    def call(self, address: str, data: bytes, value: int = 0, caller: Optional[str] = None) -> bytes:
        """
        Read-only call, returning the raw return data.

        Raises:
            CallRevertedError: If the simulated execution reverts
        """
        (result,) = self.inspect([Clause(to=address, value=value, data=data)], caller=caller)
        if result.reverted:
            raise CallRevertedError(result.vm_error, result.data)
        return result.data

    # ------------------------------------------------------------------ Chain

    def send_raw(self, raw_tx: str | bytes) -> str:
        """
        Submit a signed, serialized transaction.

        Returns:
            Transaction id (0x-prefixed hex)
        """
        raw = raw_tx if isinstance(raw_tx, str) else to_hex(raw_tx)
        payload = self._request("POST", "/transactions", json={"raw": raw})
        return normalize_tx_id(payload["id"])

    def best_block(self) -> dict[str, Any]:
        return self._request("GET", "/blocks/best")

    def chain_tag(self) -> int:
        """Last byte of the genesis block id, part of every Thor transaction."""
        genesis = self._request("GET", "/blocks/0")
        return int(genesis["id"][-2:], 16)


class RawTxWallet:
    """Wallet that delegates signing to ``sign`` and submits the raw bytes."""

    def __init__(self, client: ThorClient, sign: Signer) -> None:
        self._client = client
        self._sign = sign

    def submit(self, request: TransactionRequest) -> str:
        raw = self._sign(request)
        tx_id = self._client.send_raw(raw)
        logger.info("Node accepted transaction %s from %s", tx_id, request.sender or "<default signer>")
        return tx_id
