"""
Receipts and the Outcome Poller.

Transaction inclusion is asynchronous: a submitted transaction has no
receipt until a block containing it is produced. The poller queries the
ledger a bounded number of times, one block period apart, and either
returns the receipt or raises ``OutcomeTimeoutError``.

A reverted receipt is a valid outcome, returned to the caller. Callers
check ``receipt.reverted`` themselves.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from ..config import get_poll_attempts, get_poll_interval
from ..errors import OutcomeTimeoutError
from ..utils import hex_to_bytes, normalize_tx_id, parse_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    """Raw log entry as emitted by one clause."""
    address: str
    topics: tuple[bytes, ...]
    data: bytes = b""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Event":
        return cls(
            address=payload["address"].lower(),
            topics=tuple(hex_to_bytes(t) for t in payload.get("topics", [])),
            data=hex_to_bytes(payload.get("data") or "0x"),
        )


@dataclass(frozen=True)
class Transfer:
    sender: str
    recipient: str
    amount: int

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Transfer":
        return cls(
            sender=payload["sender"].lower(),
            recipient=payload["recipient"].lower(),
            amount=parse_quantity(payload.get("amount")),
        )


@dataclass(frozen=True)
class Output:
    """Effects of one clause, at the same position as the clause."""
    contract_address: Optional[str] = None
    events: tuple[Event, ...] = ()
    transfers: tuple[Transfer, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Output":
        address = payload.get("contractAddress")
        return cls(
            contract_address=address.lower() if address else None,
            events=tuple(Event.from_dict(e) for e in payload.get("events") or []),
            transfers=tuple(Transfer.from_dict(t) for t in payload.get("transfers") or []),
        )


@dataclass(frozen=True)
class Receipt:
    reverted: bool
    outputs: tuple[Output, ...] = ()
    tx_id: Optional[str] = None
    tx_origin: Optional[str] = None
    block_id: Optional[str] = None
    block_number: Optional[int] = None
    block_timestamp: Optional[int] = None
    gas_used: int = 0
    gas_payer: Optional[str] = None
    paid: int = 0
    reward: int = 0

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Receipt":
        meta = payload.get("meta") or {}
        return cls(
            reverted=bool(payload.get("reverted", False)),
            outputs=tuple(Output.from_dict(o) for o in payload.get("outputs") or []),
            tx_id=meta.get("txID"),
            tx_origin=meta.get("txOrigin"),
            block_id=meta.get("blockID"),
            block_number=meta.get("blockNumber"),
            block_timestamp=meta.get("blockTimestamp"),
            gas_used=parse_quantity(payload.get("gasUsed")),
            gas_payer=payload.get("gasPayer"),
            paid=parse_quantity(payload.get("paid")),
            reward=parse_quantity(payload.get("reward")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "reverted": self.reverted,
            "gasUsed": self.gas_used,
            "gasPayer": self.gas_payer,
            "paid": hex(self.paid),
            "reward": hex(self.reward),
            "meta": {
                "blockID": self.block_id,
                "blockNumber": self.block_number,
                "blockTimestamp": self.block_timestamp,
                "txID": self.tx_id,
                "txOrigin": self.tx_origin,
            },
            "outputs": [
                {
                    "contractAddress": o.contract_address,
                    "events": [
                        {
                            "address": e.address,
                            "topics": ["0x" + t.hex() for t in e.topics],
                            "data": "0x" + e.data.hex(),
                        }
                        for e in o.events
                    ],
                    "transfers": [
                        {"sender": t.sender, "recipient": t.recipient, "amount": hex(t.amount)}
                        for t in o.transfers
                    ],
                }
                for o in self.outputs
            ],
        }


@dataclass(frozen=True)
class CallResult:
    """Outcome of simulating one clause against current chain state."""
    data: bytes = b""
    reverted: bool = False
    vm_error: str = ""
    gas_used: int = 0
    events: tuple[Event, ...] = ()
    transfers: tuple[Transfer, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CallResult":
        return cls(
            data=hex_to_bytes(payload.get("data") or "0x"),
            reverted=bool(payload.get("reverted", False)),
            vm_error=payload.get("vmError") or "",
            gas_used=parse_quantity(payload.get("gasUsed")),
            events=tuple(Event.from_dict(e) for e in payload.get("events") or []),
            transfers=tuple(Transfer.from_dict(t) for t in payload.get("transfers") or []),
        )


class Ledger(Protocol):
    def query_receipt(self, tx_id: str) -> Optional[Receipt]:
        ...

    def call(self, address: str, data: bytes, value: int = 0, caller: Optional[str] = None) -> bytes:
        ...


class PollState(enum.Enum):
    WAITING = "waiting"
    FOUND = "found"
    EXHAUSTED = "exhausted"


class OutcomePoller:
    """
    Bounded receipt poller.

    Args:
        ledger: Anything with ``query_receipt(tx_id) -> Receipt | None``
        max_attempts: Queries before giving up (default: from config)
        interval: Seconds between queries, about one block (default: from config)
        sleep: Blocking wait used between attempts
    """

    def __init__(
        self,
        ledger: Ledger,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ledger = ledger
        self.max_attempts = max_attempts if max_attempts is not None else get_poll_attempts()
        self.interval = interval if interval is not None else get_poll_interval()
        self._sleep = sleep

    def await_outcome(
        self,
        tx_id: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> Receipt:
        """
        Wait for the receipt of ``tx_id``.

        Raises:
            OutcomeTimeoutError: After ``max_attempts`` consecutive absent results
            ValueError: On a malformed transaction id or a non-positive budget
        """
        tx_id = normalize_tx_id(tx_id)
        budget = max_attempts if max_attempts is not None else self.max_attempts
        delay = interval if interval is not None else self.interval
        if budget < 1:
            raise ValueError(f"max_attempts must be at least 1, got {budget}")

        state = PollState.WAITING
        attempt = 0
        receipt: Optional[Receipt] = None
        while state is PollState.WAITING:
            attempt += 1
            receipt = self._ledger.query_receipt(tx_id)
            if receipt is not None:
                state = PollState.FOUND
            elif attempt >= budget:
                state = PollState.EXHAUSTED
            else:
                logger.debug("No receipt for %s (attempt %d/%d), waiting %.1fs", tx_id, attempt, budget, delay)
                self._sleep(delay)

        # EXHAUSTED is the only exit without a receipt
        if receipt is None:
            raise OutcomeTimeoutError(tx_id, attempt)

        if receipt.reverted:
            logger.warning("Transaction %s included but reverted", tx_id)
        else:
            logger.info("Transaction %s included in block %s", tx_id, receipt.block_number)
        return receipt


def await_outcome(
    ledger: Ledger,
    tx_id: str,
    max_attempts: Optional[int] = None,
    interval: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Receipt:
    """One-shot form of ``OutcomePoller.await_outcome``."""
    return OutcomePoller(ledger, max_attempts=max_attempts, interval=interval, sleep=sleep).await_outcome(tx_id)
