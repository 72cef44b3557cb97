"""
Transaction requests - Group clauses, submit them, await the outcome.

Signing is external: a ``Wallet`` receives the ordered clauses plus the
sender and returns the submitted transaction id. All clauses of one
request execute in order under that sender.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol

from ..errors import PreconditionError, ReceiptMismatchError
from ..utils import normalize_address
from .clause import Clause
from .receipt import OutcomePoller, Receipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionRequest:
    """
    Attributes:
        clauses: Ordered, non-empty clauses
        sender: Signer address (None lets the wallet pick its default)
        gas: Gas limit hint (None lets the wallet estimate)
        comment: Free-form note shown by interactive wallets
    """
    clauses: tuple[Clause, ...]
    sender: Optional[str] = None
    gas: Optional[int] = None
    comment: Optional[str] = None

    @classmethod
    def of(
        cls,
        clauses: Iterable[Clause],
        sender: Optional[str] = None,
        gas: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> "TransactionRequest":
        clauses = tuple(clauses)
        if not clauses:
            raise PreconditionError("a transaction needs at least one clause")
        return cls(
            clauses=clauses,
            sender=normalize_address(sender) if sender else None,
            gas=gas,
            comment=comment,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"clauses": [c.to_dict() for c in self.clauses]}
        if self.sender:
            result["signer"] = self.sender
        if self.gas is not None:
            result["gas"] = self.gas
        if self.comment:
            result["comment"] = self.comment
        return result


class Wallet(Protocol):
    def submit(self, request: TransactionRequest) -> str:
        ...


def check_outputs(request: TransactionRequest, receipt: Receipt) -> Receipt:
    """
    Enforce the clause/output correspondence on an included transaction.

    Reverted receipts carry no outputs and are returned untouched.
    """
    if not receipt.reverted and len(receipt.outputs) != len(request.clauses):
        raise ReceiptMismatchError(
            f"receipt {receipt.tx_id} has {len(receipt.outputs)} output(s) "
            f"for {len(request.clauses)} clause(s)"
        )
    return receipt


def transact(
    wallet: Wallet,
    poller: OutcomePoller,
    clauses: Iterable[Clause],
    sender: Optional[str] = None,
    gas: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> Receipt:
    """
    Submit clauses as one transaction and wait for its receipt.

    Args:
        wallet: Signs and submits the request
        poller: Waits for the outcome
        clauses: Ordered clauses
        sender: Signer address
        gas: Gas limit hint
        max_attempts: Override the poller's retry budget

    Returns:
        The receipt, reverted or not

    Raises:
        OutcomeTimeoutError: If the receipt is not observed in time
        ReceiptMismatchError: If outputs do not line up with clauses
    """
    request = TransactionRequest.of(clauses, sender=sender, gas=gas)
    tx_id = wallet.submit(request)
    logger.info("Submitted %d clause(s) as %s", len(request.clauses), tx_id)
    receipt = poller.await_outcome(tx_id, max_attempts=max_attempts)
    return check_outputs(request, receipt)
