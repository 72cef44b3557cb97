"""
Error taxonomy for the clause harness.

Every error raised by clausewright derives from ``HarnessError`` so test
code can catch the whole family, while the CLI maps ``exit_code`` to the
process exit status.
"""

from __future__ import annotations

from typing import Optional


class HarnessError(RuntimeError):
    exit_code: int = 1


class EncodingError(HarnessError):
    """Argument/type mismatch while ABI-encoding or decoding."""

    exit_code = 2

    def __init__(self, message: str, entry: Optional[str] = None) -> None:
        super().__init__(f"{entry}: {message}" if entry else message)
        self.entry = entry


class AbiValidationError(HarnessError):
    exit_code = 2

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class UnknownAbiEntry(HarnessError):
    exit_code = 3

    def __init__(self, name: str, kind: str = "function", arity: Optional[int] = None) -> None:
        where = f"{kind} {name!r}"
        if arity is not None:
            where += f" with {arity} argument(s)"
        super().__init__(f"No ABI entry matches {where}")
        self.name = name
        self.kind = kind
        self.arity = arity


class EventSignatureMismatch(HarnessError):
    exit_code = 3


class PreconditionError(HarnessError):
    exit_code = 4


class AlreadyBoundError(HarnessError):
    exit_code = 4

    def __init__(self, bound: str, requested: str) -> None:
        super().__init__(f"Contract already bound to {bound}, refusing to rebind to {requested}")
        self.bound = bound
        self.requested = requested


class OutcomeTimeoutError(HarnessError, TimeoutError):
    exit_code = 5

    def __init__(self, tx_id: str, attempts: int) -> None:
        super().__init__(f"Transaction {tx_id} not observed after {attempts} attempt(s)")
        self.tx_id = tx_id
        self.attempts = attempts


class CallRevertedError(HarnessError):
    exit_code = 6

    def __init__(self, vm_error: str = "", data: bytes = b"") -> None:
        super().__init__(f"Call reverted: {vm_error or 'no reason given'}")
        self.vm_error = vm_error
        self.data = data


class ReceiptMismatchError(HarnessError):
    exit_code = 7


class NodeError(HarnessError):
    """The node answered with a non-success HTTP status."""

    exit_code = 8

    def __init__(self, status: int, body: str, path: str = "") -> None:
        super().__init__(f"Node error {status} on {path or '<request>'}: {body.strip()}")
        self.status = status
        self.body = body
        self.path = path


__all__ = [
    "AbiValidationError",
    "AlreadyBoundError",
    "CallRevertedError",
    "EncodingError",
    "EventSignatureMismatch",
    "HarnessError",
    "NodeError",
    "OutcomeTimeoutError",
    "PreconditionError",
    "ReceiptMismatchError",
    "UnknownAbiEntry",
]
