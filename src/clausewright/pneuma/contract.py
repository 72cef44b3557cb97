"""
Contract Handle - ABI-driven facade for one contract under test.

Example
-------
    client = ThorClient()
    a = Contract.from_artifact("out/A.sol/A.json", ledger=client)

    receipt = transact(wallet, poller, [a.deploy(0, 100)], sender=sender)
    a.at(receipt.outputs[0].contract_address)
    assert a.call("a") == 100

    receipt = transact(wallet, poller, [a.send("set", 0, 200), a.send("set", 0, 300)])
    assert a.decode_events(receipt.outputs[1], "SetA")[0]["val"] == 300

The bound address is a write-once cell: ``at`` may be repeated with the
same address but never with a different one.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from ..errors import AlreadyBoundError, PreconditionError
from ..utils import normalize_address
from .abi import AbiDescriptor, AbiEntry, load_contract
from .clause import Clause, build_call_clause, build_deploy_clause
from .codec import decode_return, encode_call
from .events import DecodedEvent, EventDecoder
from .receipt import Event, Ledger, Output


class Contract:
    """
    Args:
        abi: AbiDescriptor, ABI list, or ABI JSON text
        bytecode: Creation bytecode (hex or bytes); required by ``deploy``
        address: Address of an already deployed instance
        ledger: Ledger used by ``call``; clause building needs none
    """

    def __init__(
        self,
        abi: Union[AbiDescriptor, str, Sequence[dict[str, Any]]],
        bytecode: Optional[Union[str, bytes]] = None,
        address: Optional[str] = None,
        ledger: Optional[Ledger] = None,
    ) -> None:
        self._descriptor = abi if isinstance(abi, AbiDescriptor) else AbiDescriptor.from_json(abi)
        self._bytecode = bytecode
        self._ledger = ledger
        self._events = EventDecoder(self._descriptor)
        self._address: Optional[str] = None
        if address is not None:
            self.at(address)

    @classmethod
    def from_artifact(
        cls,
        path: Union[str, Path],
        ledger: Optional[Ledger] = None,
        address: Optional[str] = None,
    ) -> "Contract":
        descriptor, bytecode = load_contract(Path(path))
        return cls(descriptor, bytecode=bytecode, address=address, ledger=ledger)

    def __repr__(self) -> str:
        return f"Contract(address={self._address!r}, entries={len(self._descriptor)})"

    # ------------------------------------------------------------------ Accessors

    @property
    def abi(self) -> AbiDescriptor:
        return self._descriptor

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def bytecode(self) -> Optional[Union[str, bytes]]:
        return self._bytecode

    @property
    def is_bound(self) -> bool:
        return self._address is not None

    def function(self, name: str, arity: Optional[int] = None) -> AbiEntry:
        return self._descriptor.function(name, arity)

    def event(self, name: str) -> AbiEntry:
        return self._descriptor.event(name)

    # ------------------------------------------------------------------ Binding

    def at(self, address: str) -> "Contract":
        """
        Bind the handle to a deployed address.

        Raises:
            AlreadyBoundError: If already bound to a different address
        """
        normalized = normalize_address(address)
        if self._address is None:
            self._address = normalized
        elif self._address != normalized:
            raise AlreadyBoundError(self._address, normalized)
        return self

    def _require_address(self, operation: str) -> str:
        if self._address is None:
            raise PreconditionError(f"{operation}() needs a bound address; call at() first")
        return self._address

    # ------------------------------------------------------------------ Clauses

    def deploy(self, value: int = 0, *args: Any) -> Clause:
        """Build the creation clause. Does not bind the handle."""
        if not self._bytecode:
            raise PreconditionError("deploy() needs bytecode on the contract handle")
        return build_deploy_clause(self._bytecode, self._descriptor.constructor, args, value)

    def send(self, name: str, value: int = 0, *args: Any) -> Clause:
        """
        Build a call clause for a state-mutating function.

        Raises:
            PreconditionError: For view/pure functions (use ``call``), or a
                non-zero value sent to a non-payable function
        """
        address = self._require_address("send")
        entry = self._descriptor.function(name, len(args))
        if entry.is_constant:
            raise PreconditionError(f"{entry.signature} is {entry.state_mutability}; read it with call()")
        if value and not entry.is_payable:
            raise PreconditionError(f"{entry.signature} is not payable; cannot send value {value}")
        return build_call_clause(address, entry, args, value)

    # ------------------------------------------------------------------ Reads

    def call(self, name: str, *args: Any, caller: Optional[str] = None) -> Any:
        """
        Simulate a call on current chain state and decode the result.

        Returns:
            The single output value, a tuple for several outputs, or None
            for a function without outputs

        Raises:
            CallRevertedError: If the simulated execution reverts
        """
        address = self._require_address("call")
        entry = self._descriptor.function(name, len(args))
        if self._ledger is None:
            raise PreconditionError("call() needs a ledger on the contract handle")

        raw = self._ledger.call(address, encode_call(entry, args), 0, caller)
        values = decode_return(entry, raw)
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return values

    # ------------------------------------------------------------------ Events

    def decode_event(self, event: Event, name: str) -> DecodedEvent:
        return self._events.decode_by_name(event, name)

    def decode_events(self, output: Output, name: str) -> list[DecodedEvent]:
        """Decode the named events this contract emitted within one clause output."""
        return self._events.decode_output(output, name, address=self._address)
