"""
Shared fixtures: an in-process fake Thor node running contract A.

Contract A (Solidity):

    contract A {
        uint public a;
        event SetA(uint val);
        constructor(uint _a) { a = _a; }
        function set(uint _a) public { a = _a; emit SetA(_a); }
    }

The fake executes clauses in order, rolls the whole transaction back when
any clause hits an unknown target or selector, and can hold receipts back
for a number of queries to exercise polling. No network access.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

import pytest
from eth_hash.auto import keccak

from clausewright.errors import CallRevertedError
from clausewright.pneuma.receipt import OutcomePoller, Receipt
from clausewright.pneuma.tx import TransactionRequest

A_ABI: list[dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [{"name": "_a", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "a",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "set",
        "inputs": [{"name": "_a", "type": "uint256", "internalType": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "SetA",
        "inputs": [{"name": "val", "type": "uint256", "indexed": False, "internalType": "uint256"}],
        "anonymous": False,
    },
]

A_BYTECODE = "0x6080604052348015600f57600080fd5b50604051"

SENDER = "0x7567d83b7b8d80addcb281a71d54fc7b3364ffed"

SELECTOR_A = keccak(b"a()")[:4]
SELECTOR_SET = keccak(b"set(uint256)")[:4]
TOPIC_SET_A = keccak(b"SetA(uint256)")


def _word(value: int) -> bytes:
    return value.to_bytes(32, "big")


class FakeThor:
    """Ledger + wallet backend standing in for a Thor solo node."""

    def __init__(self, bytecode: str = A_BYTECODE) -> None:
        self.code = bytes.fromhex(bytecode[2:])
        self.storage: dict[str, int] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.pending: dict[str, int] = {}
        self.delay = 0
        self.submitted: list[TransactionRequest] = []
        self.queries: list[str] = []
        self.calls: list[tuple[str, bytes]] = []
        self._nonce = 0
        self.block_number = 1

    # Wallet side

    def submit(self, request: TransactionRequest) -> str:
        self.submitted.append(request)
        self._nonce += 1
        tx_id = "0x" + keccak(self._nonce.to_bytes(8, "big")).hex()

        storage = copy.deepcopy(self.storage)
        outputs = []
        reverted = False
        for index, clause in enumerate(request.clauses):
            output = self._execute(storage, tx_id, index, clause.to, clause.data)
            if output is None:
                reverted = True
                break
            outputs.append(output)

        if reverted:
            outputs = []
        else:
            self.storage = storage

        self.block_number += 1
        self.receipts[tx_id] = {
            "gasUsed": 21000 + 5000 * len(request.clauses),
            "gasPayer": request.sender or SENDER,
            "paid": "0x1236efcbcbb340000",
            "reward": "0x576e189f04f60000",
            "reverted": reverted,
            "meta": {
                "blockID": "0x" + keccak(self.block_number.to_bytes(8, "big")).hex(),
                "blockNumber": self.block_number,
                "blockTimestamp": 1530014400 + 10 * self.block_number,
                "txID": tx_id,
                "txOrigin": request.sender or SENDER,
            },
            "outputs": outputs,
        }
        self.pending[tx_id] = self.delay
        return tx_id

    def _execute(self, storage: dict[str, int], tx_id: str, index: int, to: Optional[str], data: bytes):
        if to is None:
            if not data.startswith(self.code) or len(data) != len(self.code) + 32:
                return None
            address = "0x" + keccak(bytes.fromhex(tx_id[2:]) + bytes([index]))[-20:].hex()
            storage[address] = int.from_bytes(data[len(self.code):], "big")
            return {"contractAddress": address, "events": [], "transfers": []}

        if to not in storage or data[:4] != SELECTOR_SET or len(data) != 36:
            return None
        value = int.from_bytes(data[4:], "big")
        storage[to] = value
        event = {"address": to, "topics": ["0x" + TOPIC_SET_A.hex()], "data": "0x" + _word(value).hex()}
        return {"contractAddress": None, "events": [event], "transfers": []}

    # Ledger side

    def query_receipt(self, tx_id: str) -> Optional[Receipt]:
        self.queries.append(tx_id)
        if tx_id not in self.receipts:
            return None
        if self.pending[tx_id] > 0:
            self.pending[tx_id] -= 1
            return None
        return Receipt.from_dict(self.receipts[tx_id])

    def call(self, address: str, data: bytes, value: int = 0, caller: Optional[str] = None) -> bytes:
        self.calls.append((address, data))
        if address in self.storage and data == SELECTOR_A:
            return _word(self.storage[address])
        raise CallRevertedError("execution reverted")


class RecordingSleep:
    def __init__(self) -> None:
        self.waits: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


@pytest.fixture()
def a_abi() -> list[dict[str, Any]]:
    return copy.deepcopy(A_ABI)


@pytest.fixture()
def a_bytecode() -> str:
    return A_BYTECODE


@pytest.fixture()
def sender() -> str:
    return SENDER


@pytest.fixture()
def thor() -> FakeThor:
    return FakeThor()


@pytest.fixture()
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def poller(thor: FakeThor, sleeper: RecordingSleep) -> OutcomePoller:
    return OutcomePoller(thor, max_attempts=5, interval=10.0, sleep=sleeper)
