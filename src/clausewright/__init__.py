__all__ = [
    # ABI
    "AbiDescriptor",
    "AbiEntry",
    "AbiParam",
    "load_abi",
    "load_bytecode",
    "load_contract",
    "find_artifact",
    "validate_abi",
    # Codec
    "encode_call",
    "decode_return",
    "decode_return_named",
    "decode_log",
    "selector",
    "event_topic",
    # Clauses & contracts
    "Clause",
    "build_call_clause",
    "build_deploy_clause",
    "build_transfer_clause",
    "Contract",
    # Outcomes
    "CallResult",
    "Event",
    "Output",
    "Receipt",
    "Transfer",
    "OutcomePoller",
    "await_outcome",
    # Events
    "DecodedEvent",
    "EventDecoder",
    "decode_event",
    # Transactions
    "TransactionRequest",
    "Wallet",
    "transact",
    "ThorClient",
    "RawTxWallet",
    # Keys
    "address_of",
    "generate_key",
    "load_private_keys",
    # Config
    "HarnessConfig",
    # Errors
    "HarnessError",
    "AbiValidationError",
    "AlreadyBoundError",
    "CallRevertedError",
    "EncodingError",
    "EventSignatureMismatch",
    "NodeError",
    "OutcomeTimeoutError",
    "PreconditionError",
    "ReceiptMismatchError",
    "UnknownAbiEntry",
]

from .config import HarnessConfig
from .errors import (
    AbiValidationError,
    AlreadyBoundError,
    CallRevertedError,
    EncodingError,
    EventSignatureMismatch,
    HarnessError,
    NodeError,
    OutcomeTimeoutError,
    PreconditionError,
    ReceiptMismatchError,
    UnknownAbiEntry,
)
from .pneuma.abi import (
    AbiDescriptor,
    AbiEntry,
    AbiParam,
    find_artifact,
    load_abi,
    load_bytecode,
    load_contract,
    validate_abi,
)
from .pneuma.codec import decode_log, decode_return, decode_return_named, encode_call, event_topic, selector
from .pneuma.clause import Clause, build_call_clause, build_deploy_clause, build_transfer_clause
from .pneuma.contract import Contract
from .pneuma.events import DecodedEvent, EventDecoder, decode_event
from .pneuma.receipt import CallResult, Event, OutcomePoller, Output, Receipt, Transfer, await_outcome
from .pneuma.rpc import RawTxWallet, ThorClient
from .pneuma.tx import TransactionRequest, Wallet, transact
from .sigil.keys import address_of, generate_key, load_private_keys
