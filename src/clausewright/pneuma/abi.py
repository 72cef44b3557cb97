"""
ABI Descriptor - Parses compiler ABI output into an immutable lookup table.

The compiler toolchain is external: Python only consumes its JSON output,
either a bare ABI list or an artifact file carrying ``abi`` and
``bytecode``. Entries are validated against the bundled JSON Schema and
indexed once by (kind, name, arity) so that name resolution is a map
lookup with an explicit not-found branch.

Overload rule: a name declared once resolves regardless of the number of
arguments supplied (a wrong arity then fails at encoding time). A name
declared several times resolves by exact arity. A full signature such as
``"set(uint256)"`` always selects exactly one entry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

import jsonschema
from jsonschema import FormatChecker

from ..errors import AbiValidationError, UnknownAbiEntry
from ..utils import keccak256

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "abi.schema.json"

ARTIFACT_CANDIDATES = (
    "out/{name}.sol/{name}.json",  # Foundry
    "artifacts/{name}.json",
    "build/contracts/{name}.json",  # Truffle
    "build/{name}.json",
)


@dataclass(frozen=True)
class AbiParam:
    name: str
    type: str
    indexed: bool = False
    components: tuple["AbiParam", ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AbiParam":
        return cls(
            name=payload.get("name", ""),
            type=payload["type"],
            indexed=bool(payload.get("indexed", False)),
            components=tuple(cls.from_dict(c) for c in payload.get("components", [])),
        )

    @property
    def canonical_type(self) -> str:
        """Type string as used in signatures and by eth-abi."""
        if self.type.startswith("tuple"):
            inner = ",".join(c.canonical_type for c in self.components)
            return f"({inner}){self.type[len('tuple'):]}"
        return self.type

    @property
    def is_dynamic(self) -> bool:
        """True for types whose indexed event topic holds a hash, not the value."""
        t = self.type
        return t in ("string", "bytes") or t.endswith("]") or t.startswith("tuple")


@dataclass(frozen=True)
class AbiEntry:
    kind: str
    name: str = ""
    inputs: tuple[AbiParam, ...] = ()
    outputs: tuple[AbiParam, ...] = ()
    state_mutability: str = "nonpayable"
    anonymous: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AbiEntry":
        mutability = payload.get("stateMutability")
        if mutability is None:
            # Pre-0.4.16 compilers only emit the constant/payable flags
            if payload.get("payable"):
                mutability = "payable"
            elif payload.get("constant"):
                mutability = "view"
            else:
                mutability = "nonpayable"
        return cls(
            kind=payload["type"],
            name=payload.get("name", ""),
            inputs=tuple(AbiParam.from_dict(p) for p in payload.get("inputs", [])),
            outputs=tuple(AbiParam.from_dict(p) for p in payload.get("outputs", [])),
            state_mutability=mutability,
            anonymous=bool(payload.get("anonymous", False)),
        )

    @property
    def arity(self) -> int:
        return len(self.inputs)

    @property
    def input_types(self) -> list[str]:
        return [p.canonical_type for p in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [p.canonical_type for p in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def is_constant(self) -> bool:
        return self.state_mutability in ("view", "pure")

    @property
    def is_payable(self) -> bool:
        return self.state_mutability == "payable"


IMPLICIT_CONSTRUCTOR = AbiEntry(kind="constructor")


@lru_cache(maxsize=1)
def _abi_validator() -> jsonschema.Validator:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=FormatChecker())


def validate_abi(abi: Any) -> None:
    """
    Validate a raw ABI against the bundled schema.

    Raises:
        AbiValidationError: With one formatted message per violation
    """
    errors = sorted(_abi_validator().iter_errors(abi), key=lambda e: list(e.path))
    if errors:
        formatted = []
        for err in errors:
            location = "/".join(str(part) for part in err.path) or "<root>"
            formatted.append(f"{location}: {err.message}")
        raise AbiValidationError("ABI validation failed.", errors=formatted)


class AbiDescriptor:
    """
    Immutable, indexed view of a contract ABI.

    Shared read-only by contract handles, clause builders and event
    decoders.
    """

    def __init__(self, entries: Sequence[AbiEntry]) -> None:
        self._entries: tuple[AbiEntry, ...] = tuple(entries)
        by_name: dict[tuple[str, str], list[AbiEntry]] = {}
        by_arity: dict[tuple[str, str, int], list[AbiEntry]] = {}
        by_signature: dict[tuple[str, str], AbiEntry] = {}
        for entry in self._entries:
            by_name.setdefault((entry.kind, entry.name), []).append(entry)
            by_arity.setdefault((entry.kind, entry.name, entry.arity), []).append(entry)
            by_signature.setdefault((entry.kind, entry.signature), entry)
        self._by_name = {k: tuple(v) for k, v in by_name.items()}
        self._by_arity = {k: tuple(v) for k, v in by_arity.items()}
        self._by_signature = by_signature

    @classmethod
    def from_json(cls, abi: Union[str, Sequence[dict[str, Any]]], validate: bool = True) -> "AbiDescriptor":
        """Build a descriptor from an ABI list or its JSON text."""
        if isinstance(abi, str):
            abi = json.loads(abi)
        if validate:
            validate_abi(abi)
        return cls([AbiEntry.from_dict(item) for item in abi])

    def __iter__(self) -> Iterator[AbiEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[AbiEntry, ...]:
        return self._entries

    @property
    def constructor(self) -> AbiEntry:
        """The declared constructor, or an implicit no-argument one."""
        declared = self._by_name.get(("constructor", ""), ())
        return declared[0] if declared else IMPLICIT_CONSTRUCTOR

    def resolve(self, kind: str, name: str, arity: Optional[int] = None) -> AbiEntry:
        """
        Resolve an entry by name (or full signature) and optional arity.

        Raises:
            UnknownAbiEntry: If nothing matches, or an overloaded name is
                ambiguous for the given arity
        """
        if "(" in name:
            entry = self._by_signature.get((kind, name.replace(" ", "")))
            if entry is None:
                raise UnknownAbiEntry(name, kind)
            return entry

        candidates = self._by_name.get((kind, name), ())
        if not candidates:
            raise UnknownAbiEntry(name, kind)
        if len(candidates) == 1:
            return candidates[0]

        matches = self._by_arity.get((kind, name, arity), ()) if arity is not None else ()
        if len(matches) != 1:
            raise UnknownAbiEntry(name, kind, arity)
        return matches[0]

    def function(self, name: str, arity: Optional[int] = None) -> AbiEntry:
        return self.resolve("function", name, arity)

    def event(self, name: str, arity: Optional[int] = None) -> AbiEntry:
        return self.resolve("event", name, arity)

    @cached_property
    def _events_by_topic(self) -> dict[bytes, AbiEntry]:
        return {
            keccak256(e.signature.encode("utf-8")): e
            for e in self._entries
            if e.kind == "event" and not e.anonymous
        }

    def event_by_topic(self, topic: bytes) -> Optional[AbiEntry]:
        return self._events_by_topic.get(bytes(topic))


# ---------------------------------------------------------------------------
# Compiler artifacts
# ---------------------------------------------------------------------------

def find_artifact(contract_name: str, start: Optional[Path] = None) -> Path:
    """
    Locate the compiled artifact for a contract.

    Searches from ``start`` (default: the working directory) upward through
    the usual Foundry/Truffle output layouts.
    """
    start = (start or Path.cwd()).resolve()
    for parent in [start, *start.parents]:
        for pattern in ARTIFACT_CANDIDATES:
            candidate = parent / pattern.format(name=contract_name)
            if candidate.is_file():
                return candidate
    raise FileNotFoundError(
        f"Cannot find a compiled artifact for {contract_name}. "
        f"Compile the contract before running the tests."
    )


@lru_cache(maxsize=32)
def _read_artifact(path: str) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def load_abi(path: Path) -> AbiDescriptor:
    """
    Load the ABI from an artifact file.

    Accepts a bare ABI list, or an object with an ``abi`` key holding a
    list or its JSON text (solc --combined-json).
    """
    artifact = _read_artifact(str(Path(path).resolve()))
    abi = artifact if isinstance(artifact, list) else artifact.get("abi")
    if abi is None:
        raise AbiValidationError(f"No ABI in artifact {path}")
    return AbiDescriptor.from_json(abi)


def load_bytecode(path: Path) -> Optional[str]:
    """
    Load deployment bytecode from an artifact file.

    Returns:
        0x-prefixed hex bytecode, or None when the artifact carries none
        (interfaces, bare ABI files)
    """
    artifact = _read_artifact(str(Path(path).resolve()))
    if isinstance(artifact, list):
        return None
    bytecode = artifact.get("bytecode", artifact.get("bin"))
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    if not bytecode:
        return None
    return bytecode if bytecode.startswith("0x") else "0x" + bytecode


def load_contract(path: Path) -> tuple[AbiDescriptor, Optional[str]]:
    return load_abi(path), load_bytecode(path)
