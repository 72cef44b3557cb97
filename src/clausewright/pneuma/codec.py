"""
ABI Codec - Pure encode/decode transforms over ABI entries.

Thin adapter over eth-abi. Integers stay arbitrary-precision Python ints
end to end; out-of-range values are rejected, never truncated.
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_abi.exceptions import EncodingError as _AbiEncodingError

from ..errors import EncodingError
from ..utils import hex_to_bytes, keccak256, strip_0x
from .abi import AbiEntry, AbiParam

SELECTOR_LENGTH = 4


def selector(entry: AbiEntry) -> bytes:
    """First 4 bytes of the Keccak-256 of the function signature."""
    return keccak256(entry.signature.encode("utf-8"))[:SELECTOR_LENGTH]


def event_topic(entry: AbiEntry) -> bytes:
    """Topic 0 emitted by a non-anonymous event."""
    return keccak256(entry.signature.encode("utf-8"))


def _element_param(param: AbiParam) -> AbiParam:
    base = param.type[: param.type.rindex("[")]
    return AbiParam(name=param.name, type=base, components=param.components)


def _coerce(param: AbiParam, value: Any) -> Any:
    """Accept the loose value forms test code tends to pass."""
    t = param.type
    if t.endswith("]"):
        if not isinstance(value, (list, tuple)):
            raise EncodingError(f"expected a sequence for {param.name or t}, got {type(value).__name__}")
        element = _element_param(param)
        return [_coerce(element, v) for v in value]
    if t == "tuple":
        if isinstance(value, dict):
            try:
                value = [value[c.name] for c in param.components]
            except KeyError as exc:
                raise EncodingError(f"missing tuple field {exc.args[0]!r} for {param.name or t}") from exc
        if not isinstance(value, (list, tuple)) or len(value) != len(param.components):
            raise EncodingError(f"expected {len(param.components)} tuple fields for {param.name or t}")
        return tuple(_coerce(c, v) for c, v in zip(param.components, value))
    if isinstance(value, str):
        if t.startswith(("uint", "int")):
            try:
                return int(value, 16) if value[:2] in ("0x", "0X") else int(value, 10)
            except ValueError as exc:
                raise EncodingError(f"not an integer for {param.name or t}: {value!r}") from exc
        if t.startswith("bytes"):
            try:
                return hex_to_bytes(value)
            except ValueError as exc:
                raise EncodingError(f"not hex bytes for {param.name or t}: {value!r}") from exc
    return value


def encode_arguments(params: Sequence[AbiParam], args: Sequence[Any], name: str = "") -> bytes:
    """
    ABI-encode positional arguments for a parameter list.

    Raises:
        EncodingError: On arity mismatch or a value eth-abi rejects
    """
    if len(args) != len(params):
        raise EncodingError(f"expected {len(params)} argument(s), got {len(args)}", entry=name or None)
    if not params:
        return b""
    types = [p.canonical_type for p in params]
    values = [_coerce(p, v) for p, v in zip(params, args)]
    try:
        return encode(types, values)
    except (_AbiEncodingError, TypeError, ValueError, OverflowError) as exc:
        raise EncodingError(str(exc), entry=name or None) from exc


def encode_call(entry: AbiEntry, args: Sequence[Any]) -> bytes:
    """
    Encode call data for an entry.

    Functions get the 4-byte selector prepended; constructors encode the
    arguments only, to be appended to the creation bytecode.
    """
    encoded = encode_arguments(entry.inputs, args, name=entry.signature)
    if entry.kind == "constructor":
        return encoded
    return selector(entry) + encoded


def _restore(param: AbiParam, value: Any) -> Any:
    """Map eth-abi output back to the forms encoding accepts: arrays as lists, lowercase addresses."""
    t = param.type
    if t.endswith("]"):
        element = _element_param(param)
        return [_restore(element, v) for v in value]
    if t == "tuple":
        return tuple(_restore(c, v) for c, v in zip(param.components, value))
    if t == "address":
        return value.lower()
    return value


def decode_arguments(params: Sequence[AbiParam], data: bytes, name: str = "") -> tuple[Any, ...]:
    if not params:
        return ()
    types = [p.canonical_type for p in params]
    try:
        values = decode(types, bytes(data))
    except (DecodingError, TypeError, ValueError, OverflowError) as exc:
        raise EncodingError(f"cannot decode {len(data)} byte(s): {exc}", entry=name or None) from exc
    return tuple(_restore(p, v) for p, v in zip(params, values))


def decode_input(entry: AbiEntry, data: bytes) -> tuple[Any, ...]:
    """Decode the arguments of function call data (selector included)."""
    data = bytes(data)
    if data[:SELECTOR_LENGTH] != selector(entry):
        raise EncodingError("call data selector does not match", entry=entry.signature)
    return decode_arguments(entry.inputs, data[SELECTOR_LENGTH:], name=entry.signature)


def decode_return(entry: AbiEntry, data: bytes) -> tuple[Any, ...]:
    """Decode return data into an ordered tuple of output values."""
    return decode_arguments(entry.outputs, data, name=entry.signature)


def decode_return_named(entry: AbiEntry, data: bytes) -> dict[str, Any]:
    """Decoded outputs keyed by position ("0", "1", ...) and by name when named."""
    values = decode_return(entry, data)
    result: dict[str, Any] = {}
    for i, (param, value) in enumerate(zip(entry.outputs, values)):
        result[str(i)] = value
        if param.name:
            result[param.name] = value
    return result


def decode_log(entry: AbiEntry, topics: Sequence[bytes], data: bytes) -> dict[str, Any]:
    """
    Decode an event log against its ABI entry.

    Indexed parameters are read from the topics in declaration order
    (topic 0 is the signature hash unless the event is anonymous); indexed
    dynamic values come back as their 32-byte topic hash. Non-indexed
    parameters are decoded from the data segment. Values are keyed by
    position ("0", "1", ...) and also by name when the parameter is named.
    """
    indexed = [p for p in entry.inputs if p.indexed]
    plain = [p for p in entry.inputs if not p.indexed]
    value_topics = list(topics) if entry.anonymous else list(topics[1:])
    if len(value_topics) != len(indexed):
        raise EncodingError(
            f"expected {len(indexed)} indexed topic(s), got {len(value_topics)}",
            entry=entry.signature,
        )

    topic_values = iter(
        bytes(topic) if param.is_dynamic else decode_arguments([param], topic, name=entry.signature)[0]
        for param, topic in zip(indexed, value_topics)
    )
    data_values = iter(decode_arguments(plain, data, name=entry.signature))

    result: dict[str, Any] = {}
    for i, param in enumerate(entry.inputs):
        value = next(topic_values) if param.indexed else next(data_values)
        result[str(i)] = value
        if param.name:
            result[param.name] = value
    return result


def normalize_bytecode(bytecode: str | bytes) -> bytes:
    if isinstance(bytecode, str) and not strip_0x(bytecode):
        raise EncodingError("empty bytecode")
    try:
        return hex_to_bytes(bytecode)
    except ValueError as exc:
        raise EncodingError(f"invalid bytecode: {exc}") from exc
