"""
Event Decoder - Decode raw clause events against ABI event entries.

The pairing of a raw event with an ABI entry is checked, not assumed:
topic 0 must be the Keccak-256 of the event signature (for non-anonymous
events) and the topic count must match the indexed parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..errors import EncodingError, EventSignatureMismatch, UnknownAbiEntry
from .abi import AbiDescriptor, AbiEntry
from .codec import decode_log, event_topic
from .receipt import Event, Output


@dataclass(frozen=True)
class DecodedEvent:
    name: str
    args: dict[str, Any] = field(default_factory=dict)
    address: Optional[str] = None

    def __getitem__(self, key: str) -> Any:
        return self.args[key]


def decode_event(event: Event, entry: AbiEntry) -> DecodedEvent:
    """
    Decode one raw event.

    Raises:
        EventSignatureMismatch: If the event was not emitted by ``entry``
        EncodingError: If the data segment does not decode
    """
    if entry.kind != "event":
        raise EventSignatureMismatch(f"{entry.signature} is a {entry.kind}, not an event")

    expected_topics = sum(1 for p in entry.inputs if p.indexed)
    if not entry.anonymous:
        if not event.topics or event.topics[0] != event_topic(entry):
            got = "0x" + event.topics[0].hex() if event.topics else "<no topics>"
            raise EventSignatureMismatch(f"topic {got} does not match {entry.signature}")
        expected_topics += 1
    if len(event.topics) != expected_topics:
        raise EventSignatureMismatch(
            f"{entry.signature} expects {expected_topics} topic(s), event has {len(event.topics)}"
        )

    args = decode_log(entry, event.topics, event.data)
    return DecodedEvent(name=entry.name, args=args, address=event.address)


class EventDecoder:
    """
    Decodes events of one contract ABI by name or by signature topic.

    An overloaded event name (several declarations, different parameters)
    is resolved per event by its topic 0. A full signature such as
    ``"Moved(uint256)"`` always selects one declaration.
    """

    def __init__(self, descriptor: AbiDescriptor) -> None:
        self._descriptor = descriptor

    def decode(self, event: Event, entry: AbiEntry) -> DecodedEvent:
        return decode_event(event, entry)

    def decode_by_name(self, event: Event, name: str) -> DecodedEvent:
        entries = self._named(name)
        if len(entries) == 1:
            return decode_event(event, entries[0])
        entry = self._by_topic(entries).get(event.topics[0]) if event.topics else None
        if entry is None:
            raise EventSignatureMismatch(f"event does not match any declaration of {name}")
        return decode_event(event, entry)

    def decode_any(self, event: Event) -> Optional[DecodedEvent]:
        """Decode by topic 0, or return None if the ABI declares no such event."""
        if not event.topics:
            return None
        entry = self._descriptor.event_by_topic(event.topics[0])
        if entry is None:
            return None
        return decode_event(event, entry)

    def decode_output(
        self,
        output: Output,
        name: str,
        address: Optional[str] = None,
    ) -> list[DecodedEvent]:
        """
        Decode every event in one clause output matching the named event.

        Events with another signature are skipped. When ``address`` is
        given, only events emitted by that address are considered.
        """
        entries = self._named(name)
        if len(entries) == 1:
            return list(self._matching(output.events, entries[0], address))

        by_topic = self._by_topic(entries)
        decoded = []
        for event in output.events:
            if address is not None and event.address != address.lower():
                continue
            entry = by_topic.get(event.topics[0]) if event.topics else None
            if entry is not None:
                decoded.append(decode_event(event, entry))
        return decoded

    def _named(self, name: str) -> list[AbiEntry]:
        try:
            return [self._descriptor.event(name)]
        except UnknownAbiEntry:
            overloads = [e for e in self._descriptor if e.kind == "event" and e.name == name and not e.anonymous]
            if len(overloads) < 2:
                raise
            return overloads

    @staticmethod
    def _by_topic(entries: Iterable[AbiEntry]) -> dict[bytes, AbiEntry]:
        return {event_topic(e): e for e in entries}

    def _matching(self, events: Iterable[Event], entry: AbiEntry, address: Optional[str]) -> Iterable[DecodedEvent]:
        topic = None if entry.anonymous else event_topic(entry)
        for event in events:
            if address is not None and event.address != address.lower():
                continue
            if topic is not None and (not event.topics or event.topics[0] != topic):
                continue
            try:
                yield decode_event(event, entry)
            except (EventSignatureMismatch, EncodingError):
                if topic is not None:
                    raise
                # Anonymous events have no topic to filter on; skip non-decodable ones
                continue
