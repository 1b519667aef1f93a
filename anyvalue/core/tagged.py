# anyvalue/core/tagged.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Tuple

from anyvalue.core.kinds import Kind
from anyvalue.interfaces.types import AdapterId

if TYPE_CHECKING:
    from anyvalue.core.registry import TypeTag


class SequenceSlots:
    """
    Sparse, position-indexed storage for a Sequence value. Slots that were
    never written are implicit empties; the length is one past the highest
    index ever written (or the size given to ``resize``).
    """

    def __init__(self, items: Optional[Dict[int, TaggedValue]] = None, length: int = 0) -> None:
        self._items: Dict[int, TaggedValue] = items or {}
        self._length = max(length, max(self._items) + 1 if self._items else 0)

    def __len__(self) -> int:
        return self._length

    def get(self, index: int) -> Optional[TaggedValue]:
        return self._items.get(index)

    def set(self, index: int, value: TaggedValue) -> None:
        self._items[index] = value
        if index >= self._length:
            self._length = index + 1

    def append(self, value: TaggedValue) -> None:
        self.set(self._length, value)

    def resize(self, length: int) -> None:
        """Truncate or extend the sequence. Extension adds empty slots."""
        if length < self._length:
            for index in [i for i in self._items if i >= length]:
                del self._items[index]
        self._length = length

    def items(self) -> Iterator[Tuple[int, TaggedValue]]:
        """Yield written slots in index order."""
        for index in sorted(self._items):
            yield index, self._items[index]

    def copy(self) -> SequenceSlots:
        return SequenceSlots({i: v.copy() for i, v in self._items.items()}, self._length)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SequenceSlots):
            return NotImplemented
        if self._length != other._length:
            return False
        for index in set(self._items) | set(other._items):
            mine = self._items.get(index, _EMPTY)
            theirs = other._items.get(index, _EMPTY)
            if not values_equal(mine, theirs):
                return False
        return True

    def __repr__(self) -> str:
        return f"SequenceSlots(length={self._length}, written={len(self._items)})"


@dataclass(eq=False)
class TaggedValue:
    """
    The discriminated union carried by an Any. ``payload`` holds:

    - EMPTY: None
    - INT64 / UINT64: int, already truncated to the declared width
    - DOUBLE: float
    - CHAR: int code point
    - STRING: str
    - SEQUENCE: SequenceSlots
    - MAP: dict of str to TaggedValue
    - OBJECT: bytes, with ``adapter_id`` naming the adapter that owns them

    ``tag`` is the registry tag the value was declared with, or None for
    untyped values whose kind follows whatever was last assigned.
    """

    kind: Kind = Kind.EMPTY
    payload: object = None
    tag: Optional[TypeTag] = None
    adapter_id: Optional[AdapterId] = None

    @property
    def width(self) -> int:
        return self.tag.width if self.tag is not None else 64

    @property
    def signed(self) -> bool:
        if self.tag is not None:
            return self.tag.signed
        return self.kind != Kind.UINT64

    @property
    def element(self) -> Optional[TypeTag]:
        """Declared element tag of a container, None when children are untyped."""
        return self.tag.element if self.tag is not None else None

    def is_empty(self) -> bool:
        return self.kind == Kind.EMPTY

    def copy(self) -> TaggedValue:
        if self.kind == Kind.SEQUENCE:
            payload = self.payload.copy()
        elif self.kind == Kind.MAP:
            payload = {key: child.copy() for key, child in self.payload.items()}
        else:
            # scalars and object bytes are immutable
            payload = self.payload
        return TaggedValue(self.kind, payload, self.tag, self.adapter_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedValue):
            return NotImplemented
        return values_equal(self, other)

    def __repr__(self) -> str:
        tag = self.tag.name if self.tag is not None else None
        return f"TaggedValue(kind={self.kind.name}, tag={tag!r}, payload={self.payload!r})"


_EMPTY = TaggedValue()


def empty_value() -> TaggedValue:
    return TaggedValue()


def provisional(tag: TypeTag) -> TaggedValue:
    """
    Build the default value of a tag: numeric zero, empty string, empty
    container, or an empty byte buffer bound to the tag's adapter.
    """
    kind = tag.kind
    if kind.is_integral or kind == Kind.CHAR:
        return TaggedValue(kind, 0, tag)
    if kind == Kind.DOUBLE:
        return TaggedValue(kind, 0.0, tag)
    if kind == Kind.STRING:
        return TaggedValue(kind, "", tag)
    if kind == Kind.SEQUENCE:
        return TaggedValue(kind, SequenceSlots(), tag)
    if kind == Kind.MAP:
        return TaggedValue(kind, {}, tag)
    if kind == Kind.OBJECT:
        return TaggedValue(kind, b"", tag, tag.adapter_id)
    return TaggedValue(tag=tag)


def copy_value(value: TaggedValue) -> TaggedValue:
    return value.copy()


def values_equal(left: TaggedValue, right: TaggedValue) -> bool:
    """
    Structural equality. Declared tags are ignored so an int32 holding 5
    equals an untyped 5; empty children compare equal to absent ones.
    """
    if left.kind != right.kind:
        return False
    if left.kind == Kind.MAP:
        keys = set(left.payload) | set(right.payload)
        return all(
            values_equal(left.payload.get(key, _EMPTY), right.payload.get(key, _EMPTY)) for key in keys
        )
    if left.kind == Kind.OBJECT:
        return left.adapter_id == right.adapter_id and left.payload == right.payload
    return left.payload == right.payload
