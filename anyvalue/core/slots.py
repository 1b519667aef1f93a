# anyvalue/core/slots.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Slot addressing inside container values.

A slot is addressed by a root TaggedValue plus a path of indices and keys,
never by a cached reference into storage. Reading a path never mutates;
writing a path materializes every missing container and slot on the way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

from anyvalue.core.convert import coerce
from anyvalue.core.errors import BadAnyAccessError
from anyvalue.core.kinds import MAX_SEQUENCE_LENGTH, Kind
from anyvalue.core.tagged import SequenceSlots, TaggedValue
from anyvalue.interfaces.types import Slot, SlotPath

if TYPE_CHECKING:
    from anyvalue.core.registry import TypeTag


def _slot_kind(slot: Slot) -> Kind:
    return Kind.SEQUENCE if isinstance(slot, int) else Kind.MAP


def _mismatch(kind: Kind, slot: Slot) -> BadAnyAccessError:
    return BadAnyAccessError(
        f"Cannot address slot {slot!r} of a {kind.name} value", operation="at", kind=kind
    )


def check_addressable(node: TaggedValue, slot: Slot) -> None:
    """
    :raises BadAnyAccessError: If ``slot`` cannot address ``node``.
    """
    if node.kind == Kind.EMPTY and node.tag is None:
        return
    if node.kind != _slot_kind(slot):
        raise _mismatch(node.kind, slot)


def _check_tag_addressable(tag: Optional[TypeTag], slot: Slot) -> None:
    if tag is not None and tag.kind != _slot_kind(slot):
        raise _mismatch(tag.kind, slot)


def _child(node: TaggedValue, slot: Slot) -> Optional[TaggedValue]:
    if node.kind == Kind.EMPTY:
        return None
    return node.payload.get(slot)


def read_slot(root: TaggedValue, path: SlotPath) -> Optional[TaggedValue]:
    """
    Return the value stored at ``path`` or None if any step is absent.
    """
    node = root
    for slot in path:
        check_addressable(node, slot)
        node = _child(node, slot)
        if node is None:
            return None
    return node


def locate(root: TaggedValue, path: SlotPath) -> Tuple[Optional[TaggedValue], Optional[TypeTag]]:
    """
    Validate that every step of ``path`` is addressable, either now or once
    vivified, without mutating anything.

    :return: The value at ``path`` (None when virtual) and the tag a write
        there must coerce into.
    """
    node: Optional[TaggedValue] = root
    tag = root.tag
    for slot in path:
        if node is not None:
            check_addressable(node, slot)
            element = node.element
            node = _child(node, slot)
        else:
            _check_tag_addressable(tag, slot)
            element = tag.element if tag is not None else None
        tag = node.tag if node is not None else element
    return node, tag


def _vivify_container(node: TaggedValue, slot: Slot) -> None:
    if node.kind != Kind.EMPTY:
        return
    if isinstance(slot, int):
        node.kind, node.payload = Kind.SEQUENCE, SequenceSlots()
    else:
        node.kind, node.payload = Kind.MAP, {}


def _store(node: TaggedValue, slot: Slot, value: TaggedValue) -> None:
    if node.kind == Kind.SEQUENCE:
        node.payload.set(slot, value)
    else:
        node.payload[slot] = value


def materialize(root: TaggedValue, path: SlotPath) -> TaggedValue:
    """
    Create every missing container and slot along ``path`` and return the
    value at its end. Callers validate the path with ``locate`` first.
    """
    node = root
    for slot in path:
        _vivify_container(node, slot)
        child = node.payload.get(slot)
        if child is None:
            element = node.element
            child = element.construct() if element is not None else TaggedValue()
            _store(node, slot, child)
        node = child
    return node


def write_slot(root: TaggedValue, path: SlotPath, value: object) -> TaggedValue:
    """
    Assign ``value`` at ``path``, vivifying the way there. The value is
    coerced before anything is touched, so a failure leaves ``root`` intact.
    """
    _, tag = locate(root, path)
    converted = coerce(value, tag)
    parent = materialize(root, path[:-1])
    _vivify_container(parent, path[-1])
    _store(parent, path[-1], converted)
    return converted


def append_slot(root: TaggedValue, path: SlotPath, value: object) -> int:
    """Assign ``value`` one past the end of the sequence at ``path``; return its index."""
    current = read_slot(root, path)
    index = len(current.payload) if current is not None and current.kind == Kind.SEQUENCE else 0
    write_slot(root, path + (index,), value)
    return index


def resize_slot(root: TaggedValue, path: SlotPath, length: int) -> None:
    if isinstance(length, bool) or not isinstance(length, int) or not 0 <= length <= MAX_SEQUENCE_LENGTH:
        raise BadAnyAccessError(f"Invalid sequence length {length!r}", operation="resize")
    locate(root, path + (0,))
    node = materialize(root, path)
    _vivify_container(node, 0)
    node.payload.resize(length)
