# anyvalue/core/ref.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

from anyvalue.core.base import AnyBase, to_native
from anyvalue.core.slots import locate, read_slot, write_slot
from anyvalue.core.tagged import TaggedValue
from anyvalue.interfaces.types import Slot, SlotPath

if TYPE_CHECKING:
    from anyvalue.core.any import Any
    from anyvalue.core.registry import TypeRegistry


class AnyRef(AnyBase):
    """
    Vivifying accessor for one slot of a container-kind Any.

    An AnyRef is a pure address: the owning Any plus a path of indices and
    keys. Reading through it observes whatever is stored there now, or
    reports empty for a virtual slot. Assigning through it creates the slot
    and any missing containers above it. Two refs with the same owner and
    path always observe the same child.
    """

    def __init__(self, owner: Any, path: SlotPath) -> None:
        self._owner = owner
        self._path = tuple(path)

    @property
    def owner(self) -> Any:
        return self._owner

    @property
    def path(self) -> SlotPath:
        return self._path

    @property
    def registry(self) -> TypeRegistry:
        return self._owner.registry

    @property
    def tag_name(self) -> Optional[str]:
        """Name of the tag a write here coerces into, None for untyped slots."""
        _, tag = locate(self._root(), self._path)
        return tag.name if tag is not None else None

    def _root(self) -> TaggedValue:
        return self._owner._tagged()

    def _tagged(self) -> Optional[TaggedValue]:
        return read_slot(self._root(), self._path)

    def _address(self) -> Tuple[Any, SlotPath]:
        return self._owner, self._path

    def at(self, slot: Slot) -> AnyRef:
        """
        Address a slot of the container stored here. Nothing is created
        until a value is assigned.

        :raises BadAnyAccessError: If the value here, or its declared kind, is not
            a container addressable by ``slot``.
        """
        self._validate_slot(slot)
        path = self._path + (slot,)
        locate(self._root(), path)
        return AnyRef(self._owner, path)

    def assign(self, value: object) -> AnyRef:
        """
        Store ``value`` in this slot, coercing it into the slot's declared kind.

        :return: This reference, for chaining.
        :raises BadAnyAccessError: If the value cannot be coerced or the path is
            blocked by a scalar. The owner is left unchanged.
        """
        write_slot(self._root(), self._path, self._unwrap(value))
        return self

    def __repr__(self) -> str:
        return f"AnyRef(path={self._path!r}, value={to_native(self._tagged())!r})"
