# anyvalue/core/base.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from anyvalue.core import convert
from anyvalue.core.errors import BadAnyAccessError
from anyvalue.core.kinds import Kind
from anyvalue.core.slots import append_slot, resize_slot
from anyvalue.core.tagged import TaggedValue, values_equal
from anyvalue.core.validations import Validator
from anyvalue.interfaces.protocols import ObjectAdapter
from anyvalue.interfaces.types import Slot, SlotPath

if TYPE_CHECKING:
    from anyvalue.core.any import Any
    from anyvalue.core.ref import AnyRef
    from anyvalue.core.registry import TypeRegistry

logger = logging.getLogger(__name__)

_VALIDATOR = Validator()


def to_native(value: Optional[TaggedValue]) -> object:
    """Deep-export a value to plain Python objects; empties become None."""
    if value is None or value.kind == Kind.EMPTY:
        return None
    if value.kind == Kind.CHAR:
        return chr(value.payload)
    if value.kind == Kind.SEQUENCE:
        out: List[object] = [None] * len(value.payload)
        for index, child in value.payload.items():
            out[index] = to_native(child)
        return out
    if value.kind == Kind.MAP:
        return {key: to_native(child) for key, child in value.payload.items()}
    return value.payload


def _truthy(value: Optional[TaggedValue]) -> bool:
    if value is None or value.kind == Kind.EMPTY:
        return False
    if value.kind == Kind.SEQUENCE:
        return any(_truthy(child) for _, child in value.payload.items())
    if value.kind == Kind.MAP:
        return any(_truthy(child) for child in value.payload.values())
    return bool(value.payload)


class AnyBase:
    """
    Accessors shared by the owning Any handle and the AnyRef slot accessor.
    Subclasses supply the current value (``_tagged``) and the address used
    for writes (``_address``).
    """

    def _tagged(self) -> Optional[TaggedValue]:
        raise NotImplementedError

    def _address(self) -> Tuple[Any, SlotPath]:
        raise NotImplementedError

    @property
    def registry(self) -> TypeRegistry:
        raise NotImplementedError

    def at(self, slot: Slot) -> AnyRef:
        raise NotImplementedError

    def assign(self, value: object) -> AnyBase:
        raise NotImplementedError

    @staticmethod
    def _validate_slot(slot: Slot) -> None:
        _VALIDATOR.validate_slot(slot)

    @staticmethod
    def _unwrap(value: object) -> object:
        """Turn an Any or AnyRef argument into its stored TaggedValue."""
        if isinstance(value, AnyBase):
            tagged = value._tagged()
            return tagged if tagged is not None else TaggedValue()
        return value

    def _require(self, operation: str) -> TaggedValue:
        value = self._tagged()
        if value is None or value.kind == Kind.EMPTY:
            raise BadAnyAccessError(f"{operation} on an empty value", operation=operation, kind=Kind.EMPTY)
        return value

    def _container(self, operation: str) -> Optional[TaggedValue]:
        value = self._tagged()
        if value is None or value.kind == Kind.EMPTY:
            return None
        if not value.kind.is_container:
            raise BadAnyAccessError(
                f"{operation} is not defined for {value.kind.name} values", operation=operation, kind=value.kind
            )
        return value

    @property
    def kind(self) -> Kind:
        value = self._tagged()
        return value.kind if value is not None else Kind.EMPTY

    def empty(self) -> bool:
        """True if no kind is fixed and nothing was assigned (or the slot is virtual)."""
        value = self._tagged()
        return value is None or value.kind == Kind.EMPTY

    def to_integer(self) -> int:
        """
        :raises BadAnyAccessError: On empty, container or object values, or malformed text.
        """
        return convert.to_integer(self._require("to_integer"))

    def to_double(self) -> float:
        """
        :raises BadAnyAccessError: On empty, container or object values, or malformed text.
        """
        return convert.to_double(self._require("to_double"))

    def to_string(self) -> str:
        """
        :raises BadAnyAccessError: On empty, container or object values.
        """
        return convert.to_text(self._require("to_string"))

    def reader(self, adapter: ObjectAdapter) -> object:
        """
        Open a read-only view over the stored object bytes.

        :param adapter: Adapter whose identity must match the one the bytes are bound to.
        :raises BadAnyAccessError: If the value is not an object, the adapter does not
            match, or the adapter rejects the bytes.
        """
        value = self._require("reader")
        if value.kind != Kind.OBJECT:
            raise BadAnyAccessError(
                f"reader is not defined for {value.kind.name} values", operation="reader", kind=value.kind
            )
        requested = adapter.identity()
        if requested != value.adapter_id:
            raise BadAnyAccessError(
                f"Object is bound to adapter {value.adapter_id!r}, not {requested!r}",
                operation="reader",
                kind=value.kind,
            )
        try:
            return adapter.open_reader(value.payload)
        except Exception as err:
            logger.debug("Adapter %r rejected %d bytes", requested, len(value.payload))
            raise BadAnyAccessError(
                f"Adapter {requested!r} could not open object bytes: {err}", operation="reader", kind=value.kind
            ) from err

    def size(self) -> int:
        """Sequence length or map entry count; 0 when empty."""
        value = self._container("size")
        return len(value.payload) if value is not None else 0

    def exists(self, slot: Slot) -> bool:
        """True if ``slot`` is inside the sequence bounds or present in the map."""
        self._validate_slot(slot)
        value = self._container("exists")
        if value is None:
            return False
        if value.kind == Kind.SEQUENCE:
            return isinstance(slot, int) and slot < len(value.payload)
        return isinstance(slot, str) and slot in value.payload

    def keys(self) -> List[str]:
        value = self._container("keys")
        if value is None:
            return []
        if value.kind != Kind.MAP:
            raise BadAnyAccessError("keys is only defined for maps", operation="keys", kind=value.kind)
        return sorted(value.payload)

    def items(self) -> Iterator[Tuple[Slot, AnyRef]]:
        """Yield (index, ref) for every sequence slot or (key, ref) for every map entry."""
        value = self._container("items")
        if value is None:
            return
        slots = range(len(value.payload)) if value.kind == Kind.SEQUENCE else self.keys()
        for slot in slots:
            yield slot, self.at(slot)

    def append(self, value: object) -> AnyRef:
        """
        Assign ``value`` one past the end of the sequence.

        :return: A reference to the new slot.
        """
        owner, path = self._address()
        index = append_slot(owner._tagged(), path, self._unwrap(value))
        return self.at(index)

    def resize(self, length: int) -> None:
        """Truncate or extend the sequence; new slots are empty."""
        owner, path = self._address()
        resize_slot(owner._tagged(), path, length)

    def to_native(self) -> object:
        return to_native(self._tagged())

    def is_true(self) -> bool:
        """Scalars are true when non-zero or non-empty; containers when any child is true."""
        return _truthy(self._tagged())

    def is_false(self) -> bool:
        return not self.is_true()

    def to_any(self) -> Any:
        """Return a detached deep copy of the value here."""
        from anyvalue.core.any import Any

        value = self._tagged()
        return Any._adopt(value.copy() if value is not None else TaggedValue(), self.registry)

    def __getitem__(self, slot: Slot) -> AnyRef:
        return self.at(slot)

    def __setitem__(self, slot: Slot, value: object) -> None:
        self.at(slot).assign(value)

    def __contains__(self, slot: object) -> bool:
        return self.exists(slot)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[object]:
        value = self._container("iter")
        if value is None:
            return iter(())
        if value.kind == Kind.MAP:
            return iter(self.keys())
        return (ref for _, ref in self.items())

    def __int__(self) -> int:
        return self.to_integer()

    def __float__(self) -> float:
        return self.to_double()

    def __bool__(self) -> bool:
        return self.is_true()

    def __eq__(self, other: object) -> bool:
        mine = self._tagged()
        if mine is None:
            mine = TaggedValue()
        if isinstance(other, AnyBase):
            theirs = other._tagged()
            if theirs is None:
                theirs = TaggedValue()
        else:
            try:
                theirs = convert.from_native(other)
            except BadAnyAccessError:
                return NotImplemented
        compare = mine.tag.operations.compare if mine.tag is not None else values_equal
        return compare(mine, theirs)

    __hash__ = None
