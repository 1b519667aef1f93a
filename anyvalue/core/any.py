# anyvalue/core/any.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from anyvalue.core.base import AnyBase, to_native
from anyvalue.core.codec import decode_value, encode_value
from anyvalue.core.convert import coerce
from anyvalue.core.errors import BadAnyAccessError, UnknownTypeError
from anyvalue.core.kinds import Kind
from anyvalue.core.ref import AnyRef
from anyvalue.core.registry import TypeRegistry, TypeTag, default_registry
from anyvalue.core.slots import check_addressable
from anyvalue.core.tagged import SequenceSlots, TaggedValue
from anyvalue.interfaces.protocols import ObjectAdapter
from anyvalue.interfaces.types import Slot, SlotPath

logger = logging.getLogger(__name__)


class Any(AnyBase):
    """
    Owning handle for one dynamically typed value.

    ``Any()`` starts empty and untyped. ``Any("strvec")`` resolves a registered
    tag and starts from that tag's provisional value. ``Any(adapter, builder)``
    serializes a populated builder straight into an object value.

    Copies are deep. An Any is not safe for concurrent mutation.
    """

    def __init__(
        self,
        tag: Union[str, ObjectAdapter, None] = None,
        builder: object = None,
        registry: Optional[TypeRegistry] = None,
    ) -> None:
        """
        :param tag: Registered tag name, an object adapter, or None for an untyped value.
        :param builder: Populated builder; required with an adapter, rejected otherwise.
        :param registry: Registry used for tag resolution; defaults to the process-wide one.
        :raises UnknownTypeError: If the tag name does not resolve.
        """
        self._registry = registry if registry is not None else default_registry()
        if tag is None:
            if builder is not None:
                raise TypeError("A builder needs an object adapter")
            self._value = TaggedValue()
        elif isinstance(tag, str):
            if builder is not None:
                raise TypeError("A builder needs an object adapter, not a tag name")
            self._value = self._registry.resolve(tag).construct()
        elif isinstance(tag, ObjectAdapter):
            if builder is None:
                raise TypeError("An object adapter needs a populated builder")
            self._value = self._build(tag, builder)
        else:
            raise UnknownTypeError(tag)

    @classmethod
    def of(cls, value: object, registry: Optional[TypeRegistry] = None) -> Any:
        """Build an untyped Any holding ``value`` in its natural kind."""
        result = cls(registry=registry)
        result.assign(value)
        return result

    @classmethod
    def from_bytes(cls, data: bytes, registry: Optional[TypeRegistry] = None) -> Any:
        """
        Reconstruct an Any from ``to_bytes`` output.

        :raises UnknownTypeError: If the data names a tag the registry lacks.
        :raises BadAnyAccessError: If the data is malformed.
        """
        registry = registry if registry is not None else default_registry()
        return cls._adopt(decode_value(data, registry), registry)

    @classmethod
    def _adopt(cls, value: TaggedValue, registry: TypeRegistry) -> Any:
        result = cls(registry=registry)
        result._value = value
        return result

    def _build(self, adapter: ObjectAdapter, builder: object) -> TaggedValue:
        adapter_id = adapter.identity()
        try:
            tag: Optional[TypeTag] = self._registry.resolve_adapter(adapter_id)
        except UnknownTypeError:
            tag = None
        return TaggedValue(Kind.OBJECT, bytes(adapter.build_bytes(builder)), tag, adapter_id)

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def tag(self) -> Optional[TypeTag]:
        return self._value.tag

    @property
    def tag_name(self) -> Optional[str]:
        return self._value.tag.name if self._value.tag is not None else None

    def _tagged(self) -> TaggedValue:
        return self._value

    def _address(self) -> Tuple[Any, SlotPath]:
        return self, ()

    def at(self, slot: Slot) -> AnyRef:
        """
        Address a slot of this container. An empty Any becomes an untyped
        sequence (integer slot) or map (string slot) first.

        :raises BadAnyAccessError: If this Any holds a scalar, an object, or the
            other container kind.
        """
        self._validate_slot(slot)
        check_addressable(self._value, slot)
        if self._value.kind == Kind.EMPTY:
            if isinstance(slot, int):
                self._value = TaggedValue(Kind.SEQUENCE, SequenceSlots())
            else:
                self._value = TaggedValue(Kind.MAP, {})
            logger.debug("Vivified empty value into %s", self._value.kind.name)
        return AnyRef(self, (slot,))

    def assign(self, value: object) -> Any:
        """
        Replace the value. A typed Any coerces ``value`` into its declared
        kind; an untyped Any takes on the kind of ``value``.

        :return: This Any, for chaining.
        :raises BadAnyAccessError: If no coercion exists. The Any is left unchanged.
        """
        self._value = coerce(self._unwrap(value), self._value.tag)
        return self

    def build(self, adapter: ObjectAdapter, builder: object) -> Any:
        """
        Replace the value with an object serialized from ``builder``.

        :raises BadAnyAccessError: If this Any is declared with a different kind or adapter.
        """
        tag = self._value.tag
        if tag is not None and (tag.kind != Kind.OBJECT or tag.adapter_id != adapter.identity()):
            raise BadAnyAccessError(
                f"Cannot build a {adapter.identity()!r} object into a {tag.name} value",
                operation="build",
                kind=self._value.kind,
            )
        self._value = self._build(adapter, builder)
        return self

    def clear(self) -> None:
        """Reset to the declared tag's provisional value, or to empty when untyped."""
        tag = self._value.tag
        self._value = tag.construct() if tag is not None else TaggedValue()

    def to_bytes(self) -> bytes:
        """
        Serialize for transmission.

        :raises UnknownTypeError: If an object value's adapter has no registered tag.
        """
        return encode_value(self._value, self._registry)

    def copy(self) -> Any:
        tag = self._value.tag
        value = tag.operations.copy(self._value) if tag is not None else self._value.copy()
        return Any._adopt(value, self._registry)

    def __copy__(self) -> Any:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Any:
        return self.copy()

    def __repr__(self) -> str:
        return f"Any(tag={self.tag_name!r}, kind={self.kind.name}, value={to_native(self._value)!r})"

    def __str__(self) -> str:
        if self._value.kind.is_scalar:
            return self.to_string()
        return repr(to_native(self._value))
