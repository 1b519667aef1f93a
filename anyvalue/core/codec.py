# anyvalue/core/codec.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Binary form of a value for the knowledge-base transport.

Layout (little-endian)::

    header   := b"AV" version:u8 value
    value    := kind:u8 tag:str body
    str      := length:u32 utf-8 bytes
    blob     := length:u32 bytes

Bodies by kind: EMPTY none; INT64 i64; UINT64 u64; DOUBLE f64; CHAR u32;
STRING str; SEQUENCE length:u64 count:u32 (index:u64 value)*; MAP
count:u32 (key:str value)*; OBJECT blob. A tag whose operations define
``encode`` writes a blob produced by it instead of the built-in body.
Object values always carry the name of the tag registered for their adapter.
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Optional

from anyvalue.core.convert import MAX_CODE_POINT, coerce, wrap_integer
from anyvalue.core.errors import BadAnyAccessError
from anyvalue.core.kinds import MAX_SEQUENCE_LENGTH, Kind
from anyvalue.core.tagged import SequenceSlots, TaggedValue

if TYPE_CHECKING:
    from anyvalue.core.registry import TypeRegistry, TypeTag

logger = logging.getLogger(__name__)

MAGIC = b"AV"
VERSION = 1
MAX_DEPTH = 256

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")
_F64 = struct.Struct("<d")


class _Writer:
    """
    Internal append-only buffer with typed put helpers.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def put(self, fmt: struct.Struct, value: object) -> None:
        self._buffer += fmt.pack(value)

    def put_raw(self, data: bytes) -> None:
        self._buffer += data

    def put_blob(self, data: bytes) -> None:
        self.put(_U32, len(data))
        self.put_raw(data)

    def put_str(self, text: str) -> None:
        self.put_blob(text.encode("utf-8"))

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class _Reader:
    """
    Internal cursor over serialized bytes. Running past the end raises
    struct.error, which the decoder reports as a malformed value.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._view = memoryview(data)
        self._offset = offset

    def take(self, fmt: struct.Struct) -> object:
        (value,) = fmt.unpack_from(self._view, self._offset)
        self._offset += fmt.size
        return value

    def take_blob(self) -> bytes:
        length = self.take(_U32)
        end = self._offset + length
        if end > len(self._view):
            raise struct.error(f"blob of {length} bytes overruns buffer")
        data = bytes(self._view[self._offset:end])
        self._offset = end
        return data

    def take_str(self) -> str:
        return self.take_blob().decode("utf-8")

    @property
    def remaining(self) -> int:
        return len(self._view) - self._offset


def encode_value(value: TaggedValue, registry: TypeRegistry) -> bytes:
    """
    Serialize a value with its kind discriminant and tag names.

    :raises UnknownTypeError: If an object value's adapter has no registered tag.
    """
    writer = _Writer()
    writer.put_raw(MAGIC)
    writer.put(_U8, VERSION)
    _encode(writer, value, registry)
    return writer.getvalue()


def _tag_for(value: TaggedValue, registry: TypeRegistry) -> Optional[TypeTag]:
    if value.kind == Kind.OBJECT and value.tag is None:
        return registry.resolve_adapter(value.adapter_id)
    return value.tag


def _encode(writer: _Writer, value: TaggedValue, registry: TypeRegistry) -> None:
    tag = _tag_for(value, registry)
    writer.put(_U8, int(value.kind))
    writer.put_str(tag.name if tag is not None else "")
    if tag is not None and tag.operations.encode is not None:
        writer.put_blob(tag.operations.encode(value))
        return
    kind = value.kind
    if kind == Kind.INT64:
        writer.put(_I64, value.payload)
    elif kind == Kind.UINT64:
        writer.put(_U64, value.payload)
    elif kind == Kind.DOUBLE:
        writer.put(_F64, value.payload)
    elif kind == Kind.CHAR:
        writer.put(_U32, value.payload)
    elif kind == Kind.STRING:
        writer.put_str(value.payload)
    elif kind == Kind.SEQUENCE:
        written = [(i, child) for i, child in value.payload.items() if not child.is_empty()]
        writer.put(_U64, len(value.payload))
        writer.put(_U32, len(written))
        for index, child in written:
            writer.put(_U64, index)
            _encode(writer, child, registry)
    elif kind == Kind.MAP:
        writer.put(_U32, len(value.payload))
        for key in sorted(value.payload):
            writer.put_str(key)
            _encode(writer, value.payload[key], registry)
    elif kind == Kind.OBJECT:
        writer.put_blob(value.payload)


def decode_value(data: bytes, registry: TypeRegistry) -> TaggedValue:
    """
    Rebuild a value from ``encode_value`` output using the same registry state.

    :raises UnknownTypeError: If a tag name is not registered.
    :raises BadAnyAccessError: If the bytes are malformed.
    """
    if bytes(data[:2]) != MAGIC:
        raise BadAnyAccessError("Serialized value has no AV header", operation="from_bytes")
    reader = _Reader(data, len(MAGIC))
    try:
        version = reader.take(_U8)
        if version != VERSION:
            raise BadAnyAccessError(f"Unsupported serialized version {version}", operation="from_bytes")
        value = _decode(reader, registry, 0)
    except (struct.error, UnicodeDecodeError, ValueError) as err:
        raise BadAnyAccessError(f"Malformed serialized value: {err}", operation="from_bytes") from err
    if reader.remaining:
        raise BadAnyAccessError(f"{reader.remaining} trailing bytes after value", operation="from_bytes")
    logger.debug("Decoded %s value from %d bytes", value.kind.name, len(data))
    return value


def _decode(reader: _Reader, registry: TypeRegistry, depth: int) -> TaggedValue:
    if depth > MAX_DEPTH:
        raise BadAnyAccessError(f"Value nested deeper than {MAX_DEPTH} levels", operation="from_bytes")
    kind = Kind(reader.take(_U8))
    name = reader.take_str()
    tag = registry.resolve(name) if name else None
    if tag is not None and tag.kind != kind:
        raise BadAnyAccessError(
            f"Tag {name!r} is {tag.kind.name} but the value is {kind.name}", operation="from_bytes", kind=kind
        )
    if tag is not None and tag.operations.decode is not None:
        return tag.operations.decode(reader.take_blob(), tag)
    if kind == Kind.EMPTY:
        return TaggedValue(tag=tag)
    if kind.is_integral:
        number = reader.take(_I64 if kind == Kind.INT64 else _U64)
        if tag is not None:
            number = wrap_integer(number, tag.width, tag.signed)
        return TaggedValue(kind, number, tag)
    if kind == Kind.DOUBLE:
        return TaggedValue(kind, reader.take(_F64), tag)
    if kind == Kind.CHAR:
        point = reader.take(_U32)
        if point > MAX_CODE_POINT:
            raise BadAnyAccessError(f"{point} is not a valid code point", operation="from_bytes", kind=kind)
        return TaggedValue(kind, point, tag)
    if kind == Kind.STRING:
        return TaggedValue(kind, reader.take_str(), tag)
    if kind == Kind.SEQUENCE:
        length = reader.take(_U64)
        if length > MAX_SEQUENCE_LENGTH:
            raise BadAnyAccessError(f"Sequence length {length} is too large", operation="from_bytes")
        items = {}
        for _ in range(reader.take(_U32)):
            index = reader.take(_U64)
            if index >= length:
                raise BadAnyAccessError(f"Index {index} beyond length {length}", operation="from_bytes")
            items[index] = _decode_child(reader, registry, tag, depth)
        return TaggedValue(kind, SequenceSlots(items, length), tag)
    if kind == Kind.MAP:
        entries = {}
        for _ in range(reader.take(_U32)):
            key = reader.take_str()
            entries[key] = _decode_child(reader, registry, tag, depth)
        return TaggedValue(kind, entries, tag)
    if tag is None:
        raise BadAnyAccessError("Object value without a registered tag", operation="from_bytes", kind=kind)
    return TaggedValue(kind, reader.take_blob(), tag, tag.adapter_id)


def _decode_child(reader: _Reader, registry: TypeRegistry, parent: Optional[TypeTag], depth: int) -> TaggedValue:
    """Decode a container child, holding it to the parent's declared element tag."""
    child = _decode(reader, registry, depth + 1)
    element = parent.element if parent is not None else None
    if element is None or child.tag is element:
        return child
    try:
        return coerce(child, element)
    except BadAnyAccessError as err:
        raise BadAnyAccessError(
            f"{parent.name} child of kind {child.kind.name} does not fit element tag {element.name}",
            operation="from_bytes",
            kind=child.kind,
        ) from err
