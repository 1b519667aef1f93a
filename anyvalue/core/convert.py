# anyvalue/core/convert.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Coercion matrix between numeric, character and string kinds.

Integers narrow with two's-complement wraparound, floats narrow to integers
by truncating toward zero and saturating at the target range, integers widen
to the nearest representable float. Characters behave as one-code-point
strings for text and as their ordinal for numbers. Containers and objects
have no scalar coercion.
"""

from __future__ import annotations

import math
import re
import struct
from typing import TYPE_CHECKING, Optional

from anyvalue.core.errors import BadAnyAccessError
from anyvalue.core.kinds import Kind
from anyvalue.core.tagged import SequenceSlots, TaggedValue

if TYPE_CHECKING:
    from anyvalue.core.registry import TypeTag

MAX_CODE_POINT = 0x10FFFF

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")
_DOUBLE_TEXT = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*(?:[eE][+-]?[0-9]+)?|\.[0-9]+(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def integer_bounds(width: int, signed: bool) -> tuple:
    if signed:
        return -(1 << (width - 1)), (1 << (width - 1)) - 1
    return 0, (1 << width) - 1


def wrap_integer(value: int, width: int = 64, signed: bool = True) -> int:
    """
    Truncate an integer to ``width`` bits using two's-complement wraparound.

    :param value: Any Python int.
    :param width: Target width in bits.
    :param signed: Whether the target width is interpreted as signed.
    :return: The wrapped value within the target range.
    """
    mask = (1 << width) - 1
    value &= mask
    if signed and value >> (width - 1):
        value -= 1 << width
    return value


def saturate_float(value: float, width: int = 64, signed: bool = True) -> int:
    """
    Truncate a float toward zero, clamping to the target integer range.

    :raises BadAnyAccessError: If the value is NaN.
    """
    if math.isnan(value):
        raise BadAnyAccessError("Cannot convert NaN to an integer", operation="to_integer", kind=Kind.DOUBLE)
    low, high = integer_bounds(width, signed)
    if math.isinf(value):
        return high if value > 0 else low
    return min(max(math.trunc(value), low), high)


def round_float32(value: float) -> float:
    """Round a double to the nearest IEEE single; out-of-range values become infinity."""
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def format_double(value: float, width: int = 64) -> str:
    """
    Canonical, locale-free text of a float. Single precision values use the
    shortest decimal that rounds back to the same single.
    """
    if width == 32 and math.isfinite(value):
        for precision in range(1, 10):
            text = f"{value:.{precision}g}"
            if round_float32(float(text)) == value:
                return repr(float(text))
    return repr(value)


def parse_integer(text: str) -> int:
    """
    Parse canonical decimal integer text.

    :raises BadAnyAccessError: If the text is not a decimal integer.
    """
    if not _INTEGER_TEXT.fullmatch(text):
        raise BadAnyAccessError(
            f"Malformed integer text: {text!r}", operation="to_integer", kind=Kind.STRING
        )
    return int(text)


def parse_double(text: str) -> float:
    """
    Parse canonical floating point text.

    :raises BadAnyAccessError: If the text is not a decimal or exponent literal.
    """
    if not _DOUBLE_TEXT.fullmatch(text):
        raise BadAnyAccessError(f"Malformed float text: {text!r}", operation="to_double", kind=Kind.STRING)
    return float(text)


def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.copysign(math.inf, value)


def _no_scalar(value: TaggedValue, operation: str) -> BadAnyAccessError:
    if value.kind == Kind.EMPTY:
        return BadAnyAccessError(f"{operation} on an empty value", operation=operation, kind=value.kind)
    return BadAnyAccessError(
        f"{operation} is not defined for {value.kind.name} values", operation=operation, kind=value.kind
    )


def to_integer(value: TaggedValue) -> int:
    kind = value.kind
    if kind.is_integral or kind == Kind.CHAR:
        return value.payload
    if kind == Kind.DOUBLE:
        return saturate_float(value.payload)
    if kind == Kind.STRING:
        return wrap_integer(parse_integer(value.payload))
    raise _no_scalar(value, "to_integer")


def to_double(value: TaggedValue) -> float:
    kind = value.kind
    if kind.is_integral or kind == Kind.CHAR:
        return _int_to_float(value.payload)
    if kind == Kind.DOUBLE:
        return value.payload
    if kind == Kind.STRING:
        return parse_double(value.payload)
    raise _no_scalar(value, "to_double")


def to_text(value: TaggedValue) -> str:
    kind = value.kind
    if kind.is_integral:
        return str(value.payload)
    if kind == Kind.DOUBLE:
        return format_double(value.payload, value.width)
    if kind == Kind.CHAR:
        return chr(value.payload)
    if kind == Kind.STRING:
        return value.payload
    raise _no_scalar(value, "to_string")


def from_native(value: object) -> TaggedValue:
    """
    Wrap a plain Python value in an untyped TaggedValue of its natural kind.

    :raises BadAnyAccessError: If the value has no kind (None, bytes, other objects)
        or an int does not fit in 64 bits.
    """
    if isinstance(value, TaggedValue):
        return value.copy()
    if isinstance(value, bool):
        return TaggedValue(Kind.INT64, int(value))
    if isinstance(value, int):
        if -(1 << 63) <= value < (1 << 63):
            return TaggedValue(Kind.INT64, value)
        if 0 <= value < (1 << 64):
            return TaggedValue(Kind.UINT64, value)
        raise BadAnyAccessError(f"Integer {value} does not fit in 64 bits", operation="assign")
    if isinstance(value, float):
        return TaggedValue(Kind.DOUBLE, value)
    if isinstance(value, str):
        return TaggedValue(Kind.STRING, value)
    if isinstance(value, (list, tuple)):
        slots = SequenceSlots()
        for child in value:
            slots.append(from_native(child))
        return TaggedValue(Kind.SEQUENCE, slots)
    if isinstance(value, dict):
        return TaggedValue(Kind.MAP, {_map_key(key): from_native(child) for key, child in value.items()})
    raise BadAnyAccessError(f"No value kind for {type(value).__name__}", operation="assign")


def _map_key(key: object) -> str:
    if not isinstance(key, str):
        raise BadAnyAccessError(f"Map keys must be strings, got {type(key).__name__}", operation="assign")
    return key


def coerce(value: object, tag: Optional[TypeTag]) -> TaggedValue:
    """
    Convert a TaggedValue or plain Python value into the storage kind of
    ``tag``. With no tag the value keeps its own kind.

    :param value: Source value; never mutated.
    :param tag: Declared target tag, or None for an untyped slot.
    :return: A new TaggedValue owning its payload.
    :raises BadAnyAccessError: If no coercion exists from the source kind.
    """
    if tag is None:
        return from_native(value)
    kind = tag.kind
    if kind.is_integral:
        return TaggedValue(kind, wrap_integer(_integer_source(value, tag), tag.width, tag.signed), tag)
    if kind == Kind.DOUBLE:
        number = _double_source(value)
        return TaggedValue(kind, round_float32(number) if tag.width == 32 else number, tag)
    if kind == Kind.CHAR:
        return TaggedValue(kind, _char_source(value), tag)
    if kind == Kind.STRING:
        text = value if isinstance(value, str) else to_text(_scalar_source(value, "to_string"))
        return TaggedValue(kind, text, tag)
    if kind == Kind.SEQUENCE:
        return TaggedValue(kind, _sequence_source(value, tag.element), tag)
    if kind == Kind.MAP:
        return TaggedValue(kind, _map_source(value, tag.element), tag)
    if kind == Kind.OBJECT:
        if (
            isinstance(value, TaggedValue)
            and value.kind == Kind.OBJECT
            and value.adapter_id == tag.adapter_id
        ):
            return TaggedValue(kind, value.payload, tag, tag.adapter_id)
        raise BadAnyAccessError(
            f"Only {tag.name} objects can be assigned to a {tag.name} value", operation="assign", kind=kind
        )
    raise BadAnyAccessError(f"Cannot assign into tag {tag.name}", operation="assign", kind=kind)


def _scalar_source(value: object, operation: str) -> TaggedValue:
    source = value if isinstance(value, TaggedValue) else from_native(value)
    if not source.kind.is_scalar:
        raise _no_scalar(source, operation)
    return source


def _integer_source(value: object, tag: TypeTag) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return saturate_float(value, tag.width, tag.signed)
    if isinstance(value, str):
        return parse_integer(value)
    source = _scalar_source(value, "to_integer")
    if source.kind == Kind.DOUBLE:
        return saturate_float(source.payload, tag.width, tag.signed)
    if source.kind == Kind.STRING:
        return parse_integer(source.payload)
    return source.payload


def _double_source(value: object) -> float:
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, str):
        return parse_double(value)
    return to_double(_scalar_source(value, "to_double"))


def _char_source(value: object) -> int:
    if isinstance(value, str) or (isinstance(value, TaggedValue) and value.kind == Kind.STRING):
        text = value if isinstance(value, str) else value.payload
        if len(text) != 1:
            raise BadAnyAccessError(
                f"Expected a single character, got {len(text)}", operation="assign", kind=Kind.CHAR
            )
        return ord(text)
    if isinstance(value, float) or (isinstance(value, TaggedValue) and value.kind == Kind.DOUBLE):
        number = value if isinstance(value, float) else value.payload
        point = saturate_float(number, 32, False)
    elif isinstance(value, int):
        point = int(value)
    else:
        point = _scalar_source(value, "to_integer").payload
    if not 0 <= point <= MAX_CODE_POINT:
        raise BadAnyAccessError(f"{point} is not a valid code point", operation="assign", kind=Kind.CHAR)
    return point


def _sequence_source(value: object, element: Optional[TypeTag]) -> SequenceSlots:
    if isinstance(value, (list, tuple)):
        slots = SequenceSlots()
        for child in value:
            slots.append(coerce(child, element))
        return slots
    if isinstance(value, TaggedValue) and value.kind == Kind.SEQUENCE:
        converted = {
            index: coerce(child, element) for index, child in value.payload.items() if not child.is_empty()
        }
        return SequenceSlots(converted, len(value.payload))
    raise BadAnyAccessError("Only sequences can be assigned to a sequence value", operation="assign")


def _map_source(value: object, element: Optional[TypeTag]) -> dict:
    if isinstance(value, dict):
        return {_map_key(key): coerce(child, element) for key, child in value.items()}
    if isinstance(value, TaggedValue) and value.kind == Kind.MAP:
        return {key: coerce(child, element) for key, child in value.payload.items() if not child.is_empty()}
    raise BadAnyAccessError("Only maps can be assigned to a map value", operation="assign")
