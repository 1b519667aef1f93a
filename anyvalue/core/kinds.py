# anyvalue/core/kinds.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Kind(IntEnum):
    """
    Discriminant of a TaggedValue. The numeric values are part of the
    serialized form and must not be reordered.
    """

    EMPTY = 0
    INT64 = 1
    UINT64 = 2
    DOUBLE = 3
    CHAR = 4
    STRING = 5
    SEQUENCE = 6
    MAP = 7
    OBJECT = 8

    @property
    def is_integral(self) -> bool:
        return self in (Kind.INT64, Kind.UINT64)

    @property
    def is_numeric(self) -> bool:
        return self in (Kind.INT64, Kind.UINT64, Kind.DOUBLE)

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS

    @property
    def is_container(self) -> bool:
        return self in (Kind.SEQUENCE, Kind.MAP)


_SCALAR_KINDS = frozenset({Kind.INT64, Kind.UINT64, Kind.DOUBLE, Kind.CHAR, Kind.STRING})

INTEGER_WIDTHS = (8, 16, 32, 64)
FLOAT_WIDTHS = (32, 64)

# Sequence lengths must stay valid Python indices and fit the u64 wire field.
MAX_SEQUENCE_LENGTH = (1 << 63) - 1


@dataclass(frozen=True)
class ScalarSpec:
    """
    Storage descriptor for a scalar tag. Every integer width is stored in one
    Python int; ``width`` and ``signed`` only select truncation during coercion
    and the text form of floats.
    """

    kind: Kind
    width: int = 64
    signed: bool = True


@dataclass(frozen=True)
class ContainerSpec:
    """
    Descriptor for a sequence or map tag.

    :param kind: Kind.SEQUENCE or Kind.MAP.
    :param element: Tag name every child is coerced into, or None for untyped children.
    """

    kind: Kind
    element: Optional[str] = None


def sequence_of(element: Optional[str] = None) -> ContainerSpec:
    return ContainerSpec(Kind.SEQUENCE, element)


def map_of(element: Optional[str] = None) -> ContainerSpec:
    return ContainerSpec(Kind.MAP, element)


INT8 = ScalarSpec(Kind.INT64, 8)
INT16 = ScalarSpec(Kind.INT64, 16)
INT32 = ScalarSpec(Kind.INT64, 32)
INT64 = ScalarSpec(Kind.INT64, 64)
UINT8 = ScalarSpec(Kind.UINT64, 8, signed=False)
UINT16 = ScalarSpec(Kind.UINT64, 16, signed=False)
UINT32 = ScalarSpec(Kind.UINT64, 32, signed=False)
UINT64 = ScalarSpec(Kind.UINT64, 64, signed=False)
FLOAT32 = ScalarSpec(Kind.DOUBLE, 32)
FLOAT64 = ScalarSpec(Kind.DOUBLE, 64)
CHAR = ScalarSpec(Kind.CHAR, 32, signed=False)
STRING = ScalarSpec(Kind.STRING, 0, signed=False)
