# anyvalue/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Optional

from anyvalue.core.errors import BadAnyAccessError, ValidationError
from anyvalue.core.kinds import FLOAT_WIDTHS, INTEGER_WIDTHS, MAX_SEQUENCE_LENGTH, ContainerSpec, Kind, ScalarSpec
from anyvalue.interfaces.protocols import ObjectAdapter
from anyvalue.interfaces.types import Slot


class Validator:
    """
    Checks type registrations and slot addresses before they reach the
    registry or a container.
    """

    def __init__(self) -> None:
        self._rules = _DefaultValidationRules

    def validate_registration(
        self,
        name: str,
        scalar: Optional[ScalarSpec],
        container: Optional[ContainerSpec],
        adapter: Optional[ObjectAdapter],
    ) -> None:
        """
        Check that a registration names exactly one well-formed descriptor.

        :raises ValidationError: If validation fails.
        """
        self._rules.validate_name(name)
        given = [d for d in (scalar, container, adapter) if d is not None]
        if len(given) != 1:
            raise ValidationError(
                f"Tag {name!r} needs exactly one of scalar, container or adapter",
                {"given": len(given)},
            )
        if scalar is not None:
            self._rules.validate_scalar(name, scalar)
        elif container is not None:
            self._rules.validate_container(name, container)
        else:
            self._rules.validate_adapter(name, adapter)

    def validate_slot(self, slot: Slot) -> None:
        """
        Check that a slot is a non-negative index or a string key.

        :raises BadAnyAccessError: If the slot cannot address a container.
        """
        self._rules.validate_slot(slot)


class _DefaultValidationRules:
    """
    Built-in rules shared by every Validator.
    """

    @staticmethod
    def validate_name(name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValidationError("Tag names must be non-empty strings", {"name": name})

    @staticmethod
    def validate_scalar(name: str, spec: ScalarSpec) -> None:
        if not isinstance(spec, ScalarSpec) or not spec.kind.is_scalar:
            raise ValidationError(f"Tag {name!r} has no scalar kind", {"spec": spec})
        if spec.kind.is_integral and spec.width not in INTEGER_WIDTHS:
            raise ValidationError(f"Unsupported integer width {spec.width} for {name!r}")
        if spec.kind == Kind.DOUBLE and spec.width not in FLOAT_WIDTHS:
            raise ValidationError(f"Unsupported float width {spec.width} for {name!r}")
        if spec.kind == Kind.INT64 and not spec.signed:
            raise ValidationError(f"Tag {name!r}: INT64 storage is signed, use UINT64")
        if spec.kind == Kind.UINT64 and spec.signed:
            raise ValidationError(f"Tag {name!r}: UINT64 storage is unsigned, use INT64")

    @staticmethod
    def validate_container(name: str, spec: ContainerSpec) -> None:
        if not isinstance(spec, ContainerSpec) or not spec.kind.is_container:
            raise ValidationError(f"Tag {name!r} has no container kind", {"spec": spec})
        if spec.element == name:
            raise ValidationError(f"Tag {name!r} cannot contain itself")

    @staticmethod
    def validate_adapter(name: str, adapter: ObjectAdapter) -> None:
        if not isinstance(adapter, ObjectAdapter):
            raise ValidationError(
                f"Adapter for {name!r} must provide identity, build_bytes and open_reader",
                {"adapter": type(adapter).__name__},
            )

    @staticmethod
    def validate_slot(slot: Slot) -> None:
        if isinstance(slot, bool) or not isinstance(slot, (int, str)):
            raise BadAnyAccessError(
                f"Slots are non-negative integers or strings, got {type(slot).__name__}", operation="at"
            )
        if isinstance(slot, int) and slot < 0:
            raise BadAnyAccessError(f"Negative index {slot}", operation="at")
        if isinstance(slot, int) and slot >= MAX_SEQUENCE_LENGTH:
            raise BadAnyAccessError(f"Index {slot} exceeds the largest sequence length", operation="at")
