# tests/unit/test_validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from anyvalue.core.errors import BadAnyAccessError, ValidationError
from anyvalue.core.kinds import INT32, STRING, Kind, ScalarSpec, map_of, sequence_of
from anyvalue.core.validations import Validator
from tests.adapters import GeoPointAdapter


def test_validator_accepts_each_descriptor():
    v = Validator()
    v.validate_registration("int", INT32, None, None)
    v.validate_registration("strvec", None, sequence_of("string"), None)
    v.validate_registration("point", None, None, GeoPointAdapter())


@pytest.mark.parametrize(
    "descriptors",
    [
        (None, None, None),
        (INT32, sequence_of(), None),
        (STRING, None, GeoPointAdapter()),
    ],
)
def test_validator_requires_exactly_one_descriptor(descriptors):
    with pytest.raises(ValidationError) as info:
        Validator().validate_registration("x", *descriptors)
    assert "exactly one" in info.value.message


@pytest.mark.parametrize("name", ["", None, 5])
def test_validator_rejects_bad_names(name):
    with pytest.raises(ValidationError):
        Validator().validate_registration(name, INT32, None, None)


@pytest.mark.parametrize(
    "spec",
    [
        ScalarSpec(Kind.INT64, 12),
        ScalarSpec(Kind.DOUBLE, 16),
        ScalarSpec(Kind.INT64, 32, signed=False),
        ScalarSpec(Kind.UINT64, 32, signed=True),
        ScalarSpec(Kind.SEQUENCE),
        ScalarSpec(Kind.EMPTY),
    ],
)
def test_validator_rejects_malformed_scalars(spec):
    with pytest.raises(ValidationError):
        Validator().validate_registration("x", spec, None, None)


def test_validator_rejects_malformed_containers():
    v = Validator()
    with pytest.raises(ValidationError):
        v.validate_registration("x", None, map_of("x"), None)
    with pytest.raises(ValidationError, match="no container kind"):
        v.validate_registration("x", None, INT32, None)


def test_validator_rejects_objects_that_are_not_adapters():
    with pytest.raises(ValidationError) as info:
        Validator().validate_registration("x", None, None, object())
    assert info.value.details == {"adapter": "object"}


@pytest.mark.parametrize("slot", [0, 7, 2**63 - 2, "", "name"])
def test_validate_slot_accepts_indices_and_keys(slot):
    Validator().validate_slot(slot)


@pytest.mark.parametrize("slot", [-1, 2**63 - 1, 2**64, 1.0, None, True, b"k", (0,)])
def test_validate_slot_rejects_other_addresses(slot):
    with pytest.raises(BadAnyAccessError) as info:
        Validator().validate_slot(slot)
    assert info.value.operation == "at"
