# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from anyvalue.core.registry import TypeRegistry, register_builtin_types
from tests.adapters import BioBuilder, Date, GeoPointAdapter, PersonBioAdapter, PhoneType, PointBuilder

DEFAULT_GEO_POINT = (1.0, 2.5, -3.0)


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")
    config.addinivalue_line("markers", "stress: mark test as a stress test")


@pytest.fixture
def geo_adapter():
    return GeoPointAdapter()


@pytest.fixture
def bio_adapter():
    return PersonBioAdapter()


@pytest.fixture
def registry(geo_adapter, bio_adapter):
    """A fresh registry with the built-in tags and both test record kinds."""
    reg = register_builtin_types(TypeRegistry())
    reg.register("geo_point", adapter=geo_adapter)
    reg.register("person_bio", adapter=bio_adapter)
    return reg


@pytest.fixture
def point_builder():
    return PointBuilder(*DEFAULT_GEO_POINT)


@pytest.fixture
def bio_builder():
    """A bio with a birthdate and one populated home phone out of three."""
    builder = BioBuilder(name="Amit S", email="amit@hakoonamatata.com", birthdate=Date(29, 3, 1986))
    phones = builder.init_phones(3)
    phones[0].number = "+1 9900-123-123"
    phones[0].type = PhoneType.HOME
    return builder
