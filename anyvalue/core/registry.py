# anyvalue/core/registry.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Runtime type registry: maps tag names and adapter identities to the
operations needed to construct, copy, compare and serialize a value.

Registration happens during a single-threaded initialization phase. Writers
are serialized by a lock; resolution reads plain dicts and is safe from any
number of threads once registration is complete.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from anyvalue.core import kinds
from anyvalue.core.errors import DuplicateTagError, UnknownTypeError
from anyvalue.core.kinds import ContainerSpec, Kind, ScalarSpec
from anyvalue.core.tagged import TaggedValue, copy_value, provisional, values_equal
from anyvalue.core.validations import Validator
from anyvalue.interfaces.protocols import ObjectAdapter
from anyvalue.interfaces.types import AdapterId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeOperations:
    """
    Per-tag behaviour. ``encode``/``decode`` replace the built-in payload
    codec when set; the other operations default to the generic ones.
    """

    construct: Callable[["TypeTag"], TaggedValue] = provisional
    copy: Callable[[TaggedValue], TaggedValue] = copy_value
    compare: Callable[[TaggedValue, TaggedValue], bool] = values_equal
    encode: Optional[Callable[[TaggedValue], bytes]] = None
    decode: Optional[Callable[[bytes, "TypeTag"], TaggedValue]] = None


DEFAULT_OPERATIONS = TypeOperations()


@dataclass(frozen=True, eq=False)
class TypeTag:
    """
    Immutable identifier of a registered kind. Tags are compared by identity;
    a registry hands out exactly one tag per name.
    """

    name: str
    kind: Kind
    width: int = 64
    signed: bool = True
    element: Optional["TypeTag"] = None
    adapter: Optional[ObjectAdapter] = field(default=None, repr=False)
    operations: TypeOperations = field(default=DEFAULT_OPERATIONS, repr=False)

    @property
    def adapter_id(self) -> Optional[AdapterId]:
        return self.adapter.identity() if self.adapter is not None else None

    def construct(self) -> TaggedValue:
        return self.operations.construct(self)


class TypeRegistry:
    """
    Table of type tags keyed by name and by adapter identity.
    """

    def __init__(self, validator: Optional[Validator] = None) -> None:
        self._tags: Dict[str, TypeTag] = {}
        self._by_adapter: Dict[AdapterId, TypeTag] = {}
        self._lock = threading.Lock()
        self._validator = validator or Validator()

    def register(
        self,
        name: str,
        scalar: Optional[ScalarSpec] = None,
        container: Optional[ContainerSpec] = None,
        adapter: Optional[ObjectAdapter] = None,
        operations: Optional[TypeOperations] = None,
    ) -> TypeTag:
        """
        Install a tag. Exactly one of ``scalar``, ``container`` or ``adapter``
        describes its kind.

        :param name: Tag name used by ``Any(name)``.
        :param scalar: Storage descriptor of a scalar kind.
        :param container: Sequence/map descriptor; its element tag must already be registered.
        :param adapter: Structured object adapter; its identity must be unused.
        :param operations: Overrides of the default per-tag operations.
        :return: The new tag.
        :raises DuplicateTagError: If the name or adapter identity is taken.
        :raises UnknownTypeError: If a container's element tag is not registered.
        :raises ValidationError: If the descriptors are malformed.
        """
        self._validator.validate_registration(name, scalar, container, adapter)
        ops = operations or DEFAULT_OPERATIONS
        with self._lock:
            if name in self._tags:
                raise DuplicateTagError(name)
            if scalar is not None:
                tag = TypeTag(name, scalar.kind, scalar.width, scalar.signed, operations=ops)
            elif container is not None:
                element = self._resolve_locked(container.element) if container.element else None
                tag = TypeTag(name, container.kind, element=element, operations=ops)
            else:
                adapter_id = adapter.identity()
                if adapter_id in self._by_adapter:
                    raise DuplicateTagError(name, {"adapter_id": adapter_id})
                tag = TypeTag(name, Kind.OBJECT, adapter=adapter, operations=ops)
                self._by_adapter[adapter_id] = tag
            self._tags[name] = tag
        logger.debug("Registered type tag %s (%s)", name, tag.kind.name)
        return tag

    def _resolve_locked(self, name: str) -> TypeTag:
        try:
            return self._tags[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def resolve(self, name: str) -> TypeTag:
        """
        :raises UnknownTypeError: If no tag is registered under ``name``.
        """
        tag = self._tags.get(name)
        if tag is None:
            raise UnknownTypeError(name)
        return tag

    def resolve_adapter(self, adapter_id: AdapterId) -> TypeTag:
        """
        :raises UnknownTypeError: If no object tag uses ``adapter_id``.
        """
        tag = self._by_adapter.get(adapter_id)
        if tag is None:
            raise UnknownTypeError(adapter_id)
        return tag

    def names(self) -> List[str]:
        return sorted(self._tags)

    def __contains__(self, name: object) -> bool:
        return name in self._tags

    def __iter__(self) -> Iterator[TypeTag]:
        return iter(list(self._tags.values()))

    def __len__(self) -> int:
        return len(self._tags)


BUILTIN_SCALARS = (
    ("char", kinds.CHAR),
    ("schar", kinds.INT8),
    ("uchar", kinds.UINT8),
    ("int8", kinds.INT8),
    ("uint8", kinds.UINT8),
    ("short", kinds.INT16),
    ("int16", kinds.INT16),
    ("ushort", kinds.UINT16),
    ("uint16", kinds.UINT16),
    ("int", kinds.INT32),
    ("int32", kinds.INT32),
    ("uint", kinds.UINT32),
    ("uint32", kinds.UINT32),
    ("long", kinds.INT64),
    ("int64", kinds.INT64),
    ("ulong", kinds.UINT64),
    ("uint64", kinds.UINT64),
    ("float", kinds.FLOAT32),
    ("double", kinds.FLOAT64),
    ("string", kinds.STRING),
)

BUILTIN_CONTAINERS = (
    ("charvec", kinds.sequence_of("char")),
    ("shvec", kinds.sequence_of("short")),
    ("intvec", kinds.sequence_of("int")),
    ("longvec", kinds.sequence_of("long")),
    ("ulongvec", kinds.sequence_of("ulong")),
    ("fltvec", kinds.sequence_of("float")),
    ("dblvec", kinds.sequence_of("double")),
    ("strvec", kinds.sequence_of("string")),
    ("anyvec", kinds.sequence_of()),
    ("smap", kinds.map_of("string")),
    ("imap", kinds.map_of("long")),
    ("dmap", kinds.map_of("double")),
    ("anymap", kinds.map_of()),
)


def register_builtin_types(registry: TypeRegistry) -> TypeRegistry:
    """Register the built-in scalar, sequence and map tags."""
    for name, spec in BUILTIN_SCALARS:
        registry.register(name, scalar=spec)
    for name, spec in BUILTIN_CONTAINERS:
        registry.register(name, container=spec)
    return registry


_default_registry: Optional[TypeRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> TypeRegistry:
    """
    Return the process-wide registry, creating it with the built-in tags on
    first use.
    """
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = register_builtin_types(TypeRegistry())
    return _default_registry
