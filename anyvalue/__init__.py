"""anyvalue: dynamically typed value container for knowledge-sharing middleware

This package provides a single value type, Any, whose kind is chosen at
runtime from an open set of registered tags.

Responsibilities:
    - Integer, float, character and string scalars with declared widths
    - Sparse sequences and string-keyed maps of any kind, nested freely
    - Structured binary records stored as opaque bytes behind an adapter
    - Lazy slot vivification through AnyRef
    - Coercion between scalar kinds
    - Binary serialization for transport

Interactions:
    - Startup code registering adapters and custom tags
    - Knowledge base and transport layers moving serialized values
    - Schema-specific adapters producing readers and byte buffers

Cross-cutting Concerns:
    Thread Safety:
        - Registry resolution is lock-free once initialization completes
        - Registration is serialized by a lock
        - Any instances must be confined to one thread while mutated

    Error Handling:
        - Structured error hierarchy rooted at AnyError
        - Failed operations leave values unchanged

    Logging:
        - Standard library logging, debug level only
        - No handlers installed by the library
"""

from anyvalue.core import (
    Any,
    AnyError,
    AnyRef,
    BadAnyAccessError,
    ContainerSpec,
    DuplicateTagError,
    Kind,
    ScalarSpec,
    TypeOperations,
    TypeRegistry,
    TypeTag,
    UnknownTypeError,
    ValidationError,
    default_registry,
    map_of,
    register_builtin_types,
    sequence_of,
)
from anyvalue.interfaces import ObjectAdapter

__version__ = "0.1.0"

__all__ = [
    "Any",
    "AnyRef",
    "AnyError",
    "BadAnyAccessError",
    "DuplicateTagError",
    "UnknownTypeError",
    "ValidationError",
    "Kind",
    "ScalarSpec",
    "ContainerSpec",
    "sequence_of",
    "map_of",
    "ObjectAdapter",
    "TypeOperations",
    "TypeRegistry",
    "TypeTag",
    "default_registry",
    "register_builtin_types",
]
