"""
Core package providing the dynamic value container.

Architecture:
- TaggedValue is the discriminated union every value is stored in
- TypeRegistry maps tag names and adapter identities to kinds and operations
- Any owns a value; AnyRef addresses one slot inside it
- Converter functions implement coercion between scalar kinds
- The codec turns a value into bytes for transport and back

Cross-cutting:
- Errors derive from AnyError and never leave a value half-mutated
- The registry is written once at startup and read lock-free afterwards
"""

# Import order matters to avoid circular dependencies
from .errors import AnyError, BadAnyAccessError, DuplicateTagError, UnknownTypeError, ValidationError
from .kinds import ContainerSpec, Kind, ScalarSpec, map_of, sequence_of
from .tagged import SequenceSlots, TaggedValue
from .registry import TypeOperations, TypeRegistry, TypeTag, default_registry, register_builtin_types
from .ref import AnyRef
from .any import Any

__all__ = [
    # Errors
    "AnyError",
    "BadAnyAccessError",
    "DuplicateTagError",
    "UnknownTypeError",
    "ValidationError",
    # Kinds
    "Kind",
    "ScalarSpec",
    "ContainerSpec",
    "sequence_of",
    "map_of",
    # Storage
    "SequenceSlots",
    "TaggedValue",
    # Registry
    "TypeOperations",
    "TypeRegistry",
    "TypeTag",
    "default_registry",
    "register_builtin_types",
    # Handles
    "Any",
    "AnyRef",
]
