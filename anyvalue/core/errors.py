# anyvalue/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Optional


class AnyError(Exception):
    """
    Base exception class for errors raised by the value container library.

    :param message: Human readable description of the failure.
    :param details: Optional structured context for diagnostics.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownTypeError(AnyError):
    """
    Raised when a tag name (or adapter identity) does not resolve in the registry.
    """

    def __init__(self, tag_name: Any, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Unknown type tag: {tag_name!r}", details)
        self.tag_name = tag_name


class DuplicateTagError(AnyError):
    """
    Raised when a tag name or adapter identity is registered twice.
    """

    def __init__(self, tag_name: Any, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Type tag already registered: {tag_name!r}", details)
        self.tag_name = tag_name


class BadAnyAccessError(AnyError):
    """
    Raised on kind mismatches: scalar coercion of a container, object or empty
    value, indexing a scalar, reading an object with the wrong adapter, or
    parsing a malformed numeric string.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        kind: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.kind = kind


class ValidationError(AnyError):
    """
    Raised when a type registration is malformed.
    """
