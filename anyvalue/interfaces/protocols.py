# anyvalue/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Protocol, runtime_checkable

from anyvalue.interfaces.types import AdapterId


@runtime_checkable
class ObjectAdapter(Protocol):
    """
    Contract an externally defined structured record kind satisfies to be
    stored in an Any.

    Methods:
        identity(): Returns a stable, hashable token unique to this schema.
        build_bytes(builder): Serializes a caller-populated builder.
        open_reader(data): Returns a read-only view over serialized bytes.

    Runtime Invariants:
    - open_reader accepts exactly the bytes produced by build_bytes of an
      adapter with the same identity.
    - Both operations are synchronous and free of side effects beyond their result.

    Error Handling:
    - open_reader may raise any exception on malformed bytes; the container
      reports it as BadAnyAccessError.
    """

    def identity(self) -> AdapterId:
        """Return the identity token of the schema served by this adapter."""
        ...

    def build_bytes(self, builder: Any) -> bytes:
        """Serialize a populated builder into its canonical byte encoding."""
        ...

    def open_reader(self, data: bytes) -> Any:
        """Construct a read-only view over previously serialized bytes."""
        ...
