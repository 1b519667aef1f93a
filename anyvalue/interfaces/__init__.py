# anyvalue/interfaces/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from anyvalue.interfaces.protocols import ObjectAdapter
from anyvalue.interfaces.types import AdapterId, Index, Key, Slot, SlotPath

__all__ = ["ObjectAdapter", "AdapterId", "Index", "Key", "Slot", "SlotPath"]
