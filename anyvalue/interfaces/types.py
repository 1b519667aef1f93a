# anyvalue/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Hashable, Tuple, Union

AdapterId = Hashable
Index = int
Key = str
Slot = Union[Index, Key]
SlotPath = Tuple[Slot, ...]
