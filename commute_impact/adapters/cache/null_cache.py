"""Cache that never stores anything.

Handy in tests that must see every mapping request reach the (mocked)
HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        return None

    def clear(self) -> int:
        return 0

    def size(self) -> int:
        return 0
