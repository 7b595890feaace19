"""Key-value storage contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Storage(ABC):
    """Durable async key-value store.

    Values are JSON-compatible (dicts, lists, strings, numbers, booleans).
    ``get`` returns ``None`` for missing keys; ``delete`` of a missing key is a
    no-op.
    """

    @abstractmethod
    async def get(self, key: str) -> Any: ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    async def delete(self, key: str) -> None: ...
