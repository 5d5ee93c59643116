"""Key-value storage backends for the cart snapshot."""
from typing import Any, Dict, Optional, Protocol

from marketplace.db import get_redis, StorageKeys, CART_SAVE_ATTEMPTS

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "get_redis",
    "StorageKeys",
    "CART_SAVE_ATTEMPTS",
]


class KeyValueStore(Protocol):
    """Async string get/set store. The Upstash async client satisfies it."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> Any:
        ...


class MemoryKeyValueStore:
    """In-process store for local development and tests when Redis is not configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._store: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._store[key] = value
        return True
