"""
Cart Provider - process-wide cart wiring.

Builds the CartStore and its PersistenceBridge, waits for the persisted
snapshot to load, then makes the store available to the rest of the app:
- directly, through `provider.store` (preferred, inject it where needed)
- implicitly, through `use_cart()` while the provider scope is open

`use_cart()` outside an open provider raises CartProviderError instead of
handing out an empty cart. The scope is carried by a ContextVar, so tasks
created inside `async with provider:` see it too.
"""
from contextvars import ContextVar, Token
from typing import Any, Optional

from marketplace.errors import CartProviderError
from marketplace.logging import get_logger
from .persistence import PersistenceBridge
from .storage import KeyValueStore, StorageKeys, get_redis
from .store import CartStore

logger = get_logger(__name__)

_active_cart: ContextVar[Optional[CartStore]] = ContextVar("active_cart", default=None)


class CartProvider:
    """Owns the single CartStore of the process and its persistence."""

    def __init__(
        self,
        kv: Optional[KeyValueStore] = None,
        key: str = StorageKeys.PRODUCTS,
        **bridge_options: Any,
    ):
        self.store = CartStore()
        self.key = key
        self._kv = kv  # Lazy: falls back to Redis on open()
        self._bridge_options = bridge_options
        self._bridge: Optional[PersistenceBridge] = None
        self._token: Optional[Token] = None

    @property
    def bridge(self) -> Optional[PersistenceBridge]:
        return self._bridge

    @property
    def is_open(self) -> bool:
        return self._bridge is not None

    async def open(self) -> CartStore:
        """Load the persisted cart and activate the provider scope."""
        if self._bridge is None:
            kv = self._kv if self._kv is not None else get_redis()
            bridge = PersistenceBridge(self.store, kv, key=self.key, **self._bridge_options)
            await bridge.start()
            self._bridge = bridge
            logger.debug(f"Cart provider opened for key {self.key}")

        if self._token is None:
            self._token = _active_cart.set(self.store)
        return self.store

    async def close(self) -> None:
        """Deactivate the scope and flush pending saves."""
        if self._token is not None:
            try:
                _active_cart.reset(self._token)
            except ValueError:
                # Closed from a different context than the one that opened it
                _active_cart.set(None)
            self._token = None

        if self._bridge is not None:
            await self._bridge.aclose()
            self._bridge = None

    async def __aenter__(self) -> CartStore:
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def use_cart() -> CartStore:
    """Get the cart of the enclosing provider scope."""
    store = _active_cart.get()
    if store is None:
        raise CartProviderError()
    return store


# Singleton instance
_cart_provider: Optional[CartProvider] = None


def get_cart_provider() -> CartProvider:
    """Get CartProvider singleton (Redis-backed)."""
    global _cart_provider
    if _cart_provider is None:
        _cart_provider = CartProvider()
    return _cart_provider
