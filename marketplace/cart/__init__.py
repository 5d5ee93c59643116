"""Cart package: models, store, persistence and provider."""
from .models import LineItem, ProductDescriptor, dump_snapshot, parse_snapshot
from .store import CartStore
from .storage import KeyValueStore, MemoryKeyValueStore
from .persistence import PersistenceBridge
from .provider import CartProvider, get_cart_provider, use_cart

__all__ = [
    "LineItem",
    "ProductDescriptor",
    "dump_snapshot",
    "parse_snapshot",
    "CartStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PersistenceBridge",
    "CartProvider",
    "get_cart_provider",
    "use_cart",
]
