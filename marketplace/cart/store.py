"""In-memory cart state with change notification."""
from dataclasses import replace
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from marketplace.errors import CartItemNotFoundError
from marketplace.logging import get_logger, sanitize_id_for_logging
from .models import LineItem, ProductDescriptor

logger = get_logger(__name__)

Snapshot = Tuple[LineItem, ...]
Listener = Callable[[Snapshot], None]


class CartStore:
    """
    Owns the cart line items and the only ways to change them.

    Mutations run synchronously and leave the cart consistent before
    returning:
    - add_to_cart: new product at quantity 1, or +1 and refreshed metadata
    - increment: +1 on an existing line
    - decrement: -1 on an existing line, removing it when it would reach 0

    After every change all subscribed listeners receive the new snapshot.

    Usage:
        store = CartStore()
        unsubscribe = store.subscribe(render)
        store.add_to_cart(ProductDescriptor("p1", "Shirt", "u", 10))
        store.decrement("p1")
    """

    def __init__(self, items: Optional[Iterable[LineItem]] = None):
        self._items: List[LineItem] = []
        self._listeners: List[Listener] = []
        self._version = 0
        if items:
            self._items = _normalize(items)

    # ---- read-only view ----

    @property
    def products(self) -> Snapshot:
        """Current cart snapshot in insertion order."""
        return tuple(self._items)

    @property
    def total_items(self) -> int:
        """Total number of units across all lines."""
        return sum(item.quantity for item in self._items)

    def get(self, product_id: str) -> Optional[LineItem]:
        index = self._index_of(product_id)
        return self._items[index] if index > -1 else None

    def require(self, product_id: str) -> LineItem:
        """Get a line item or raise CartItemNotFoundError."""
        item = self.get(product_id)
        if item is None:
            raise CartItemNotFoundError(product_id)
        return item

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.products)

    def __contains__(self, product_id: object) -> bool:
        return isinstance(product_id, str) and self._index_of(product_id) > -1

    # ---- subscriptions ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every new snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- mutations ----

    def add_to_cart(self, item: Union[ProductDescriptor, LineItem, Mapping, Any]) -> None:
        """
        Add one unit of a product; the given descriptor replaces stored metadata.

        Accepts a ProductDescriptor, a mapping with the descriptor keys, or any
        object with id/title/image_url/price attributes (e.g. a LineItem, whose
        quantity is ignored).
        """
        product = _as_descriptor(item)
        index = self._index_of(product.id)

        if index > -1:
            quantity = self._items[index].quantity + 1
            self._items[index] = LineItem.from_product(product, quantity=quantity)
        else:
            self._items.append(LineItem.from_product(product))

        self._notify()

    def increment(self, product_id: str) -> bool:
        """
        Add one unit to an existing line.

        Returns:
            False (and no change) if the product is not in the cart
        """
        index = self._index_of(product_id)
        if index < 0:
            self._log_missing("increment", product_id)
            return False

        current = self._items[index]
        self._items[index] = replace(current, quantity=current.quantity + 1)
        self._notify()
        return True

    def decrement(self, product_id: str) -> bool:
        """
        Remove one unit from an existing line, dropping the line at zero.

        Returns:
            False (and no change) if the product is not in the cart
        """
        index = self._index_of(product_id)
        if index < 0:
            self._log_missing("decrement", product_id)
            return False

        current = self._items[index]
        new_quantity = current.quantity - 1

        if new_quantity < 1:
            del self._items[index]
        else:
            self._items[index] = replace(current, quantity=new_quantity)

        self._notify()
        return True

    def _hydrate(self, items: Iterable[LineItem]) -> None:
        """Replace the whole cart with a loaded snapshot. Reserved for persistence."""
        self._items = _normalize(items)
        self._notify()

    # ---- internals ----

    def _index_of(self, product_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == product_id:
                return index
        return -1

    def _log_missing(self, operation: str, product_id: str) -> None:
        logger.warning(
            f"Cart {operation} ignored: product {sanitize_id_for_logging(product_id)} not in cart"
        )

    def _notify(self) -> None:
        self._version += 1
        version = self._version
        snapshot = self.products
        for listener in list(self._listeners):
            if self._version != version:
                # A listener changed the cart; the nested notify sent the newer snapshot
                break
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Cart listener failed: {e}", exc_info=True)


def _normalize(items: Iterable[LineItem]) -> List[LineItem]:
    """Enforce unique ids (last wins, first position kept) and quantity >= 1."""
    by_id = {}
    for item in items:
        if item.quantity < 1:
            logger.warning(
                f"Dropping cart line {sanitize_id_for_logging(item.id)} with quantity {item.quantity}"
            )
            by_id.pop(item.id, None)
            continue
        by_id[item.id] = item
    return list(by_id.values())


def _as_descriptor(item: Any) -> ProductDescriptor:
    if isinstance(item, ProductDescriptor):
        return item
    if isinstance(item, Mapping):
        return ProductDescriptor.from_dict(item)
    return ProductDescriptor(
        id=item.id,
        title=item.title,
        image_url=item.image_url,
        price=item.price,
    )
