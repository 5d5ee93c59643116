"""Cart models and snapshot (de)serialization."""
import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Union

Price = Union[int, float]


@dataclass(frozen=True)
class ProductDescriptor:
    """Product as supplied by the catalog when adding to the cart."""
    id: str
    title: str
    image_url: str
    price: Price

    @classmethod
    def from_dict(cls, data: dict) -> "ProductDescriptor":
        """Create from a catalog payload (accepts `imageUrl` as well)."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            image_url=data.get("image_url", data.get("imageUrl", "")),
            price=data.get("price", 0),
        )


@dataclass(frozen=True)
class LineItem:
    """Single product in the cart. Quantity is always >= 1 while stored."""
    id: str
    title: str
    image_url: str
    price: Price
    quantity: int = 1

    @classmethod
    def from_product(cls, product: ProductDescriptor, quantity: int = 1) -> "LineItem":
        return cls(
            id=product.id,
            title=product.title,
            image_url=product.image_url,
            price=product.price,
            quantity=quantity,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """Create from a stored dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            image_url=data.get("image_url", data.get("imageUrl", "")),
            price=data.get("price", 0),
            quantity=int(data["quantity"]),
        )


def dump_snapshot(items: Iterable[LineItem]) -> str:
    """Serialize the full cart to the persisted JSON array."""
    return json.dumps([item.to_dict() for item in items])


def parse_snapshot(raw: Union[str, bytes]) -> List[LineItem]:
    """
    Deserialize a persisted snapshot.

    Raises:
        json.JSONDecodeError: If the payload is not JSON
        KeyError, TypeError, ValueError: If entries do not have the line item shape
    """
    data: Any = json.loads(raw)
    if not isinstance(data, list):
        raise TypeError(f"Cart snapshot must be a JSON array, got {type(data).__name__}")
    return [LineItem.from_dict(entry) for entry in data]
