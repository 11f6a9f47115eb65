"""Domain types shared by the personalization engine.

Products and cart lines come from external collaborators and are treated as
read-only. Messages and scan results are immutable once created.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from src.personalization.exceptions import InvalidProductError

MAX_RATING = 5.0


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Product:
    """A catalog product.

    Attributes:
        id: Catalog identifier.
        name: Display name.
        category: Category label, e.g. "Electronics".
        brand: Brand label.
        price: Unit price, non-negative.
        rating: Average rating between 0 and 5.
        reviews: Number of reviews, non-negative.
        description: Free-text description.
        tags: Search tags.
        in_stock: Whether the product can currently be bought.
        images: Image URLs, unused by scoring.
    """

    id: str
    name: str
    category: str
    brand: str
    price: float
    rating: float
    reviews: int
    description: str = ""
    tags: Tuple[str, ...] = ()
    in_stock: bool = True
    images: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.price < 0:
            raise InvalidProductError(self.id, f"price must be >= 0, got {self.price}")
        if not 0 <= self.rating <= MAX_RATING:
            raise InvalidProductError(
                self.id, f"rating must be between 0 and {MAX_RATING}, got {self.rating}"
            )
        if self.reviews < 0:
            raise InvalidProductError(self.id, f"reviews must be >= 0, got {self.reviews}")
        # Accept lists from callers but keep the instance hashable
        object.__setattr__(self, "tags", tuple(self.tags))
        object.__setattr__(self, "images", tuple(self.images))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "price": self.price,
            "rating": self.rating,
            "reviews": self.reviews,
            "tags": list(self.tags),
            "in_stock": self.in_stock,
            "images": list(self.images),
        }


@dataclass(frozen=True)
class CartLine:
    """One product line of the shopper's cart."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    id: str
    role: Role
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ScanResult:
    """Output of the product recognition collaborator."""

    confidence: float
    bounding_box: BoundingBox = field(default_factory=lambda: BoundingBox(0.0, 0.0, 0.0, 0.0))
    product_id: Optional[str] = None
