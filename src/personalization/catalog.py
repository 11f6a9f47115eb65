"""Catalog providers.

The engine reads the catalog at call time through a zero-argument callable that
returns a sequence of products. This module provides a static in-memory
provider, the demo catalog and a CSV loader.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from src.personalization.exceptions import CatalogLoadError, InvalidProductError
from src.personalization.models import Product

# Configure module logger
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"id", "name", "category", "brand", "price", "rating", "reviews"}
LIST_SEPARATOR = "|"
TRUE_TOKENS = {"true", "yes", "y", "1"}
FALSE_TOKENS = {"false", "no", "n", "0"}


SAMPLE_PRODUCTS: List[Product] = [
    Product(
        id="1",
        name="Wireless Bluetooth Headphones",
        price=129.99,
        description="Premium wireless headphones with noise cancellation and 30-hour battery life.",
        category="Electronics",
        brand="TechPro",
        rating=4.5,
        reviews=234,
        tags=("wireless", "bluetooth", "noise-cancelling"),
    ),
    Product(
        id="2",
        name="Smart Fitness Watch",
        price=299.99,
        description="Advanced fitness tracking with heart rate monitoring, GPS, and 7-day battery life.",
        category="Wearables",
        brand="FitTech",
        rating=4.7,
        reviews=189,
        tags=("fitness", "smart", "gps", "health"),
    ),
    Product(
        id="3",
        name="Organic Cotton T-Shirt",
        price=39.99,
        description="Soft, sustainable organic cotton t-shirt in premium quality fabric.",
        category="Clothing",
        brand="EcoWear",
        rating=4.3,
        reviews=156,
        tags=("organic", "cotton", "sustainable", "casual"),
    ),
    Product(
        id="4",
        name="Professional Camera Lens",
        price=599.99,
        description="50mm f/1.8 prime lens for professional photography with exceptional image quality.",
        category="Photography",
        brand="LensMaster",
        rating=4.8,
        reviews=89,
        tags=("camera", "lens", "photography", "professional"),
    ),
    Product(
        id="5",
        name="Ergonomic Office Chair",
        price=449.99,
        description="Premium ergonomic office chair with lumbar support and adjustable height.",
        category="Furniture",
        brand="ComfortPro",
        rating=4.6,
        reviews=203,
        tags=("office", "ergonomic", "chair", "comfort"),
    ),
    Product(
        id="6",
        name='HP Pavilion 15.6" Laptop',
        price=899.99,
        description=(
            "Powerful HP Pavilion laptop with Intel Core i7 processor, 16GB RAM, "
            "512GB SSD, and NVIDIA GeForce graphics for work and entertainment."
        ),
        category="Electronics",
        brand="HP",
        rating=4.4,
        reviews=312,
        tags=("laptop", "computer", "gaming", "work", "portable"),
    ),
]


class StaticCatalog:
    """Fixed, ordered catalog snapshot usable as a catalog provider."""

    def __init__(self, products: Iterable[Product]):
        self._products = tuple(products)
        self._by_id: Dict[str, Product] = {p.id: p for p in self._products}

    def __call__(self) -> Sequence[Product]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    @property
    def product_ids(self) -> List[str]:
        return [p.id for p in self._products]


def _split_list(value) -> tuple:
    if pd.isna(value) or value == "":
        return ()
    return tuple(part.strip() for part in str(value).split(LIST_SEPARATOR) if part.strip())


def _parse_flag(value) -> bool:
    """Read an in_stock cell. Blank cells mean in stock.

    Raises:
        ValueError: If the value is not a recognized true or false token.
    """
    if pd.api.types.is_bool(value):
        return bool(value)
    if pd.isna(value):
        return True
    if pd.api.types.is_number(value):
        return value != 0
    token = str(value).strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ValueError(f"invalid in_stock value {value!r}")


def load_catalog_csv(csv_path: str) -> List[Product]:
    """Load products from a CSV file.

    Required columns are id, name, category, brand, price, rating and reviews.
    Optional columns are description, tags and images (both pipe separated)
    and in_stock.

    Args:
        csv_path: Path to the CSV file.

    Returns:
        Products in file order.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        CatalogLoadError: If columns are missing or a row is invalid.

    Example:
        >>> products = load_catalog_csv("data/catalog.csv")
        >>> catalog = StaticCatalog(products)
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Catalog file not found: {csv_path}")

    logger.info(f"Loading catalog from {csv_path}")
    df = pd.read_csv(csv_path, dtype={"id": str})

    if not REQUIRED_COLUMNS.issubset(df.columns):
        missing = REQUIRED_COLUMNS - set(df.columns)
        raise CatalogLoadError(csv_path, f"missing required columns: {sorted(missing)}")

    for column, default in (("description", ""), ("tags", ""), ("images", ""), ("in_stock", True)):
        if column not in df.columns:
            df[column] = default
    df["description"] = df["description"].fillna("")

    products = []
    for row in df.itertuples(index=False):
        try:
            products.append(
                Product(
                    id=str(row.id),
                    name=str(row.name),
                    description=str(row.description),
                    category=str(row.category),
                    brand=str(row.brand),
                    price=float(row.price),
                    rating=float(row.rating),
                    reviews=int(row.reviews),
                    tags=_split_list(row.tags),
                    images=_split_list(row.images),
                    in_stock=_parse_flag(row.in_stock),
                )
            )
        except (InvalidProductError, ValueError) as e:
            raise CatalogLoadError(csv_path, f"row {row.id}: {e}") from e

    logger.info(f"Loaded {len(products)} products")
    return products
