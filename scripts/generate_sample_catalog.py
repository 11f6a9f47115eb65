"""Generate a synthetic product catalog for testing and development.

Creates a CSV file in the format read by
``src.personalization.catalog.load_catalog_csv``: one product per row with
pipe-separated tags.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_sample_catalog.py --num-products 200

    Or import and use programmatically:
        from scripts.generate_sample_catalog import generate_catalog
        df = generate_catalog(num_products=50, seed=7)
"""

import argparse
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd

# Default configuration constants
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_OUTPUT = "data/catalog.csv"

CATEGORIES = {
    "Electronics": (["headphones", "laptop", "speaker", "tablet", "charger"], (19.0, 1500.0)),
    "Wearables": (["watch", "fitness band", "smart ring"], (49.0, 500.0)),
    "Clothing": (["t-shirt", "jacket", "hoodie", "jeans"], (15.0, 250.0)),
    "Photography": (["lens", "tripod", "camera bag", "flash"], (25.0, 2000.0)),
    "Furniture": (["chair", "desk", "shelf", "lamp"], (30.0, 900.0)),
}
BRANDS = ["TechPro", "FitTech", "EcoWear", "LensMaster", "ComfortPro", "HP", "Nimbus"]
ADJECTIVES = ["Wireless", "Smart", "Organic", "Professional", "Ergonomic", "Compact", "Premium"]


def generate_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate a synthetic catalog.

    Args:
        num_products: Number of products to create. Must be positive.
        seed: Random seed for reproducible catalogs.

    Returns:
        DataFrame with columns id, name, description, category, brand, price,
        rating, reviews, tags and in_stock.

    Raises:
        ValueError: If num_products is not positive.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    rng = np.random.default_rng(seed)
    categories = list(CATEGORIES)

    rows = []
    for product_id in range(1, num_products + 1):
        category = categories[int(rng.integers(len(categories)))]
        kinds, (low, high) = CATEGORIES[category]
        kind = kinds[int(rng.integers(len(kinds)))]
        adjective = ADJECTIVES[int(rng.integers(len(ADJECTIVES)))]
        brand = BRANDS[int(rng.integers(len(BRANDS)))]

        rows.append({
            "id": str(product_id),
            "name": f"{adjective} {kind.title()}",
            "description": f"{adjective} {kind} by {brand}.",
            "category": category,
            "brand": brand,
            "price": round(float(rng.uniform(low, high)), 2),
            "rating": round(float(rng.uniform(2.5, 5.0)), 1),
            "reviews": int(rng.integers(0, 500)),
            "tags": "|".join([adjective.lower(), kind]),
            "in_stock": bool(rng.random() > 0.1),
        })

    return pd.DataFrame(rows)


def main() -> None:
    """Generate a catalog and save it as CSV."""
    parser = argparse.ArgumentParser(description="Generate a synthetic product catalog")
    parser.add_argument("--num-products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", type=str, default=DEFAULT_OUTPUT)
    args = parser.parse_args()

    print(f"Generating {args.num_products} products...")
    try:
        df = generate_catalog(num_products=args.num_products, seed=args.seed)
    except ValueError as e:
        print(f"Error generating catalog: {e}")
        return

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)

    print(f"\nCatalog generated successfully!")
    print(f"Saved to: {output_path}")
    print(f"\nProducts per category:")
    print(df["category"].value_counts().to_string())


if __name__ == "__main__":
    main()
